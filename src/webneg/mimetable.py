"""
Lookup table between MIME types and format tokens.

A format token is a file extension without its leading dot (``html``,
``json``).  A :class:`MimeTable` never changes once built; use
:meth:`MimeTable.with_types` to get a table with extra types registered.
"""

import logging
import mimetypes

__all__ = ['MimeTable', 'WEB_TYPES', 'DEFAULT_MIME_TYPE']

log = logging.getLogger(__name__)

DEFAULT_MIME_TYPE = 'application/octet-stream'

# Applied over the standard library defaults so that the formats web
# applications declare resolve the same way on every platform, first
# token preferred.
WEB_TYPES = {
    'text/html': ['html', 'htm'],
    'application/xhtml+xml': ['xhtml'],
    'application/json': ['json'],
    'application/ld+json': ['jsonld'],
    'text/xml': ['xml'],
    'application/xml': ['xml'],
    'text/plain': ['txt', 'text'],
    'text/csv': ['csv'],
    'text/css': ['css'],
    'application/javascript': ['js'],
    'text/javascript': ['js'],
    'application/atom+xml': ['atom'],
    'application/rss+xml': ['rss'],
    'text/calendar': ['ics'],
    'text/event-stream': ['event-stream'],
    'application/pdf': ['pdf'],
}


def _format_token(ext):
    return ext.lstrip('.').lower()


class MimeTable(object):
    """
    Immutable mapping of MIME types to format tokens and back.

    :param types: a mapping of ``type/subtype`` to a list of format tokens,
                  most preferred first.  When several types claim the same
                  token, the one registered last is its canonical type.
    """

    def __init__(self, types=None):
        self._extensions = {}
        self._types = {}
        if types:
            self._register(types)

    def _register(self, types):
        for mime_type, extensions in types.items():
            mime_type = mime_type.strip().lower()
            tokens = tuple(_format_token(ext) for ext in extensions)
            self._extensions[mime_type] = tokens
            for token in tokens:
                self._types[token] = mime_type

    @classmethod
    def from_mimetypes(cls):
        """
        Build a table from the standard library's built-in type database.

        System ``mime.types`` files are not read, so the result does not
        depend on the host.
        """
        db = mimetypes.MimeTypes()
        return cls(db.types_map_inv[True])

    @classmethod
    def default(cls):
        """The process wide table: standard library types plus
        :data:`WEB_TYPES`."""
        return default_table

    def with_types(self, types):
        """
        Return a new table with `types` registered on top of this one.

        A type listed in `types` has its tokens replaced, not extended.
        """
        table = self.__class__()
        table._extensions = dict(self._extensions)
        table._types = dict(self._types)
        table._register(types)
        log.debug('registered custom types: %s', ', '.join(sorted(types)))
        return table

    def extensions_for(self, type, subtype):
        """
        Return the format tokens known for ``type/subtype``, in preference
        order, or an empty tuple.
        """
        return self._extensions.get(
            '%s/%s' % (type.lower(), subtype.lower()), ())

    def mime_type_for(self, format):
        """
        Return the canonical ``type/subtype`` of `format`, or
        ``application/octet-stream`` if the token is unknown.
        """
        return self._types.get(_format_token(format), DEFAULT_MIME_TYPE)

    def __contains__(self, format):
        return _format_token(format) in self._types

    def __len__(self):
        return len(self._extensions)

    def __repr__(self):
        return '<%s at 0x%x: %d types>' % (
            self.__class__.__name__, abs(id(self)), len(self))


default_table = MimeTable.from_mimetypes().with_types(WEB_TYPES)
