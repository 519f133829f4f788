"""
Content negotiation driven by the ``Accept`` header.

An endpoint declares the formats it can produce, most preferred first, and
:meth:`Negotiator.negotiate` picks the one to use for a request::

    >>> negotiator = Negotiator()
    >>> negotiator.negotiate(None, ['application/json'], ['html', 'json'])
    Chosen(format='json')

The result is either :class:`Chosen` or :class:`Refused`; nothing is raised
unless :meth:`Negotiator.negotiate_or_raise` is used.

Browsers have historically sent unhelpful ``Accept`` headers, so a missing
header or a bare ``*/*`` always selects the first declared format.  An
explicit format (usually the ``_format`` request parameter) takes precedence
over the header altogether.
"""

import logging
from collections import namedtuple

from webneg.acceptparse import parse_media_type, parse_q
from webneg.exc import HTTPNotAcceptable
from webneg.mimetable import MimeTable

__all__ = [
    'ANY', 'TypeRange', 'MediaRange', 'RankedCandidate', 'Chosen',
    'Refused', 'Negotiator', 'find_format', 'negotiate',
]

log = logging.getLogger(__name__)

#: Extension set of ``*/*``: matches whatever is declared first.
ANY = '*/*'


class TypeRange(namedtuple('TypeRange', 'type')):
    """Extension set of a ``type/*`` range: any format whose MIME type has
    this top level type."""

    __slots__ = ()

    def __repr__(self):
        return '%s/*' % self.type


MediaRange = namedtuple('MediaRange', 'type subtype q raw')

RankedCandidate = namedtuple('RankedCandidate', 'negated_q raw exts')


class Chosen(namedtuple('Chosen', 'format')):
    """Negotiation succeeded with `format`, one of the declared formats."""

    __slots__ = ()

    def __bool__(self):
        return True


class Refused(namedtuple('Refused', 'accepted attempted message rejected',
                          defaults=(None,))):
    """
    No declared format is acceptable.

    `accepted` is the declared formats, `attempted` the
    :class:`RankedCandidate` list built from the header (empty when an
    explicit format was refused) and `message` a readable diagnostic.
    `rejected` is the explicit format that was refused, or ``None`` when
    the refusal comes from the ``Accept`` header.
    """

    __slots__ = ()

    def __bool__(self):
        return False

    def exception(self):
        """Return the :class:`~webneg.exc.HTTPNotAcceptable` for this
        refusal."""
        return HTTPNotAcceptable(self.message, accepts=self.accepted)


def _format_exts(exts):
    if exts == ANY:
        return repr(exts)
    if isinstance(exts, TypeRange):
        return repr(exts.type)
    return repr(list(exts))


def _refuse_explicit(fmt, accepted):
    return Refused(
        list(accepted), [],
        'unknown format %r, expected one of %r' % (fmt, list(accepted)),
        rejected=fmt)


def _refuse_header(candidates, accepted):
    lines = [
        'no supported media type in accept header.',
        'Expected one of %r but got the following formats:' % list(accepted),
    ]
    for candidate in candidates:
        lines.append('  * %r with extensions: %s' % (
            candidate.raw, _format_exts(candidate.exts)))
    lines.extend([
        'To accept custom formats, register them on the MIME table:',
        '    MimeTable.default().with_types({',
        '        "application/xml": ["xml"],',
        '    })',
    ])
    return Refused(list(accepted), list(candidates), '\n'.join(lines))


def find_format(exts, accepted, table):
    """
    Return the declared format matched by `exts`, or ``None``.

    * ``ANY`` matches the first of `accepted`.
    * A :class:`TypeRange` matches the first of `accepted` whose MIME type,
      according to `table`, has that top level type.
    * Otherwise `exts` is a sequence of format tokens in table order, and
      the first one present in `accepted` matches.
    """
    if exts == ANY:
        return accepted[0]
    if isinstance(exts, TypeRange):
        for fmt in accepted:
            parsed = parse_media_type(table.mime_type_for(fmt))
            if parsed is not None and parsed[0] == exts.type:
                return fmt
        return None
    for ext in exts:
        if ext in accepted:
            return ext
    return None


class Negotiator(object):
    """
    Picks a response format from request signals.

    :param table: the :class:`~webneg.mimetable.MimeTable` used to resolve
                  media ranges to formats; defaults to
                  :meth:`MimeTable.default`.

    A negotiator keeps no state between calls and may be shared across
    threads.
    """

    def __init__(self, table=None):
        if table is None:
            table = MimeTable.default()
        self.table = table

    def __repr__(self):
        return '<%s table=%r>' % (self.__class__.__name__, self.table)

    def parse_entry(self, entry):
        """
        Parse one comma separated `entry` of an ``Accept`` header into a
        :class:`MediaRange`, or ``None`` if it is not a media range.
        """
        parsed = parse_media_type(entry)
        if parsed is None:
            return None
        type_, subtype, params = parsed
        return MediaRange(type_, subtype, parse_q(params), entry)

    def resolve(self, media_range):
        """Return the extension set of `media_range`."""
        if media_range.type == '*' and media_range.subtype == '*':
            return ANY
        if media_range.subtype == '*':
            return TypeRange(media_range.type)
        return self.table.extensions_for(media_range.type, media_range.subtype)

    def negotiate(self, explicit_format, accept_header_lines, accepted):
        """
        Choose one of `accepted` for a request.

        :param explicit_format: format asked for by the request itself
                                (``_format`` parameter), or ``None``
        :param accept_header_lines: the raw ``Accept`` header values, in the
                                    order received; only the first is read
        :param accepted: non-empty sequence of format tokens the endpoint
                         can produce, most preferred first
        :return: :class:`Chosen` or :class:`Refused`
        :raises ValueError: if `accepted` is empty
        """
        accepted = list(accepted)
        if not accepted:
            raise ValueError('at least one accepted format is required')

        if explicit_format is not None:
            if explicit_format in accepted:
                log.debug('explicit format %r chosen', explicit_format)
                return Chosen(explicit_format)
            log.info('explicit format %r refused, accepted %r',
                     explicit_format, accepted)
            return _refuse_explicit(explicit_format, accepted)

        accept_header_lines = list(accept_header_lines)
        if not accept_header_lines or accept_header_lines[0] == ANY:
            log.debug('no usable Accept header, defaulting to %r', accepted[0])
            return Chosen(accepted[0])

        candidates = []
        for entry in accept_header_lines[0].split(','):
            media_range = self.parse_entry(entry)
            if media_range is None:
                continue
            exts = self.resolve(media_range)
            if media_range.q == 1.0:
                fmt = find_format(exts, accepted, self.table)
                if fmt is not None:
                    log.debug('format %r chosen by %r', fmt, entry)
                    return Chosen(fmt)
            candidates.append(
                RankedCandidate(-media_range.q, media_range.raw, exts))

        # ties on q fall back to the raw header text
        for candidate in sorted(candidates, key=lambda c: c[:2]):
            fmt = find_format(candidate.exts, accepted, self.table)
            if fmt is not None:
                log.debug('format %r chosen by %r', fmt, candidate.raw)
                return Chosen(fmt)

        log.info('no acceptable format in %r, accepted %r',
                 accept_header_lines[0], accepted)
        return _refuse_header(candidates, accepted)

    def negotiate_or_raise(self, explicit_format, accept_header_lines,
                           accepted):
        """
        Like :meth:`negotiate` but return the chosen format itself.

        :raises webneg.exc.HTTPNotAcceptable: on refusal
        """
        outcome = self.negotiate(explicit_format, accept_header_lines,
                                 accepted)
        if not outcome:
            raise outcome.exception()
        return outcome.format


default_negotiator = Negotiator()


def negotiate(explicit_format, accept_header_lines, accepted):
    """:meth:`Negotiator.negotiate` using the default MIME table."""
    return default_negotiator.negotiate(
        explicit_format, accept_header_lines, accepted)
