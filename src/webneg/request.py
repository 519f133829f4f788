"""
Per-request negotiation state.

:class:`RequestContext` is an immutable snapshot of what negotiation needs
from a request: its parameters, its ``Accept`` header and a private
namespace where results are recorded.  Recording a result returns a new
context, so callers thread the context through their handlers::

    ctx = RequestContext.from_environ(environ)
    ctx = ctx.accepts(['html', 'json'])
    ctx.get_format()
"""

import io
import logging
from types import MappingProxyType

import multipart

from webneg.negotiate import default_negotiator
from webneg.util import parse_qsl_text

__all__ = ['RequestContext', 'FORMAT_KEY', 'get_format']

log = logging.getLogger(__name__)

#: Private key under which the negotiated format is recorded.
FORMAT_KEY = 'webneg.format'

FORM_CONTENT_TYPES = (
    'application/x-www-form-urlencoded',
    'application/x-url-encoded',
    'multipart/form-data',
)


def _content_type(environ):
    return environ.get('CONTENT_TYPE', '').split(';', 1)[0].strip().lower()


def read_form_params(environ, charset='utf-8'):
    """
    Decode a form encoded request body into a dict.

    The body is buffered and ``wsgi.input`` replaced with a fresh stream, so
    the application can still read it.  Requests other than ``POST``,
    ``PUT`` and ``PATCH``, and bodies of other content types, give an empty
    dict.  Without ``CONTENT_LENGTH`` the body is only read when the server
    sets ``wsgi.input_terminated``; otherwise ``wsgi.input`` is left alone.
    When a field repeats, its last value wins.
    """
    method = environ.get('REQUEST_METHOD', 'GET').upper()
    if method not in ('POST', 'PUT', 'PATCH'):
        return {}
    if _content_type(environ) not in FORM_CONTENT_TYPES:
        return {}
    stream = environ['wsgi.input']
    content_length = environ.get('CONTENT_LENGTH')
    if content_length:
        try:
            length = int(content_length)
        except ValueError:
            return {}
        body = stream.read(length) if length > 0 else b''
    elif environ.get('wsgi.input_terminated'):
        body = stream.read()
    else:
        # unknown length, reading could block or lose the body
        return {}
    environ['wsgi.input'] = io.BytesIO(body)

    form_environ = dict(environ)
    form_environ['wsgi.input'] = io.BytesIO(body)
    form_environ['CONTENT_LENGTH'] = str(len(body))
    # multipart only parses POST and PUT bodies
    form_environ['REQUEST_METHOD'] = 'POST'
    forms, files = multipart.parse_form_data(form_environ, charset=charset)
    for name, part in files.iterallitems():
        part.close()
    return dict((name, forms[name]) for name in forms)


class RequestContext(object):
    """
    Immutable view of a request for content negotiation.

    :param params: request parameters (query string and form fields)
    :param accept_header_lines: raw ``Accept`` header values
    :param private: values recorded by the pipeline, see :data:`FORMAT_KEY`
    :param environ: the WSGI environ the context was built from, if any
    """

    format_param = '_format'

    __slots__ = ('params', 'accept_header_lines', 'private', 'environ')

    def __init__(self, params=None, accept_header_lines=(), private=None,
                 environ=None):
        object.__setattr__(self, 'params', MappingProxyType(dict(params or {})))
        object.__setattr__(self, 'accept_header_lines',
                           tuple(accept_header_lines))
        object.__setattr__(self, 'private',
                           MappingProxyType(dict(private or {})))
        object.__setattr__(self, 'environ', environ)

    def __setattr__(self, name, value):
        raise AttributeError('%s is immutable' % self.__class__.__name__)

    def __repr__(self):
        return '<%s params=%r accept=%r private=%r>' % (
            self.__class__.__name__, dict(self.params),
            self.accept_header_lines, dict(self.private))

    @classmethod
    def from_environ(cls, environ, charset='utf-8'):
        """
        Build a context from a WSGI environ.

        Parameters are the query string fields with the form body fields
        laid over them: a body field wins over a query string field of the
        same name.
        """
        params = dict(parse_qsl_text(environ.get('QUERY_STRING', ''),
                                     charset))
        params.update(read_form_params(environ, charset))
        accept = environ.get('HTTP_ACCEPT')
        lines = [accept] if accept is not None else []
        return cls(params, lines, environ=environ)

    @property
    def explicit_format(self):
        """The format asked for in the request parameters, or ``None``."""
        return self.params.get(self.format_param)

    def put_private(self, key, value):
        """Return a copy of this context with `key` set to `value` in
        :attr:`private`."""
        private = dict(self.private)
        private[key] = value
        return self.__class__(self.params, self.accept_header_lines,
                              private, self.environ)

    def put_format(self, format):
        return self.put_private(FORMAT_KEY, format)

    def get_format(self):
        """
        Return the negotiated format, or the format asked for in the
        request parameters when negotiation never ran.
        """
        return self.private.get(FORMAT_KEY) or self.explicit_format

    def negotiate(self, accepted, negotiator=None):
        """Run negotiation for this request and return its outcome."""
        negotiator = negotiator or default_negotiator
        return negotiator.negotiate(
            self.explicit_format, self.accept_header_lines, accepted)

    def accepts(self, accepted, negotiator=None):
        """
        Negotiate and return a context with the chosen format recorded.

        :raises webneg.exc.HTTPNotAcceptable: if no format in `accepted`
                                               is acceptable
        """
        outcome = self.negotiate(accepted, negotiator)
        if not outcome:
            raise outcome.exception()
        log.debug('recorded format %r', outcome.format)
        return self.put_format(outcome.format)


def get_format(context):
    """Return the format recorded on `context`, see
    :meth:`RequestContext.get_format`."""
    return context.get_format()
