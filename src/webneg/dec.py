"""
WSGI middleware running content negotiation in front of an application.

:class:`accepts` wraps a WSGI application; for each request it negotiates
one of the declared formats and records it in the environ before calling
the application, or answers ``406 Not Acceptable`` itself::

    @accepts(['html', 'json'])
    def app(environ, start_response):
        fmt = get_format(environ)
        ...

or, without the decorator syntax, ``app = accepts(['html', 'json'], app)``.
"""

import logging

from webneg.exc import HTTPNotAcceptable
from webneg.negotiate import Negotiator
from webneg.request import FORMAT_KEY, RequestContext

__all__ = ['accepts', 'get_format', 'CONTEXT_KEY']

log = logging.getLogger(__name__)

#: Environ key holding the :class:`~webneg.request.RequestContext`.
CONTEXT_KEY = 'webneg.context'


class accepts(object):
    """
    Negotiate one of `formats` for every request made to `app`.

    :param formats: format tokens the application can produce, most
                    preferred first
    :param app: the WSGI application; leave out to use as a decorator
    :param table: :class:`~webneg.mimetable.MimeTable` to resolve media
                  ranges with, the default table if not given
    :param raise_errors: raise :class:`~webneg.exc.HTTPNotAcceptable`
                         instead of serving the 406 response
    :param charset: charset of the query string and form fields
    """

    ContextClass = RequestContext

    def __init__(self, formats, app=None, table=None, raise_errors=False,
                 charset='utf-8'):
        self.formats = list(formats)
        if not self.formats:
            raise ValueError('at least one accepted format is required')
        self.app = app
        self.table = table
        self.negotiator = Negotiator(table)
        self.raise_errors = raise_errors
        self.charset = charset

    def __repr__(self):
        return '%s(%r, app=%r)' % (
            self.__class__.__name__, self.formats, self.app)

    def clone(self, app):
        return self.__class__(
            self.formats, app, table=self.table,
            raise_errors=self.raise_errors, charset=self.charset)

    def __call__(self, environ, start_response=None):
        if self.app is None:
            if start_response is not None:
                raise TypeError(
                    'Unbound %s can only be called with the application '
                    'it will wrap' % self.__class__.__name__)
            return self.clone(environ)

        ctx = self.ContextClass.from_environ(environ, self.charset)
        try:
            ctx = ctx.accepts(self.formats, self.negotiator)
        except HTTPNotAcceptable as e:
            if self.raise_errors:
                raise
            return e(environ, start_response)
        environ[FORMAT_KEY] = ctx.get_format()
        environ[CONTEXT_KEY] = ctx
        log.debug('%s %s negotiated as %r',
                  environ.get('REQUEST_METHOD'), environ.get('PATH_INFO'),
                  environ[FORMAT_KEY])
        return self.app(environ, start_response)


def get_format(environ):
    """
    Return the format negotiated for the request of `environ`.

    Falls back to the ``_format`` request parameter when the request did not
    go through :class:`accepts`.
    """
    fmt = environ.get(FORMAT_KEY)
    if fmt is not None:
        return fmt
    ctx = environ.get(CONTEXT_KEY)
    if ctx is None:
        ctx = RequestContext.from_environ(environ)
    return ctx.get_format()
