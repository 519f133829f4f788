"""
HTTP error raised when content negotiation fails.

:class:`HTTPNotAcceptable` is both an exception and a WSGI application, so
it can be raised from deep inside request handling and then served as the
response::

    try:
        fmt = negotiator.negotiate_or_raise(None, lines, ['html', 'json'])
    except HTTPNotAcceptable as e:
        return e(environ, start_response)

The body is rendered as HTML when the client accepts ``text/html`` and as
plain text otherwise.
"""

from string import Template

from webneg.util import bytes_, html_escape

__all__ = ['HTTPException', 'HTTPNotAcceptable']


class HTTPException(Exception):
    """
    Base class for errors that render themselves as an HTTP response.

    Subclasses set ``code``, ``title`` and ``explanation``.  ``detail`` is
    the message for this particular failure and ``comment`` is extra text
    only shown in the HTML comment of the page.
    """

    code = None
    title = None
    explanation = ''

    plain_template_obj = Template('''\
${status}

${body}''')

    html_template_obj = Template('''\
<html>
 <head>
  <title>${status}</title>
 </head>
 <body>
  <h1>${status}</h1>
  ${body}
 </body>
</html>''')

    body_template_obj = Template('''\
${explanation}<br /><br />
${detail}
<!-- ${comment} -->''')

    def __init__(self, detail=None, headers=None, comment=None):
        Exception.__init__(self, detail or self.explanation)
        self.detail = detail
        self.headers = list(headers or [])
        self.comment = comment

    @property
    def status(self):
        return '%s %s' % (self.code, self.title)

    def explanation_for(self, environ):
        return self.explanation

    def plain_body(self, environ):
        body = self.explanation_for(environ)
        if self.detail:
            body += '\n\n' + self.detail
        return self.plain_template_obj.substitute(
            status=self.status, body=body)

    def html_body(self, environ):
        # pre keeps the line structure of multi line details
        detail = html_escape(self.detail or '')
        if '\n' in detail:
            detail = '<pre>%s</pre>' % detail
        body = self.body_template_obj.substitute(
            explanation=html_escape(self.explanation_for(environ)),
            detail=detail,
            comment=html_escape(self.comment or ''))
        return self.html_template_obj.substitute(
            status=self.status, body=body)

    def __call__(self, environ, start_response):
        accept = environ.get('HTTP_ACCEPT', '')
        if 'html' in accept or '*/*' in accept:
            content_type = 'text/html; charset=UTF-8'
            body = self.html_body(environ)
        else:
            content_type = 'text/plain; charset=UTF-8'
            body = self.plain_body(environ)
        body = bytes_(body, 'utf-8')
        headers = [
            ('Content-Type', content_type),
            ('Content-Length', str(len(body))),
        ]
        headers.extend(self.headers)
        start_response(self.status, headers)
        if environ.get('REQUEST_METHOD') == 'HEAD':
            return [b'']
        return [body]

    def __str__(self):
        return self.detail or self.explanation


class HTTPNotAcceptable(HTTPException):
    """
    The requested resource can not be served in any format the client
    accepts.

    :param accepts: the formats the endpoint declared, kept so error
                    handlers can tell the client what is available

    code: 406, title: Not Acceptable
    """

    code = 406
    title = 'Not Acceptable'
    explanation = (
        'The resource could not be generated that was acceptable to '
        'your browser.')

    def __init__(self, detail=None, headers=None, comment=None,
                 accepts=()):
        self.accepts = list(accepts)
        HTTPException.__init__(self, detail, headers, comment)

    def explanation_for(self, environ):
        accept = environ.get('HTTP_ACCEPT')
        if not accept:
            return self.explanation
        return '%s (content of type %s)' % (self.explanation[:-1], accept)
