import pytest

from webneg.exc import HTTPException, HTTPNotAcceptable


def test_not_acceptable_attributes():
    exc = HTTPNotAcceptable('no luck', accepts=('html', 'json'))
    assert exc.code == 406
    assert exc.title == 'Not Acceptable'
    assert exc.status == '406 Not Acceptable'
    assert exc.accepts == ['html', 'json']
    assert exc.detail == 'no luck'
    assert str(exc) == 'no luck'


def test_not_acceptable_without_detail():
    exc = HTTPNotAcceptable()
    assert exc.accepts == []
    assert str(exc) == HTTPNotAcceptable.explanation


def test_is_exception():
    with pytest.raises(HTTPException):
        raise HTTPNotAcceptable('boom')


def test_plain_response(make_environ, start_response):
    exc = HTTPNotAcceptable('line one\nline two')
    environ = make_environ(accept='application/xml')
    body = b''.join(exc(environ, start_response))
    assert start_response.status == '406 Not Acceptable'
    assert start_response.header('Content-Type') == \
        'text/plain; charset=UTF-8'
    assert start_response.header('Content-Length') == str(len(body))
    assert body.startswith(b'406 Not Acceptable\n\n')
    assert b'(content of type application/xml)' in body
    assert body.endswith(b'line one\nline two')


def test_plain_response_without_accept(make_environ, start_response):
    exc = HTTPNotAcceptable('detail')
    body = b''.join(exc(make_environ(), start_response))
    assert start_response.header('Content-Type') == \
        'text/plain; charset=UTF-8'
    assert HTTPNotAcceptable.explanation.encode('ascii') in body


def test_html_response(make_environ, start_response):
    exc = HTTPNotAcceptable('<script>', comment='a comment')
    environ = make_environ(accept='text/html;q=0.9')
    body = b''.join(exc(environ, start_response))
    assert start_response.header('Content-Type') == \
        'text/html; charset=UTF-8'
    assert b'<title>406 Not Acceptable</title>' in body
    assert b'&lt;script&gt;' in body
    assert b'<script>' not in body
    assert b'<!-- a comment -->' in body


def test_html_response_multiline_detail(make_environ, start_response):
    exc = HTTPNotAcceptable('one\ntwo')
    body = b''.join(exc(make_environ(accept='*/*'), start_response))
    assert b'<pre>one\ntwo</pre>' in body


def test_extra_headers(make_environ, start_response):
    exc = HTTPNotAcceptable('x', headers=[('Vary', 'Accept')])
    exc(make_environ(), start_response)
    assert start_response.header('Vary') == 'Accept'


def test_head_request(make_environ, start_response):
    exc = HTTPNotAcceptable('x')
    assert exc(make_environ(method='HEAD'), start_response) == [b'']
    assert start_response.status == '406 Not Acceptable'


def test_response_is_repeatable(make_environ, start_response):
    exc = HTTPNotAcceptable('x')
    first = b''.join(exc(make_environ(accept='application/xml'),
                         start_response))
    second = b''.join(exc(make_environ(accept='application/xml'),
                          start_response))
    assert first == second
