import io
import logging
import random
import threading
from contextlib import contextmanager
from wsgiref.simple_server import ServerHandler
from wsgiref.simple_server import WSGIRequestHandler
from wsgiref.simple_server import WSGIServer
from wsgiref.simple_server import make_server
from wsgiref.util import setup_testing_defaults

import pytest

log = logging.getLogger(__name__)
ServerHandler.handle_error = lambda self: None


class QuietHandler(WSGIRequestHandler):
    def log_request(self, *args):
        pass


class QuietServer(WSGIServer):
    def handle_error(self, req, addr):
        pass


def _make_test_server(app):
    maxport = ((1 << 16) - 1)

    # we'll make 3 attempts to find a free port

    for i in range(3, 0, -1):
        try:
            port = random.randint(maxport // 2, maxport)
            server = make_server(
                'localhost',
                port,
                app,
                server_class=QuietServer,
                handler_class=QuietHandler,
            )
            server.timeout = 5
            return server
        except OSError:
            if i == 1:
                raise


@pytest.fixture
def serve():
    @contextmanager
    def _serve(app):
        server = _make_test_server(app)
        try:
            worker = threading.Thread(target=server.serve_forever)
            worker.daemon = True
            worker.start()
            server.url = "http://localhost:%d" % server.server_port
            log.debug("server started on %s", server.url)

            yield server
        finally:
            log.debug("shutting server down")
            server.shutdown()
            server.server_close()
            worker.join(1)
            if worker.is_alive():
                log.warning('worker is hanged')
            else:
                log.debug("server stopped")

    return _serve


@pytest.fixture
def make_environ():
    def _make_environ(path='/', query='', method='GET', accept=None,
                      body=b'', content_type=None):
        environ = {
            'PATH_INFO': path,
            'QUERY_STRING': query,
            'REQUEST_METHOD': method,
            'wsgi.input': io.BytesIO(body),
            'CONTENT_LENGTH': str(len(body)),
        }
        if accept is not None:
            environ['HTTP_ACCEPT'] = accept
        if content_type is not None:
            environ['CONTENT_TYPE'] = content_type
        setup_testing_defaults(environ)
        return environ

    return _make_environ


@pytest.fixture
def start_response():
    class StartResponse(object):
        status = None
        headers = None

        def __call__(self, status, headers, exc_info=None):
            self.status = status
            self.headers = headers

        def header(self, name):
            for key, value in self.headers:
                if key.lower() == name.lower():
                    return value

    return StartResponse()
