import threading

import pytest

from ahoi.app import app as ahoi_app
from ahoi.handlers import hostname, index
from ahoi.responder import Responder


@pytest.fixture
def app():
    return ahoi_app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def runner(app):
    return app.test_cli_runner()


@pytest.fixture
def responder() -> Responder:
    r = Responder(__name__)
    r.register("/", index)
    r.register("/hostname", hostname)
    return r


@pytest.fixture
def live_server(responder):
    """A bound responder serving on an ephemeral loopback port."""
    server = responder.bind(("127.0.0.1", 0))
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()

    yield server

    server.shutdown()
    server.server_close()
    thread.join(timeout=5)
