import logging
import socket
import urllib.error
import urllib.request

import pytest

from ahoi.handlers import index
from ahoi.responder import ConfigurationError, Responder, parse_address


_opener = urllib.request.build_opener(urllib.request.ProxyHandler({}))


def _get(server, path):
    host, port = server.server_address[:2]
    with _opener.open(f"http://{host}:{port}{path}", timeout=5) as resp:
        return resp.status, resp.read()


def test_duplicate_path_is_rejected(responder) -> None:
    with pytest.raises(ConfigurationError):
        responder.register("/", index)
    assert list(responder.routes) == ["/", "/hostname"]


def test_route_table_is_read_only(responder) -> None:
    with pytest.raises(TypeError):
        responder.routes["/new"] = index


def test_same_handler_on_two_paths() -> None:
    r = Responder(__name__)
    r.register("/", index)
    r.register("/greeting", index)
    client = r.app.test_client()
    assert client.get("/greeting").data == b"Ahoi\n"


@pytest.mark.parametrize(
    "address,expected",
    [
        (":8080", ("0.0.0.0", 8080)),
        ("127.0.0.1:9000", ("127.0.0.1", 9000)),
        (("", 8080), ("0.0.0.0", 8080)),
        (("localhost", "81"), ("localhost", 81)),
    ],
)
def test_parse_address(address, expected) -> None:
    assert parse_address(address) == expected


def test_live_server_answers(live_server) -> None:
    assert _get(live_server, "/") == (200, b"Ahoi\n")

    status, body = _get(live_server, "/hostname")
    assert status == 200
    assert body == f"Host: {socket.gethostname()}\n".encode()

    with pytest.raises(urllib.error.HTTPError) as exc:
        _get(live_server, "/missing")
    assert exc.value.code == 404


def test_bound_responder_is_frozen(responder, live_server) -> None:
    assert responder.serving
    with pytest.raises(ConfigurationError):
        responder.register("/late", index)
    with pytest.raises(ConfigurationError):
        responder.serve(live_server.server_address[:2])


def test_second_listener_on_same_address_exits(live_server, caplog) -> None:
    other = Responder(__name__)
    other.register("/", index)

    with pytest.raises(SystemExit) as exc:
        other.serve(live_server.server_address[:2])

    assert exc.value.code == 1
    assert not other.serving
    assert any(
        record.levelno == logging.CRITICAL and "Could not listen" in record.getMessage()
        for record in caplog.records
    )


def test_rejected_rule_leaves_table_untouched() -> None:
    r = Responder(__name__)

    with pytest.raises(ConfigurationError):
        r.register("hostname", index)
    assert dict(r.routes) == {}

    r.register("/hostname", index)
    assert list(r.routes) == ["/hostname"]


def test_dotted_path_is_served() -> None:
    r = Responder(__name__)
    r.register("/v1.0", index)
    r.register("/v1_0", index)

    client = r.app.test_client()
    assert client.get("/v1.0").data == b"Ahoi\n"
    assert client.get("/v1_0").data == b"Ahoi\n"
