"""
Unit tests for HTTPServer connection processing, without a listener.
"""

import socket

import pytest

from minihttp.config import ServerConfig
from minihttp.core.connection import Connection
from minihttp.http import Router, ResponseBuilder
from minihttp.server import HTTPServer


def read_all(sock: socket.socket) -> bytes:
    sock.settimeout(2.0)
    data = b""
    while True:
        chunk = sock.recv(4096)
        if not chunk:
            return data
        data += chunk


@pytest.fixture
def socket_pair():
    server_sock, client_sock = socket.socketpair()
    yield server_sock, client_sock
    server_sock.close()
    client_sock.close()


def make_server(router: Router) -> HTTPServer:
    server = HTTPServer(ServerConfig(port=0, timeout=2.0), router)
    server._handler = router.handle
    return server


class TestProcessConnection:

    def test_handler_exception_is_500(self, socket_pair):
        server_sock, client_sock = socket_pair
        router = Router()

        @router.get("/boom")
        def boom(request):
            raise RuntimeError("boom")

        client_sock.sendall(b"GET /boom HTTP/1.1\r\n\r\n")
        make_server(router)._process_connection(Connection(server_sock, ("127.0.0.1", 1)))

        assert read_all(client_sock).startswith(b"HTTP/1.1 500 Internal Server Error\r\n")

    def test_binary_response_written_in_two_parts(self, socket_pair):
        server_sock, client_sock = socket_pair
        router = Router()
        router.get("/bin")(lambda request: ResponseBuilder().octet_stream(b"\x00\x01\x02").build())

        client_sock.sendall(b"GET /bin HTTP/1.1\r\n\r\n")
        make_server(router)._process_connection(Connection(server_sock, ("127.0.0.1", 1)))

        assert read_all(client_sock) == (
            b"HTTP/1.1 200 OK\r\n"
            b"Content-Type: application/octet-stream\r\n"
            b"Content-Length: 3\r\n"
            b"\r\n"
            b"\x00\x01\x02"
        )

    def test_queue_full_is_503(self, socket_pair, monkeypatch):
        server_sock, client_sock = socket_pair
        server = make_server(Router())
        monkeypatch.setattr(server._thread_pool, "submit", lambda func, args=(): False)

        server._handle_connection(Connection(server_sock, ("127.0.0.1", 1)))

        assert read_all(client_sock).startswith(b"HTTP/1.1 503 Service Unavailable\r\n")

    def test_invalid_config_rejected(self):
        with pytest.raises(ValueError):
            HTTPServer(ServerConfig(port=70000))
