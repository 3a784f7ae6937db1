"""
Unit tests for client connections, over a local socket pair.
"""

import socket
import threading
import time
from typing import Generator, Tuple

import pytest

from userapi.core.connection import (
    DRAIN_SECONDS,
    Connection,
    ConnectionState,
    declared_body_length,
)


@pytest.fixture
def socket_pair() -> Generator[Tuple[socket.socket, socket.socket], None, None]:
    server_side, client_side = socket.socketpair()
    yield server_side, client_side
    client_side.close()
    server_side.close()


def make_connection(sock: socket.socket, **kwargs) -> Connection:
    return Connection(socket=sock, address=("127.0.0.1", 50000), **kwargs)


class TestReadRequest:

    def test_reads_across_small_chunks(self, socket_pair):
        server_side, client_side = socket_pair
        raw = b"GET /users HTTP/1.1\r\nHost: localhost\r\nUser-Agent: pytest\r\n\r\n"
        client_side.sendall(raw)

        conn = make_connection(server_side, buffer_size=8)

        assert conn.read_request() == raw
        assert conn.state == ConnectionState.PROCESSING

    def test_reads_body_to_content_length(self, socket_pair):
        server_side, client_side = socket_pair
        body = b'{"name":"' + b"a" * 3000 + b'","email":"a@x.com"}'
        raw = (
            b"POST /users HTTP/1.1\r\n"
            b"Content-Length: " + str(len(body)).encode() + b"\r\n\r\n" + body
        )
        client_side.sendall(raw)

        conn = make_connection(server_side, buffer_size=512)

        assert conn.read_request() == raw

    def test_nothing_sent(self, socket_pair):
        server_side, client_side = socket_pair
        client_side.shutdown(socket.SHUT_WR)

        assert make_connection(server_side).read_request() is None

    def test_peer_closes_before_blank_line(self, socket_pair):
        server_side, client_side = socket_pair
        client_side.sendall(b"garbage")
        client_side.shutdown(socket.SHUT_WR)

        assert make_connection(server_side).read_request() == b"garbage"

    def test_short_body_returns_what_arrived(self, socket_pair):
        server_side, client_side = socket_pair
        raw = b"PUT /users/1 HTTP/1.1\r\nContent-Length: 100\r\n\r\n{}"
        client_side.sendall(raw)
        client_side.shutdown(socket.SHUT_WR)

        assert make_connection(server_side).read_request() == raw

    def test_too_large(self, socket_pair):
        server_side, client_side = socket_pair
        client_side.sendall(b"GET /" + b"x" * 2000 + b" HTTP/1.1\r\n\r\n")

        conn = make_connection(server_side, max_request_size=1024)

        with pytest.raises(ValueError):
            conn.read_request()

    def test_stalled_client_times_out(self, socket_pair):
        server_side, client_side = socket_pair
        client_side.sendall(b"GET /users HTTP/1.1\r\n")

        conn = make_connection(server_side, timeout=0.1)

        with pytest.raises(TimeoutError):
            conn.read_request()


class TestContentLength:

    @pytest.mark.parametrize("headers, expected", [
        (b"POST /users HTTP/1.1\r\nContent-Length: 12", 12),
        (b"POST /users HTTP/1.1\r\ncontent-length:7", 7),
        (b"POST /users HTTP/1.1\r\nHost: x", 0),
        (b"POST /users HTTP/1.1\r\nContent-Length: abc", 0),
        (b"POST /users HTTP/1.1\r\nContent-Length: -5", 0),
        (b"Content-Length: 9 /users HTTP/1.1", 0),
    ])
    def test_parse(self, headers: bytes, expected: int):
        assert declared_body_length(headers) == expected


class TestSendAndClose:

    def test_send_then_close(self, socket_pair):
        server_side, client_side = socket_pair
        client_side.settimeout(2.0)
        conn = make_connection(server_side)

        with conn:
            assert conn.send_response(b"HTTP/1.1 200 OK\r\n\r\n[]") is True

        assert conn.state == ConnectionState.CLOSED
        received = b""
        while True:
            chunk = client_side.recv(1024)
            if not chunk:
                break
            received += chunk
        assert received == b"HTTP/1.1 200 OK\r\n\r\n[]"

    def test_close_twice(self, socket_pair):
        conn = make_connection(socket_pair[0])

        conn.close()
        conn.close()

        assert conn.state == ConnectionState.CLOSED

    def test_send_after_peer_gone(self, socket_pair):
        server_side, client_side = socket_pair
        client_side.close()
        conn = make_connection(server_side)

        assert conn.send_response(b"x" * 1024 * 1024) is False

    def test_close_is_bounded_for_trickling_client(self, socket_pair):
        """A client that keeps sending cannot hold the connection open."""
        server_side, client_side = socket_pair
        stop = threading.Event()

        def trickle():
            while not stop.is_set():
                try:
                    client_side.send(b"x")
                except OSError:
                    return
                time.sleep(0.05)

        sender = threading.Thread(target=trickle, daemon=True)
        sender.start()
        conn = make_connection(server_side)

        started = time.monotonic()
        conn.close()
        elapsed = time.monotonic() - started
        stop.set()
        sender.join(timeout=2.0)

        assert conn.state == ConnectionState.CLOSED
        assert elapsed < DRAIN_SECONDS + 1.0
