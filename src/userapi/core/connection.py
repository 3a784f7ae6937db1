"""
=============================================================================
CLIENT CONNECTION
=============================================================================

One accepted socket, used for exactly one exchange:

    read_request()    bytes up to the blank line, then the declared body
    send_response()   one sendall()
    close()           FIN, drain what the client still sends (bounded), close

TCP hands over a byte stream in arbitrary pieces, so reading loops on
recv() twice: first until the head is complete, then until the body has
the length the Content-Length header announced.

    NEW ─► READING ─► PROCESSING ─► WRITING ─► CLOSED
              └────────────────────────────────┘
                  read failed, nothing sent

A peer that closes early is not an error: whatever arrived is returned
and the dispatcher decides what it means.

=============================================================================
"""

import logging
import socket
import time
import uuid
from enum import Enum
from typing import Optional, Tuple


logger = logging.getLogger(__name__)


HEADER_TERMINATOR = b"\r\n\r\n"
DRAIN_SECONDS = 0.5
DRAIN_MAX_BYTES = 64 * 1024


class ConnectionState(Enum):
    NEW = "new"
    READING = "reading"
    PROCESSING = "processing"
    WRITING = "writing"
    CLOSED = "closed"


def declared_body_length(head: bytes) -> int:
    """
    Content-Length from a raw request head, 0 when missing or unusable.

    The request line is skipped, so a path that happens to contain
    "content-length:" is never mistaken for the header.
    """
    for line in head.split(b"\r\n")[1:]:
        name, sep, value = line.partition(b":")
        if not sep or name.strip().lower() != b"content-length":
            continue
        try:
            return max(int(value.strip()), 0)
        except ValueError:
            return 0
    return 0


class Connection:
    """
    An accepted client socket.

    Usage:
        with Connection(client_socket, peer, timeout=30.0) as conn:
            raw = conn.read_request()
            if raw is not None:
                conn.send_response(dispatcher.handle(raw, conn.address))
    """

    def __init__(
        self,
        socket: socket.socket,
        address: Tuple[str, int],
        buffer_size: int = 1024,
        timeout: Optional[float] = 30.0,
        max_request_size: int = 1024 * 1024,
    ):
        self.socket = socket
        self.address = address
        self.buffer_size = buffer_size
        self.timeout = timeout
        self.max_request_size = max_request_size

        self.id = uuid.uuid4().hex[:8]
        self.state = ConnectionState.NEW
        self.opened_at = time.monotonic()
        self._data = bytearray()

        # An accepted socket inherits the listener's poll timeout.
        socket.settimeout(timeout)

    def __repr__(self) -> str:
        return f"<Connection {self.id} {self.address[0]}:{self.address[1]} {self.state.value}>"

    def read_request(self) -> Optional[bytes]:
        """
        Read one request.

        Returns:
            The raw bytes, or None when the client sent nothing at all.

        Raises:
            TimeoutError: The client went quiet for longer than `timeout`.
            ValueError: The request grew past `max_request_size`.
            OSError: The socket failed some other way.
        """
        self.state = ConnectionState.READING

        try:
            head_end = self._data.find(HEADER_TERMINATOR)
            while head_end < 0:
                if not self._fill():
                    return bytes(self._data) or None
                head_end = self._data.find(HEADER_TERMINATOR)

            wanted = head_end + len(HEADER_TERMINATOR) + declared_body_length(
                bytes(self._data[:head_end])
            )
            while len(self._data) < wanted and self._fill():
                pass
        except socket.timeout:
            raise TimeoutError(f"client sent nothing for {self.timeout}s")

        self.state = ConnectionState.PROCESSING
        return bytes(self._data)

    def _fill(self) -> bool:
        """Append one recv() worth of data. False once the peer is gone."""
        try:
            chunk = self.socket.recv(self.buffer_size)
        except (ConnectionResetError, BrokenPipeError):
            return False
        if not chunk:
            return False

        self._data += chunk
        if len(self._data) > self.max_request_size:
            raise ValueError(
                f"request exceeds {self.max_request_size} bytes"
            )
        return True

    def send_response(self, data: bytes) -> bool:
        """Write the whole response. False if the client is gone."""
        self.state = ConnectionState.WRITING
        try:
            self.socket.sendall(data)
        except OSError as e:
            logger.warning(f"[{self.id}] could not send response: {e}")
            return False
        return True

    def close(self) -> None:
        if self.state is ConnectionState.CLOSED:
            return

        try:
            self.socket.shutdown(socket.SHUT_WR)
            self._drain()
        except OSError:
            pass
        finally:
            self.socket.close()

        self.state = ConnectionState.CLOSED
        elapsed_ms = (time.monotonic() - self.opened_at) * 1000
        logger.debug(f"[{self.id}] closed after {elapsed_ms:.1f}ms")

    def _drain(self) -> None:
        """
        Discard what the client still sends, for at most DRAIN_SECONDS in
        total and at most DRAIN_MAX_BYTES.
        """
        deadline = time.monotonic() + DRAIN_SECONDS
        drained = 0
        while drained < DRAIN_MAX_BYTES:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                return
            self.socket.settimeout(remaining)
            chunk = self.socket.recv(self.buffer_size)
            if not chunk:
                return
            drained += len(chunk)

    def __enter__(self) -> "Connection":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
