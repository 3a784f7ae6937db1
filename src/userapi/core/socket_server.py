"""
=============================================================================
LISTENER
=============================================================================

Owns the listening socket and hands every accepted client to a callback.

    serve(on_connection)
        │
        ├── bind + listen           SO_REUSEADDR, TCP_NODELAY
        ├── SIGTERM / SIGINT        routed to shutdown() (main thread only)
        │
        └── until shutdown():
                accept()            wakes at least once a second
                Connection(...)     sized and timed from ServerConfig
                on_connection(conn)

The callback runs on the accepting thread. Whether it hands the
connection to a new thread is its business, not the listener's.

=============================================================================
"""

import logging
import signal
import socket
import threading
from contextlib import contextmanager
from typing import Callable, Iterator, Optional, Tuple

from ..config import ServerConfig
from .connection import Connection


logger = logging.getLogger(__name__)

ACCEPT_POLL_SECONDS = 1.0

ConnectionCallback = Callable[[Connection], None]


class SocketServer:
    """
    TCP listener for one ServerConfig.

        listener = SocketServer(config)
        listener.serve(on_connection)   # returns after shutdown()

    With port 0 the OS picks a free port; `address` reports it once
    `wait_until_ready()` returns True.
    """

    def __init__(self, config: ServerConfig):
        self.config = config
        self._sock: Optional[socket.socket] = None
        self._listening = threading.Event()
        self._stop = threading.Event()

    @property
    def is_running(self) -> bool:
        return self._listening.is_set() and not self._stop.is_set()

    @property
    def address(self) -> Tuple[str, int]:
        sock = self._sock
        if sock is None:
            return (self.config.host, self.config.port)
        host, port = sock.getsockname()[:2]
        return (host, port)

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """Block until the socket is listening. False on timeout."""
        return self._listening.wait(timeout)

    def serve(self, on_connection: ConnectionCallback) -> None:
        """
        Listen and accept until shutdown() is called.

        Raises:
            OSError: If the address cannot be bound.
        """
        if self._stop.is_set():
            logger.info("Shutdown requested before listening")
            self._stop.clear()
            return

        self._sock = self._bind()

        try:
            with self._stop_on_signals():
                self._listening.set()
                host, port = self.address
                logger.info(f"Listening on {host}:{port}")
                self._accept_until_stopped(on_connection)
        finally:
            self._listening.clear()
            self._stop.clear()
            sock, self._sock = self._sock, None
            sock.close()
            logger.info("Listener closed")

    def shutdown(self) -> None:
        """Ask serve() to return. Callable from any thread, any number of times."""
        if not self._stop.is_set():
            logger.info("Stopping listener")
        self._stop.set()

    def _bind(self) -> socket.socket:
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)
        sock.settimeout(ACCEPT_POLL_SECONDS)

        try:
            sock.bind((self.config.host, self.config.port))
            sock.listen(self.config.backlog)
        except OSError as e:
            logger.error(f"Cannot listen on {self.config.host}:{self.config.port}: {e}")
            sock.close()
            raise

        return sock

    @contextmanager
    def _stop_on_signals(self) -> Iterator[None]:
        # signal.signal() raises ValueError off the main thread.
        if threading.current_thread() is not threading.main_thread():
            yield
            return

        def stop(signum, frame):
            logger.info(f"Got {signal.Signals(signum).name}")
            self.shutdown()

        previous = {sig: signal.signal(sig, stop) for sig in (signal.SIGTERM, signal.SIGINT)}
        try:
            yield
        finally:
            for sig, handler in previous.items():
                signal.signal(sig, handler)

    def _accept_until_stopped(self, on_connection: ConnectionCallback) -> None:
        while not self._stop.is_set():
            try:
                client, peer = self._sock.accept()
            except socket.timeout:
                continue
            except OSError as e:
                if not self._stop.is_set():
                    logger.error(f"accept() failed: {e}")
                return

            logger.debug(f"Accepted {peer[0]}:{peer[1]}")
            on_connection(Connection(
                socket=client,
                address=peer,
                buffer_size=self.config.buffer_size,
                timeout=self.config.timeout,
                max_request_size=self.config.max_request_size,
            ))
