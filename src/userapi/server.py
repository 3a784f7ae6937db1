"""
=============================================================================
USER SERVER
=============================================================================

Wires the components together and runs them:

    ServerConfig ──► UserStore ──► Dispatcher
         │                            │
         └──────► SocketServer ───────┘
                       │
                       └──► one thread per accepted connection:
                              read → dispatch → write → close

=============================================================================
CONCURRENCY MODEL
=============================================================================

    accept thread                connection threads
    ─────────────                ──────────────────
    accept() ──► Thread(conn) ──► read_request()
    accept() ──► Thread(conn)     dispatcher.handle()
    accept() ...                  send_response()
                                  close()

There is no worker pool and no queue: each connection gets a fresh
daemon thread and is handled start to finish on it. Threads share only
the Dispatcher (stateless) and the store's engine (a new database
connection per call), so no locking is needed.

With threaded=False, connections are handled one at a time on the
accept thread instead.

=============================================================================
"""

import logging
import threading
from typing import Optional, Tuple

from .config import ServerConfig
from .core import SocketServer, Connection
from .dispatcher import Dispatcher
from .store import UserStore


logger = logging.getLogger(__name__)


class UserServer:
    """
    The user service.

        server = UserServer(ServerConfig(port=8080))
        server.run()   # blocks until Ctrl+C / SIGTERM / shutdown()

    A store can be passed in to share one between several servers or to
    substitute a test double; by default one is built from the config.
    """

    def __init__(
        self,
        config: Optional[ServerConfig] = None,
        store: Optional[UserStore] = None,
    ):
        self.config = config or ServerConfig()
        self.config.validate()

        self.store = store or UserStore(self.config)
        self.dispatcher = Dispatcher(self.store, log_format=self.config.log_format)
        self._socket_server = SocketServer(self.config)

    @property
    def address(self) -> Tuple[str, int]:
        return self._socket_server.address

    @property
    def is_running(self) -> bool:
        return self._socket_server.is_running

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        return self._socket_server.wait_until_ready(timeout)

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def run(self):
        """
        Prepare the schema and serve until stopped (blocking).

        Raises:
            StoreError: If the schema cannot be created.
            OSError: If the listening socket cannot be bound.
        """
        self._setup_logging()
        self.store.ensure_schema()

        logger.info(f"Starting user service on {self.config.host}:{self.config.port}")
        self.dispatcher.router.log_routes()

        try:
            self._socket_server.serve(self._handle_connection)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            self.store.dispose()
            logger.info("Server stopped")

    def shutdown(self):
        """Stop accepting connections. run() returns shortly after."""
        self._socket_server.shutdown()

    def _setup_logging(self):
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)

        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

        logging.getLogger("userapi").setLevel(level)

    # =========================================================================
    # CONNECTION HANDLING
    # =========================================================================

    def _handle_connection(self, conn: Connection):
        """Called on the accept thread for each new connection."""
        if not self.config.threaded:
            self._process_connection(conn)
            return

        thread = threading.Thread(
            target=self._process_connection,
            args=(conn,),
            name=f"conn-{conn.id}",
            daemon=True,
        )
        thread.start()

    def _process_connection(self, conn: Connection):
        """
        Serve exactly one request on conn, then close it.

        A failure while reading is logged and the connection is dropped
        without a response; once a request has been read, the dispatcher
        guarantees a well-formed response.
        """
        with conn:
            try:
                raw_request = conn.read_request()
            except TimeoutError as e:
                logger.warning(f"[{conn.id}] {e}")
                return
            except (ValueError, OSError) as e:
                logger.error(f"[{conn.id}] Failed to read request: {e}")
                return

            if raw_request is None:
                logger.debug(f"[{conn.id}] Client closed without sending a request")
                return

            response_bytes = self.dispatcher.handle(raw_request, conn.address)
            conn.send_response(response_bytes)
