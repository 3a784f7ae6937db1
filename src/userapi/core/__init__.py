"""
=============================================================================
CORE NETWORKING
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                         SOCKET SERVER                                │
    │  • Creates the listening TCP socket, binds, listens                 │
    │  • Runs the accept() loop                                           │
    │  • Stops on SIGTERM / SIGINT or shutdown()                          │
    └─────────────────────────────────────────────────────────────────────┘
                                    │
                                    │ one Connection per accept()
                                    ▼
    ┌─────────────────────────────────────────────────────────────────────┐
    │                          CONNECTION                                  │
    │  • Reads one complete request (headers + Content-Length body)      │
    │  • Writes one response                                              │
    │  • Closes: no keep-alive                                            │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

from .socket_server import SocketServer
from .connection import Connection, ConnectionState

__all__ = [
    "SocketServer",
    "Connection",
    "ConnectionState",
]
