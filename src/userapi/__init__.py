"""
=============================================================================
USERAPI - User CRUD Service over a Hand-Rolled HTTP Protocol
=============================================================================

A small network service that creates, reads, updates and deletes user
records in a relational database, speaking a minimal HTTP/1.1 subset
directly on a TCP socket.

=============================================================================
ROUTES
=============================================================================

    ┌────────┬─────────────┬──────────────────┬──────────────────────────┐
    │ Method │ Path        │ Body             │ 200 response body        │
    ├────────┼─────────────┼──────────────────┼──────────────────────────┤
    │ POST   │ /users      │ {name, email}    │ User Created             │
    │ GET    │ /user/{id}  │                  │ {"id":..,"name":..,..}   │
    │ GET    │ /users      │                  │ [{...}, ...]             │
    │ PUT    │ /users/{id} │ {name, email}    │ User Updated             │
    │ DELETE │ /users/{id} │                  │ User Deleted             │
    └────────┴─────────────┴──────────────────┴──────────────────────────┘

    Anything else answers 404.

=============================================================================
PACKAGE STRUCTURE
=============================================================================

    userapi/
    ├── __init__.py          # This file - package exports
    ├── __main__.py          # CLI entry point (python -m userapi)
    ├── server.py            # UserServer: wires everything together
    ├── dispatcher.py        # raw request bytes → raw response bytes
    ├── config.py            # ServerConfig dataclass
    ├── models.py            # User record, payload decoding
    ├── store.py             # UserStore on SQLAlchemy Core
    ├── core/                # Low-level networking
    │   ├── socket_server.py # Listening socket, accept loop
    │   └── connection.py    # Read one request, write one response
    ├── http/                # Protocol
    │   ├── request.py       # Request-line tokenization
    │   ├── response.py      # Status line + body serialization
    │   ├── router.py        # Ordered route table
    │   └── status_codes.py  # 200 / 404 / 500
    ├── middleware/          # Access logging
    └── handlers/            # The five user handlers

=============================================================================
QUICK START
=============================================================================

    from userapi import UserServer, ServerConfig

    server = UserServer(ServerConfig(port=8080, database_url="sqlite:///users.db"))
    server.run()

    $ curl -X POST localhost:8080/users -d '{"name":"Ann","email":"a@x.com"}'
    User Created
    $ curl localhost:8080/user/1
    {"id":1,"name":"Ann","email":"a@x.com"}

=============================================================================
"""

__version__ = "1.0.0"

from .server import UserServer
from .config import ServerConfig
from .dispatcher import Dispatcher
from .store import UserStore, StoreError
from .models import User

__all__ = [
    "UserServer",
    "ServerConfig",
    "Dispatcher",
    "UserStore",
    "StoreError",
    "User",
    "__version__",
]
