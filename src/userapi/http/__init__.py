"""
=============================================================================
PROTOCOL LAYER
=============================================================================

Request tokenization, response formatting, status codes and routing for
the line-based request/response protocol the service speaks.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                        PROTOCOL COMPONENTS                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │ request.py       raw bytes → HTTPRequest (method, path, body)       │
    │ router.py        (method, path) → handler, first match wins         │
    │ response.py      HTTPResponse → status line + headers + body bytes  │
    │ status_codes.py  200 / 404 / 500 with their reason phrases          │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

    REQUEST:                          RESPONSE:
    ─────────                         ──────────
    PUT /users/7 HTTP/1.1\r\n         HTTP/1.1 200 OK\r\n
    Header: Value\r\n                 Content-Type: application/json\r\n
    \r\n                              \r\n
    {"name":..,"email":..}            User Updated

=============================================================================
"""

from .request import HTTPRequest, RequestParser, HTTPParseError
from .response import (
    HTTPResponse,
    ResponseBuilder,
    ok,              # 200 OK
    not_found,       # 404 NOT FOUND
    internal_error,  # 500 INTERNAL SERVER ERROR
)
from .router import Router, Route, RouteMatch
from .status_codes import HTTPStatus

__all__ = [
    # Request parsing
    "HTTPRequest",
    "RequestParser",
    "HTTPParseError",

    # Response building
    "HTTPResponse",
    "ResponseBuilder",
    "ok",
    "not_found",
    "internal_error",

    # Routing
    "Router",
    "Route",
    "RouteMatch",

    # Status codes
    "HTTPStatus",
]
