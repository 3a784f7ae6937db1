"""
=============================================================================
RESPONSE BUILDER
=============================================================================

Builds the responses the service writes back to clients.

=============================================================================
RESPONSE ANATOMY
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                        RESPONSE STRUCTURE                           │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │    HTTP/1.1 200 OK\r\n                    ← status line             │
    │    Content-Type: application/json\r\n     ← only when 200           │
    │    \r\n                                   ← blank line              │
    │    {"id":1,"name":"Ann","email":"a@x.com"}  ← body bytes           │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

There is no Content-Length and no chunked encoding. The server closes the
connection after every response, and the close marks the end of the body.

The three wire forms:

    HTTP/1.1 200 OK\r\nContent-Type: application/json\r\n\r\n<body>
    HTTP/1.1 404 NOT FOUND\r\n\r\n<body>
    HTTP/1.1 500 INTERNAL SERVER ERROR\r\n\r\n<body>

=============================================================================
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Union

from .status_codes import HTTPStatus
from ..models import dumps


JSON_CONTENT_TYPE = "application/json"


@dataclass
class HTTPResponse:
    """
    A response to be written to the client.

    Use the helpers (ok, not_found, internal_error) or ResponseBuilder
    rather than constructing this directly.
    """

    status: HTTPStatus = HTTPStatus.OK
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""
    version: str = "HTTP/1.1"

    @property
    def status_line(self) -> str:
        """
        Format: HTTP-VERSION SP STATUS-CODE SP REASON-PHRASE
        Example: "HTTP/1.1 404 NOT FOUND"
        """
        return f"{self.version} {int(self.status)} {self.status.phrase}"

    def to_bytes(self) -> bytes:
        """
        Serialize for socket.sendall().

            HTTP/1.1 200 OK\r\n                ← status line
            Content-Type: application/json\r\n ← headers, if any
            \r\n                               ← blank line
            User Created                       ← body, as-is
        """
        lines = [self.status_line]
        for name, value in self.headers.items():
            lines.append(f"{name}: {value}")
        lines.append("")

        header_bytes = "\r\n".join(lines).encode("utf-8") + b"\r\n"
        return header_bytes + self.body


class ResponseBuilder:
    """
    Fluent builder for responses.

        response = (ResponseBuilder()
            .status(HTTPStatus.OK)
            .json({"id": 1, "name": "Ann", "email": "a@x.com"})
            .build())

    Every method but build() returns self.
    """

    def __init__(self):
        self._status = HTTPStatus.OK
        self._headers: Dict[str, str] = {}
        self._body: bytes = b""

    def status(self, status: HTTPStatus) -> "ResponseBuilder":
        self._status = status
        return self

    def header(self, name: str, value: str) -> "ResponseBuilder":
        self._headers[name] = value
        return self

    def content_type(self, content_type: str) -> "ResponseBuilder":
        return self.header("Content-Type", content_type)

    def body(self, body: Union[str, bytes]) -> "ResponseBuilder":
        """Set a raw body without touching headers."""
        self._body = body.encode("utf-8") if isinstance(body, str) else body
        return self

    def json(self, data: Any) -> "ResponseBuilder":
        """
        Set a compact JSON body and the JSON Content-Type.

        Strings are passed through unchanged, so an already-serialized
        document is not quoted a second time.
        """
        text = data if isinstance(data, str) else dumps(data)
        self._body = text.encode("utf-8")
        return self.content_type(JSON_CONTENT_TYPE)

    def build(self) -> HTTPResponse:
        return HTTPResponse(
            status=self._status,
            headers=dict(self._headers),
            body=self._body,
        )


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================
#
# Every successful operation answers 200 with the JSON content type, even
# when the body is a plain confirmation such as "User Created". Error
# responses carry no headers at all.
#
# =============================================================================

def ok(body: Union[str, bytes, dict, list] = "") -> HTTPResponse:
    """
    Create a 200 OK response.

    dict/list bodies are serialized as compact JSON; str and bytes bodies
    are sent as they are.
    """
    builder = ResponseBuilder().status(HTTPStatus.OK)
    if isinstance(body, (dict, list)):
        builder.json(body)
    else:
        builder.body(body).content_type(JSON_CONTENT_TYPE)
    return builder.build()


def not_found(message: str = "Not Found") -> HTTPResponse:
    """Create a 404 NOT FOUND response with a plain message body."""
    return ResponseBuilder().status(HTTPStatus.NOT_FOUND).body(message).build()


def internal_error(message: str = "Internal Server Error") -> HTTPResponse:
    """
    Create a 500 INTERNAL SERVER ERROR response.

    Keep the message generic: details belong in the log, not on the wire.
    """
    return (ResponseBuilder()
        .status(HTTPStatus.INTERNAL_SERVER_ERROR)
        .body(message)
        .build())
