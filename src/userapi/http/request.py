"""
=============================================================================
REQUEST PARSER
=============================================================================

Turns the raw bytes read from a client socket into an HTTPRequest.

=============================================================================
REQUEST ANATOMY
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                         REQUEST STRUCTURE                           │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │    PUT /users/7 HTTP/1.1\r\n          ← request line                │
    │    ─┬─ ───┬──── ───┬────                                            │
    │     │     │        │                                                 │
    │   Method Path    Version               three whitespace tokens      │
    │           │                                                          │
    │           └── split on "/" → ["users", "7"]                         │
    │                                                                      │
    │    Host: localhost:8080\r\n           ← headers (kept, not routed) │
    │    Content-Length: 37\r\n                                           │
    │    \r\n                               ← first blank line            │
    │    {"name":"Ann","email":"a@x.com"}   ← body: everything after it  │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

The request line is tokenized, never substring-searched: routing works on
the method token and the list of path segments, so "/users" and
"/users/7" cannot be confused with each other.

=============================================================================
"""

from dataclasses import dataclass, field
from typing import Dict
from urllib.parse import urlsplit
import re


class HTTPParseError(Exception):
    """
    Raised when the request line cannot be tokenized.

    The dispatcher treats such a request as matching no route.
    """


@dataclass
class HTTPRequest:
    """
    A parsed request.

    Attributes:
        method:         Method token exactly as sent ("GET", "POST", ...)
        path:           Path without the query string, still percent-encoded
        version:        Protocol version token ("HTTP/1.1")
        headers:        Header name → value, names lower-cased
        body:           Everything after the first blank line
        path_params:    Values captured by the router ({"id": "7"})
        client_address: (ip, port) of the peer
    """

    method: str
    path: str
    version: str = "HTTP/1.1"
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""
    path_params: Dict[str, str] = field(default_factory=dict)
    client_address: tuple[str, int] = ("", 0)

    @property
    def user_agent(self) -> str:
        return self.headers.get("user-agent", "")


class RequestParser:
    """
    Parses raw request bytes.

    Parsing is deliberately lenient about everything the service does not
    route on: unknown methods, odd versions and malformed header lines all
    parse fine and simply fail to match a route later. Only a request line
    that does not split into METHOD PATH VERSION is rejected.
    """

    HEADER_PATTERN = re.compile(r"^([^:]+):\s*(.*)$")

    def parse(
        self,
        data: bytes,
        client_address: tuple[str, int] = ("", 0)
    ) -> HTTPRequest:
        """
        Parse raw request bytes.

        Args:
            data: Bytes read from the socket.
            client_address: Peer (ip, port), carried through for logging.

        Returns:
            The parsed HTTPRequest.

        Raises:
            HTTPParseError: If the request line is missing or malformed.
        """
        # Header section ends at the first blank line; a request with no
        # blank line at all is all header and no body.
        head, separator, body = data.partition(b"\r\n\r\n")
        header_section = head.decode("utf-8", errors="replace")

        lines = header_section.split("\r\n")
        method, path, version = self._parse_request_line(lines[0])
        headers = self._parse_headers(lines[1:])

        return HTTPRequest(
            method=method,
            path=path,
            version=version,
            headers=headers,
            body=body,
            client_address=client_address,
        )

    def _parse_request_line(self, line: str) -> tuple[str, str, str]:
        """
        Split "METHOD PATH VERSION" into its three tokens.

        The query string is dropped. The path stays percent-encoded so
        that an escaped "/" can never split a segment; handlers decode
        the parameters they capture.
        """
        tokens = line.split()
        if len(tokens) != 3:
            raise HTTPParseError(f"Invalid request line: {line!r}")

        method, uri, version = tokens
        path = urlsplit(uri).path or "/"
        return method, path, version

    def _parse_headers(self, lines: list[str]) -> Dict[str, str]:
        """Parse "Name: value" lines, skipping anything malformed."""
        headers: Dict[str, str] = {}
        for line in lines:
            match = self.HEADER_PATTERN.match(line)
            if not match:
                continue
            name, value = match.groups()
            headers[name.strip().lower()] = value.strip()
        return headers

