"""
=============================================================================
STATUS CODES
=============================================================================

The service answers with exactly three status codes:

    ┌────────┬──────────────────────────┬────────────────────────────────┐
    │  Code  │  Reason phrase on wire   │  Used for                      │
    ├────────┼──────────────────────────┼────────────────────────────────┤
    │  200   │  OK                      │  Every successful operation    │
    │  404   │  NOT FOUND               │  Unknown route, missing user   │
    │  500   │  INTERNAL SERVER ERROR   │  Store failures, bad id/body   │
    └────────┴──────────────────────────┴────────────────────────────────┘

The reason phrases are upper-case: clients of this service match on the
full status line, so they are part of the wire format.

=============================================================================
"""

from enum import IntEnum


class HTTPStatus(IntEnum):
    """
    Status codes and their reason phrases.

    IntEnum, so a status compares equal to its integer code:

        >>> HTTPStatus.NOT_FOUND == 404
        True
        >>> HTTPStatus.NOT_FOUND.phrase
        'NOT FOUND'
    """

    OK = 200
    NOT_FOUND = 404
    INTERNAL_SERVER_ERROR = 500

    @property
    def phrase(self) -> str:
        """Reason phrase written after the code in the status line."""
        return _STATUS_PHRASES[self]


_STATUS_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.NOT_FOUND: "NOT FOUND",
    HTTPStatus.INTERNAL_SERVER_ERROR: "INTERNAL SERVER ERROR",
}
