"""
=============================================================================
REQUEST DISPATCHER
=============================================================================

Owns the lifecycle of one request, from raw bytes in to raw bytes out:

    raw bytes
        │
        ▼
    RequestParser.parse()        request line → method, path, version
        │                        (unparseable → 404)
        ▼
    AccessLogMiddleware          access log line
        │
        ▼
    Router.handle()              ordered route table, first match wins
        │                        (no match → 404)
        ▼
    UserHandlers.<route>()       store call, domain outcome
        │
        ▼
    error mapping                every failure becomes a response
        │
        ▼
    HTTPResponse.to_bytes()

=============================================================================
ERROR MAPPING
=============================================================================

    ┌──────────────────────────────┬──────────┬──────────────────────────┐
    │ Failure                      │ Status   │ Logged at                │
    ├──────────────────────────────┼──────────┼──────────────────────────┤
    │ bad body / non-numeric id    │ 500      │ INFO                     │
    │ StoreError                   │ 500      │ WARNING                  │
    │ anything else                │ 500      │ ERROR, with traceback    │
    │ unparseable request line     │ 404      │ DEBUG                    │
    └──────────────────────────────┴──────────┴──────────────────────────┘

Malformed client input answers 500, not 400: clients of this service
only ever see 200, 404 and 500.

Nothing propagates out of handle(): every request that reaches the
dispatcher gets a well-formed response.

=============================================================================
"""

import logging

from .handlers import UserHandlers
from .http.request import HTTPRequest, RequestParser, HTTPParseError
from .http.response import HTTPResponse, not_found, internal_error
from .http.router import Router
from .middleware import AccessLogMiddleware, chain
from .store import UserStore, StoreError


logger = logging.getLogger(__name__)


class Dispatcher:
    """
    Classifies, routes and answers one request at a time.

    A Dispatcher holds no per-request state, so one instance is shared by
    every connection thread.

    Usage:
        dispatcher = Dispatcher(store)
        response_bytes = dispatcher.handle(
            b"GET /user/1 HTTP/1.1\\r\\nHost: x\\r\\n\\r\\n"
        )
    """

    def __init__(self, store: UserStore, log_format: str = "text"):
        """
        Args:
            store: Backing store for the user handlers.
            log_format: Access log format, "text" or "json".
        """
        self.store = store
        self._parser = RequestParser()
        self._router = UserHandlers(store).register(Router())

        self._handler = chain(self._route, AccessLogMiddleware(log_format=log_format))

    @property
    def router(self) -> Router:
        return self._router

    def handle(
        self,
        raw: bytes,
        client_address: tuple[str, int] = ("", 0)
    ) -> bytes:
        """Turn raw request bytes into raw response bytes."""
        return self.dispatch(raw, client_address).to_bytes()

    def dispatch(
        self,
        raw: bytes,
        client_address: tuple[str, int] = ("", 0)
    ) -> HTTPResponse:
        """Like handle(), but return the HTTPResponse unserialized."""
        try:
            request = self._parser.parse(raw, client_address)
        except HTTPParseError as e:
            logger.debug(f"Unroutable request: {e}")
            return not_found()

        return self._handler(request)

    def _route(self, request: HTTPRequest) -> HTTPResponse:
        """Run the router, mapping every failure to a response."""
        try:
            return self._router.handle(request)

        except ValueError as e:
            # BodyDecodeError is a ValueError too: bad body or bad :id.
            logger.info(f"Rejected {request.method} {request.path}: {e}")
            return internal_error()

        except StoreError as e:
            logger.warning(f"Store error on {request.method} {request.path}: {e}")
            return internal_error()

        except Exception as e:
            logger.exception(f"Handler error on {request.method} {request.path}: {e}")
            return internal_error()
