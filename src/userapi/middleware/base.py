"""
=============================================================================
MIDDLEWARE
=============================================================================

A middleware sees every routed request on its way in and every response
on its way out:

    chain(route, AccessLogMiddleware(), Other())

        request ──► AccessLogMiddleware ──► Other ──► route
        response ◄─────────────────────────────────────┘

The first middleware given is the outermost one.

=============================================================================
"""

from abc import ABC, abstractmethod
from typing import Callable

from ..http.request import HTTPRequest
from ..http.response import HTTPResponse


# Whatever sits further in: another middleware, or the route itself.
CallNext = Callable[[HTTPRequest], HTTPResponse]


class Middleware(ABC):

    @abstractmethod
    def process(self, request: HTTPRequest, call_next: CallNext) -> HTTPResponse:
        """Return a response, normally by calling call_next(request)."""

    def wrap(self, handler: CallNext) -> CallNext:
        def wrapped(request: HTTPRequest) -> HTTPResponse:
            return self.process(request, handler)
        return wrapped


def chain(handler: CallNext, *middleware: Middleware) -> CallNext:
    """Wrap handler in middleware, first argument outermost."""
    for layer in reversed(middleware):
        handler = layer.wrap(handler)
    return handler
