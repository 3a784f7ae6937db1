"""
=============================================================================
MIDDLEWARE
=============================================================================

    Middleware           abstract base: process(request, call_next)
    chain()              wraps a handler, first middleware outermost
    AccessLogMiddleware  one access-log line per request

=============================================================================
"""

from .base import Middleware, CallNext, chain
from .access_log import AccessLogMiddleware, AccessEntry

__all__ = [
    "Middleware",
    "CallNext",
    "chain",
    "AccessLogMiddleware",
    "AccessEntry",
]
