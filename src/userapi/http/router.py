"""
=============================================================================
URL ROUTER
=============================================================================

Maps (method, path) pairs to handler functions.

=============================================================================
MATCHING RULES
=============================================================================

Routes live in an ordered table and the FIRST match wins:

    ┌────┬────────┬──────────────┬─────────────────────────────────────┐
    │ #  │ Method │ Pattern      │ Compiled regex                      │
    ├────┼────────┼──────────────┼─────────────────────────────────────┤
    │ 1  │ POST   │ /users       │ ^/users$                            │
    │ 2  │ GET    │ /user/:id    │ ^/user/(?P<id>[^/]+)$               │
    │ 3  │ GET    │ /users       │ ^/users$                            │
    │ 4  │ PUT    │ /users/:id   │ ^/users/(?P<id>[^/]+)$              │
    │ 5  │ DELETE │ /users/:id   │ ^/users/(?P<id>[^/]+)$              │
    └────┴────────┴──────────────┴─────────────────────────────────────┘

Every pattern is anchored at both ends and a :param captures exactly one
segment, so a route matches only paths with the same number of segments
and the same literal segments. "/users" never swallows "/users/7", which
makes the table order-independent for these routes; order only matters
when two patterns could match the same path.

Trailing slashes are ignored: "/users/" matches "/users".

Methods are compared exactly: "get" is not "GET".

=============================================================================
"""

from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional
import logging
import re

from .request import HTTPRequest
from .response import HTTPResponse, not_found


logger = logging.getLogger(__name__)


# Handler: takes a request, returns a response.
Handler = Callable[[HTTPRequest], HTTPResponse]


def compile_path(path: str) -> "re.Pattern[str]":
    """
    Turn a route path into an anchored regex.

        "/users/:id"  →  ^/users/(?P<id>[^/]+)$
        "/"           →  ^/$
    """
    parts = [
        f"(?P<{segment[1:]}>[^/]+)" if segment.startswith(":") else re.escape(segment)
        for segment in path.split("/")
        if segment
    ]
    return re.compile("^/" + "/".join(parts) + "$")


@dataclass
class Route:
    """
    One row of the route table.

        Route("/users/:id", "PUT", update_user, name="update")
    """

    path: str
    method: str
    handler: Handler
    name: Optional[str] = None
    pattern: "re.Pattern[str]" = field(init=False, repr=False)

    def __post_init__(self):
        if self.name is None:
            self.name = getattr(self.handler, "__name__", None)
        self.pattern = compile_path(self.path)

    def params_for(self, method: str, path: str) -> Optional[Dict[str, str]]:
        """Captured :params if this route takes (method, path), else None."""
        if method != self.method:
            return None
        found = self.pattern.match(path)
        return found.groupdict() if found else None


@dataclass
class RouteMatch:
    route: Route
    params: Dict[str, str]


class Router:
    """
    Ordered route table with :param path segments.

        router = Router()
        router.add_route("/users", create_user, method="POST", name="create")
        router.add_route("/user/:id", read_user, method="GET", name="read_one")

        response = router.handle(request)   # read_user sees path_params["id"]
    """

    def __init__(self):
        self._table: List[Route] = []

    def add_route(
        self,
        path: str,
        handler: Handler,
        method: str,
        name: Optional[str] = None,
    ) -> Route:
        """Append a route; earlier routes are tried first."""
        route = Route(path, method, handler, name)
        self._table.append(route)
        return route

    def match(self, method: str, path: str) -> Optional[RouteMatch]:
        path = "/" + path.strip("/")
        for route in self._table:
            params = route.params_for(method, path)
            if params is not None:
                return RouteMatch(route, params)
        return None

    def handle(self, request: HTTPRequest) -> HTTPResponse:
        """
        Call the first matching handler with request.path_params filled in.
        Unmatched requests get the generic 404.
        """
        found = self.match(request.method, request.path)
        if found is None:
            logger.debug(f"No route for {request.method} {request.path}")
            return not_found()

        request.path_params = found.params
        return found.route.handler(request)

    def log_routes(self) -> None:
        for route in self._table:
            logger.info(f"  {route.method:<7} {route.path:<14} → {route.name}")
