"""
=============================================================================
USER HANDLERS
=============================================================================

One handler per route shape. Each takes an HTTPRequest and returns an
HTTPResponse for the outcomes it understands:

    ┌───────────┬──────────────┬────────────────────┬───────────────────┐
    │ Route     │ Store call   │ Success            │ Domain outcome    │
    ├───────────┼──────────────┼────────────────────┼───────────────────┤
    │ create    │ insert       │ 200 User Created   │                   │
    │ read-one  │ select_one   │ 200 <record>       │ 404 no such user  │
    │ read-all  │ select_all   │ 200 [<record>...]  │                   │
    │ update    │ update       │ 200 User Updated   │ 500 0 rows        │
    │ delete    │ delete       │ 200 User Deleted   │ 404 0 rows        │
    └───────────┴──────────────┴────────────────────┴───────────────────┘

Everything else is raised and mapped to a response by the dispatcher:

    BodyDecodeError   body is not {"name": str, "email": str}
    ValueError        :id segment is not an integer
    StoreError        database unreachable or query failed

=============================================================================
"""

import logging
from urllib.parse import unquote

from ..http.request import HTTPRequest
from ..http.response import HTTPResponse, ok, not_found, internal_error
from ..http.router import Router
from ..models import UserPayload, users_to_json
from ..store import UserStore


logger = logging.getLogger(__name__)


USER_CREATED = "User Created"
USER_UPDATED = "User Updated"
USER_DELETED = "User Deleted"
USER_NOT_FOUND = "User Not Found"


class UserHandlers:
    """
    Request handlers for the user resource.

    Usage:
        handlers = UserHandlers(store)
        handlers.register(router)
    """

    def __init__(self, store: UserStore):
        self.store = store

    def register(self, router: Router) -> Router:
        """
        Add the five user routes to router, in match order.

        The read-one route is the singular /user/:id; /users/:id only
        accepts PUT and DELETE.
        """
        router.add_route("/users", self.create, method="POST", name="create")
        router.add_route("/user/:id", self.read_one, method="GET", name="read_one")
        router.add_route("/users", self.read_all, method="GET", name="read_all")
        router.add_route("/users/:id", self.update, method="PUT", name="update")
        router.add_route("/users/:id", self.delete, method="DELETE", name="delete")
        return router

    # =========================================================================
    # HANDLERS
    # =========================================================================

    def create(self, request: HTTPRequest) -> HTTPResponse:
        payload = UserPayload.from_bytes(request.body)
        user_id = self.store.insert(payload.name, payload.email)
        logger.debug(f"Created user {user_id}")
        return ok(USER_CREATED)

    def read_one(self, request: HTTPRequest) -> HTTPResponse:
        user_id = _user_id(request)
        user = self.store.select_one(user_id)
        if user is None:
            return not_found(USER_NOT_FOUND)
        return ok(user.to_json())

    def read_all(self, request: HTTPRequest) -> HTTPResponse:
        return ok(users_to_json(self.store.select_all()))

    def update(self, request: HTTPRequest) -> HTTPResponse:
        """
        Replace a user's name and email.

        Updating an id that does not exist affects no rows and answers 500,
        unlike delete, which answers 404 for the same situation.
        """
        user_id = _user_id(request)
        payload = UserPayload.from_bytes(request.body)
        affected = self.store.update(user_id, payload.name, payload.email)
        if affected == 0:
            logger.warning(f"Update of user {user_id} affected no rows")
            return internal_error()
        return ok(USER_UPDATED)

    def delete(self, request: HTTPRequest) -> HTTPResponse:
        user_id = _user_id(request)
        if self.store.delete(user_id) == 0:
            return not_found(USER_NOT_FOUND)
        logger.debug(f"Deleted user {user_id}")
        return ok(USER_DELETED)


def _user_id(request: HTTPRequest) -> int:
    """
    The :id path parameter as an int.

    Only plain ASCII digits are accepted, after percent-decoding: "+7",
    "-1", "1_0" and " 7" all raise ValueError.
    """
    raw = unquote(request.path_params["id"])
    if not (raw.isascii() and raw.isdigit()):
        raise ValueError(f"Invalid user id: {raw!r}")
    return int(raw)
