"""
=============================================================================
USER MODEL
=============================================================================

The single entity served by this service, plus decoding of the JSON
payload that create and update requests carry.

    Serialized form (compact JSON):

        {"id":1,"name":"Ann","email":"a@x.com"}

    Request payload (create / update):

        {"name": "Ann", "email": "a@x.com"}

The id is never taken from a payload: it is assigned by the store on
insert and echoed back on reads.

=============================================================================
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional
import json


class BodyDecodeError(ValueError):
    """Raised when a request body is not a valid user payload."""


@dataclass
class User:
    """A stored user record."""

    name: str
    email: str
    id: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "email": self.email}

    def to_json(self) -> str:
        return dumps(self.to_dict())


@dataclass(frozen=True)
class UserPayload:
    """
    The name/email pair carried by create and update requests.

    Any other keys in the body (including "id") are ignored.
    """

    name: str
    email: str

    @classmethod
    def from_bytes(cls, body: bytes) -> "UserPayload":
        """
        Decode a request body.

        Raises:
            BodyDecodeError: If the body is not UTF-8 JSON, is not an
                object, or lacks a string "name" or "email".
        """
        try:
            data = json.loads(body.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise BodyDecodeError(f"Invalid JSON body: {e}") from e

        if not isinstance(data, dict):
            raise BodyDecodeError("Body must be a JSON object")

        for key in ("name", "email"):
            if not isinstance(data.get(key), str):
                raise BodyDecodeError(f"Field '{key}' must be a string")

        return cls(name=data["name"], email=data["email"])


def dumps(data: Any) -> str:
    """Serialize to compact JSON, the form used on the wire."""
    return json.dumps(data, separators=(",", ":"))


def users_to_json(users: List[User]) -> str:
    return dumps([user.to_dict() for user in users])
