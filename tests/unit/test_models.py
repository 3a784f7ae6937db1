"""
Unit tests for the user model and payload decoding.
"""

import pytest

from userapi.models import BodyDecodeError, User, UserPayload, users_to_json


class TestUser:

    def test_to_json(self):
        user = User(id=1, name="Ann", email="a@x.com")

        assert user.to_json() == '{"id":1,"name":"Ann","email":"a@x.com"}'

    def test_id_absent(self):
        assert User(name="Ann", email="a@x.com").to_dict()["id"] is None

    def test_users_to_json(self):
        users = [User(id=1, name="Ann", email="a@x.com"), User(id=2, name="Bo", email="b@x.com")]

        assert users_to_json(users) == (
            '[{"id":1,"name":"Ann","email":"a@x.com"},'
            '{"id":2,"name":"Bo","email":"b@x.com"}]'
        )

    def test_users_to_json_empty(self):
        assert users_to_json([]) == "[]"


class TestUserPayload:

    def test_decode(self):
        payload = UserPayload.from_bytes(b'{"name": "Ann", "email": "a@x.com"}')

        assert payload == UserPayload(name="Ann", email="a@x.com")

    def test_id_ignored(self):
        """Clients cannot choose the id."""
        payload = UserPayload.from_bytes(b'{"id": 99, "name": "Ann", "email": "a@x.com"}')

        assert not hasattr(payload, "id")

    def test_unicode(self):
        payload = UserPayload.from_bytes('{"name": "Zoë", "email": "z@x.com"}'.encode())

        assert payload.name == "Zoë"

    @pytest.mark.parametrize("body", [
        b"",
        b"not json",
        b"\xff\xfe",
        b"[]",
        b'"Ann"',
        b'{"name": "Ann"}',
        b'{"email": "a@x.com"}',
        b'{"name": 1, "email": "a@x.com"}',
        b'{"name": "Ann", "email": null}',
    ])
    def test_invalid(self, body: bytes):
        with pytest.raises(BodyDecodeError):
            UserPayload.from_bytes(body)

    def test_decode_error_is_value_error(self):
        with pytest.raises(ValueError):
            UserPayload.from_bytes(b"{")
