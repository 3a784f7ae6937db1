"""
Unit tests for the SQLAlchemy-backed user store.
"""

import pytest

from userapi.config import ServerConfig
from userapi.models import User
from userapi.store import StoreError, UserStore


class TestUserStore:

    def test_ensure_schema_is_idempotent(self, store: UserStore):
        store.ensure_schema()
        store.ensure_schema()

        assert store.select_all() == []

    def test_insert_assigns_ids(self, store: UserStore):
        first = store.insert("Ann", "a@x.com")
        second = store.insert("Bo", "b@x.com")

        assert isinstance(first, int)
        assert second != first

    def test_select_one(self, store: UserStore):
        user_id = store.insert("Ann", "a@x.com")

        assert store.select_one(user_id) == User(id=user_id, name="Ann", email="a@x.com")

    def test_select_one_missing(self, store: UserStore):
        assert store.select_one(999) is None

    def test_select_all_ordered_by_id(self, store: UserStore):
        ids = [store.insert(f"user{i}", f"u{i}@x.com") for i in range(3)]

        assert [user.id for user in store.select_all()] == ids

    def test_update(self, store: UserStore):
        user_id = store.insert("Ann", "a@x.com")
        other_id = store.insert("Bo", "b@x.com")

        assert store.update(user_id, "Anna", "anna@x.com") == 1
        assert store.select_one(user_id) == User(id=user_id, name="Anna", email="anna@x.com")
        assert store.select_one(other_id).name == "Bo"

    def test_update_missing(self, store: UserStore):
        assert store.update(999, "Ann", "a@x.com") == 0

    def test_delete(self, store: UserStore):
        user_id = store.insert("Ann", "a@x.com")

        assert store.delete(user_id) == 1
        assert store.select_one(user_id) is None
        assert store.delete(user_id) == 0

    def test_data_survives_new_store(self, config: ServerConfig, store: UserStore):
        """Each call uses its own connection; nothing lives in memory."""
        user_id = store.insert("Ann", "a@x.com")

        other = UserStore(config)
        try:
            assert other.select_one(user_id).email == "a@x.com"
        finally:
            other.dispose()

    def test_query_before_schema_raises_store_error(self, config: ServerConfig):
        fresh = UserStore(config)
        try:
            with pytest.raises(StoreError):
                fresh.select_all()
        finally:
            fresh.dispose()

    def test_unreachable_database_raises_store_error(self, tmp_path):
        missing = tmp_path / "no-such-dir" / "users.db"
        broken = UserStore(ServerConfig(database_url=f"sqlite:///{missing}"))
        try:
            with pytest.raises(StoreError):
                broken.ensure_schema()
        finally:
            broken.dispose()

    @pytest.mark.parametrize("user_id", [2**31, 10**20, -(10**20)])
    def test_out_of_range_id_is_absent(self, store: UserStore, user_id: int):
        store.insert("Ann", "a@x.com")

        assert store.select_one(user_id) is None
        assert store.update(user_id, "Bo", "b@x.com") == 0
        assert store.delete(user_id) == 0
        assert [user.name for user in store.select_all()] == ["Ann"]
