"""
=============================================================================
USER STORE
=============================================================================

Relational persistence for User records, built on SQLAlchemy Core.

=============================================================================
CONNECTION MODEL
=============================================================================

    Request thread                UserStore                  Database
         │                            │                          │
         │  select_one(7)             │                          │
         ├───────────────────────────►│  engine.begin()          │
         │                            ├─────────────────────────►│ connect
         │                            │  SELECT ... WHERE id=7   │
         │                            ├─────────────────────────►│
         │                            │  COMMIT + close          │
         │◄───────────────────────────┤◄─────────────────────────┤
         │  User(...) or None         │                          │

Every call opens its own connection and transaction. The engine uses
NullPool, so a connection is never shared between two requests and the
store needs no locking.

=============================================================================
ERRORS
=============================================================================

Any SQLAlchemyError (cannot connect, bad query, constraint violation) is
re-raised as StoreError. "Zero rows affected" is NOT an error: update()
and delete() return the affected row count and the caller decides what
it means.

An id outside the 32-bit INTEGER range names no row: select_one() returns
None and update() / delete() return 0 without touching the database.

=============================================================================
"""

from contextlib import contextmanager
from typing import Iterator, List, Optional
import logging

from sqlalchemy import (
    Column,
    Integer,
    MetaData,
    String,
    Table,
    create_engine,
    delete,
    insert,
    select,
    update,
)
from sqlalchemy.engine import Connection
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import NullPool

from .config import ServerConfig
from .models import User


logger = logging.getLogger(__name__)


metadata = MetaData()

users = Table(
    "users",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String, nullable=False),
    Column("email", String, nullable=False),
)


class StoreError(Exception):
    """Raised when the database cannot be reached or a query fails."""


# users.id is a signed 32-bit INTEGER on Postgres and MySQL. Ids outside
# this range cannot name a row, so they are answered without a query.
ID_RANGE = range(-2**31, 2**31)


class UserStore:
    """
    CRUD operations over the users table.

    Usage:
        store = UserStore(ServerConfig(database_url="sqlite:///users.db"))
        store.ensure_schema()
        user_id = store.insert("Ann", "a@x.com")
        store.select_one(user_id)  # User(name='Ann', email='a@x.com', id=1)
    """

    def __init__(self, config: ServerConfig):
        self.database_url = config.database_url
        self._engine = create_engine(config.database_url, poolclass=NullPool)

    @contextmanager
    def _transaction(self) -> Iterator[Connection]:
        """Open a fresh connection in a transaction, translating DB errors."""
        try:
            with self._engine.begin() as conn:
                yield conn
        except (SQLAlchemyError, OverflowError) as e:
            # OverflowError comes straight from the driver, unwrapped.
            raise StoreError(str(e)) from e

    # =========================================================================
    # SCHEMA
    # =========================================================================

    def ensure_schema(self) -> None:
        """Create the users table if it does not exist yet. Safe to repeat."""
        with self._transaction() as conn:
            metadata.create_all(conn, checkfirst=True)
        logger.debug("Schema ready")

    # =========================================================================
    # OPERATIONS
    # =========================================================================

    def insert(self, name: str, email: str) -> int:
        """Insert a user and return its store-assigned id."""
        with self._transaction() as conn:
            result = conn.execute(insert(users).values(name=name, email=email))
            return result.inserted_primary_key[0]

    def select_one(self, user_id: int) -> Optional[User]:
        if user_id not in ID_RANGE:
            return None
        with self._transaction() as conn:
            row = conn.execute(
                select(users).where(users.c.id == user_id)
            ).first()
        if row is None:
            return None
        return User(id=row.id, name=row.name, email=row.email)

    def select_all(self) -> List[User]:
        with self._transaction() as conn:
            rows = conn.execute(select(users).order_by(users.c.id)).all()
        return [User(id=row.id, name=row.name, email=row.email) for row in rows]

    def update(self, user_id: int, name: str, email: str) -> int:
        """Replace name and email of one user. Returns rows affected."""
        if user_id not in ID_RANGE:
            return 0
        with self._transaction() as conn:
            result = conn.execute(
                update(users)
                .where(users.c.id == user_id)
                .values(name=name, email=email)
            )
            return result.rowcount

    def delete(self, user_id: int) -> int:
        """Remove one user. Returns rows affected."""
        if user_id not in ID_RANGE:
            return 0
        with self._transaction() as conn:
            result = conn.execute(delete(users).where(users.c.id == user_id))
            return result.rowcount

    def dispose(self) -> None:
        """Release engine resources."""
        self._engine.dispose()
