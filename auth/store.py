"""
auth/store.py -- SQLAlchemy Core persistence layer for user accounts.

Pattern: Repository + Data Mapper. UserStore is the repository; _row_to_user
is the mapper. Service and route code never touches SQL directly.

AccountStore is the capability set the AuthService depends on
(find_by_email + insert). Anything satisfying it -- UserStore, or the
in-memory fake used in tests -- can back the service.

Security:
  All queries use bound parameters. No f-strings in SQL.

  UNIQUE(email) is enforced by the database, not by a pre-check in Python.
  Two concurrent registrations for the same email both pass the service's
  find_by_email() check; the second INSERT fails on the index and insert()
  raises DuplicateEmailError. The service turns that into ConflictError.

Failures:
  IntegrityError on users.email -> DuplicateEmailError
  any other IntegrityError      -> StoreError
  any other SQLAlchemyError     -> StoreError (original chained as __cause__)

Layer rule: no imports from api/ or core/.
"""

from __future__ import annotations

import dataclasses
import logging
from datetime import datetime, timezone
from typing import Protocol

from sqlalchemy import Column, Integer, MetaData, String, Table, Text, create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from auth.errors import DuplicateEmailError, StoreError
from auth.models import User

logger = logging.getLogger("authcore.store")

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_metadata = MetaData()

_users = Table(
    "users",
    _metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(100), nullable=False),
    Column("email", String(255), nullable=False, unique=True),  # stored lowercased
    Column("hashed_password", Text, nullable=False),
    Column("role", String(20), nullable=False, server_default="user"),
    Column("created_at", String(32), nullable=False),
    Column("updated_at", String(32), nullable=False),
)


class AccountStore(Protocol):
    """Capability set the AuthService needs from persistence."""

    def find_by_email(self, email: str) -> User | None: ...

    def insert(self, user: User) -> User:
        """Persist ``user``; raise DuplicateEmailError if the email is taken."""
        ...


# ---------------------------------------------------------------------------
# WAL mode
# ---------------------------------------------------------------------------


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode so readers are not blocked during writes.

    Set per-connection because SQLite PRAGMAs are not inherited by new
    connections from the pool.
    """
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _is_email_conflict(exc: IntegrityError) -> bool:
    """True when the violated constraint is the unique index on users.email."""
    # SQLite: "UNIQUE constraint failed: users.email"; PostgreSQL: "users_email_key"
    detail = str(exc.orig)
    return "users.email" in detail or "users_email" in detail


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class UserStore:
    """Repository for User entities.

    Usage:
        store = UserStore("sqlite:///authcore.db")
        created = store.insert(User(name="Ada", email="ada@example.com", hashed_password=h))
        user = store.find_by_email("ada@example.com")
        store.close()
    """

    def __init__(self, db_url: str) -> None:
        connect_args: dict = {}
        if db_url.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        self.engine: Engine = create_engine(db_url, connect_args=connect_args)
        if db_url.startswith("sqlite"):
            event.listen(self.engine, "connect", _set_wal_mode)
        _metadata.create_all(self.engine)

    def find_by_email(self, email: str) -> User | None:
        """Look up a user by exact (already normalized) email. Returns None if not found."""
        try:
            with self.engine.connect() as conn:
                row = conn.execute(_users.select().where(_users.c.email == email)).fetchone()
        except SQLAlchemyError as exc:
            raise StoreError() from exc
        return _row_to_user(row) if row is not None else None

    def get_by_id(self, user_id: int) -> User | None:
        """Look up a user by primary key. Returns None if not found."""
        try:
            with self.engine.connect() as conn:
                row = conn.execute(_users.select().where(_users.c.id == user_id)).fetchone()
        except SQLAlchemyError as exc:
            raise StoreError() from exc
        return _row_to_user(row) if row is not None else None

    def insert(self, user: User) -> User:
        """Insert a new user and return it with id and timestamps assigned.

        Raises DuplicateEmailError if the UNIQUE(email) index rejects the row.
        Nothing is written in that case.
        """
        now = _now_iso()
        try:
            with self.engine.connect() as conn:
                result = conn.execute(
                    _users.insert().values(
                        name=user.name,
                        email=user.email,
                        hashed_password=user.hashed_password,
                        role=user.role,
                        created_at=now,
                        updated_at=now,
                    )
                )
                conn.commit()
        except IntegrityError as exc:
            if _is_email_conflict(exc):
                raise DuplicateEmailError() from exc
            raise StoreError() from exc
        except SQLAlchemyError as exc:
            raise StoreError() from exc
        user_id = result.inserted_primary_key[0]
        logger.debug("Inserted user id=%s", user_id)
        return dataclasses.replace(user, id=user_id, created_at=now, updated_at=now)

    def list_users(self) -> list[User]:
        """Return all users ordered by id. Admin-only operation."""
        try:
            with self.engine.connect() as conn:
                rows = conn.execute(_users.select().order_by(_users.c.id)).fetchall()
        except SQLAlchemyError as exc:
            raise StoreError() from exc
        return [_row_to_user(r) for r in rows]

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mapper (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_user(row) -> User:
    return User(
        id=row.id,
        name=row.name,
        email=row.email,
        hashed_password=row.hashed_password,
        role=row.role,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )
