"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, zero logic). Stores and the
service do the work; routes map these onto the API response models.

Layer rule: no imports from api/ or core/.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class Role(str, Enum):
    USER = "user"
    ADMIN = "admin"


@dataclass
class User:
    """An account record as persisted by the AccountStore.

    id is None until the store assigns one on insert. email is always stored
    trimmed and lowercased; the store's UNIQUE index relies on that.

    hashed_password is the PasswordHasher output. It never leaves the core --
    anything crossing the HTTP boundary is built from PublicUser instead.
    """

    name: str
    email: str
    hashed_password: str
    role: str = Role.USER.value  # "user" | "admin"
    id: int | None = None
    created_at: str | None = None  # ISO 8601, set by store on insert
    updated_at: str | None = None


@dataclass(frozen=True)
class PublicUser:
    """The outbound view of a User. Deliberately has no password field."""

    id: int
    name: str
    email: str
    role: str
    created_at: str
    updated_at: str


@dataclass(frozen=True)
class SessionClaims:
    """Identity facts carried inside a verified session token."""

    subject: int  # user id
    email: str
    role: str
    issued_at: datetime
    expires_at: datetime


@dataclass(frozen=True)
class AuthResult:
    """Outcome of a successful register or login."""

    user: PublicUser
    token: str
