"""
tests/conftest.py -- Shared test fixtures for authcore.

This module provides:
  - InMemoryUserStore: an AccountStore fake, so service tests run without SQL
  - hasher / issuer / carrier / service: core components with a low bcrypt cost
  - api_client: module-scoped TestClient wired to an isolated SQLite store
  - client / admin_client: per-test views of api_client with a clean cookie jar

Design: Named shared-memory SQLite URIs (not plain :memory:) are required
because TestClient runs sync route handlers in a thread pool. Plain :memory:
DBs are per-connection and would present a blank schema to each worker
thread.

Environment variables must be set before any api/ or core/ import so
get_settings() runs in development mode (auto-generated SECRET_KEY, plain-HTTP
cookies), uses the cheapest bcrypt cost, and does not rate-limit the suite.
"""

from __future__ import annotations

import dataclasses
import os
from collections.abc import Generator, Iterator
from contextlib import asynccontextmanager
from datetime import datetime, timezone

# CRITICAL: set before any core/api import.
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("LOGIN_RATE_LIMIT", "1000/minute")

import pytest
from fastapi.testclient import TestClient

from api.main import app
from auth.cookies import SessionCarrier
from auth.errors import DuplicateEmailError
from auth.models import User
from auth.passwords import PasswordHasher
from auth.service import AuthService
from auth.store import UserStore
from auth.tokens import TokenIssuer
from core.config import get_settings

TEST_SECRET = "test-secret-key-0123456789abcdef-0123456789"
COOKIE_NAME = "session_token"
ADMIN_EMAIL = "root@example.com"
ADMIN_PASSWORD = "admin-pass-123"


# ---------------------------------------------------------------------------
# AccountStore fake
# ---------------------------------------------------------------------------


class InMemoryUserStore:
    """Dict-backed AccountStore. Enforces email uniqueness on insert like the real index."""

    def __init__(self) -> None:
        self._users: dict[int, User] = {}
        self._next_id = 1

    def find_by_email(self, email: str) -> User | None:
        return next((u for u in self._users.values() if u.email == email), None)

    def get_by_id(self, user_id: int) -> User | None:
        return self._users.get(user_id)

    def insert(self, user: User) -> User:
        if any(u.email == user.email for u in self._users.values()):
            raise DuplicateEmailError()
        now = datetime.now(timezone.utc).isoformat()
        created = dataclasses.replace(user, id=self._next_id, created_at=now, updated_at=now)
        self._users[created.id] = created
        self._next_id += 1
        return created

    def list_users(self) -> list[User]:
        return list(self._users.values())

    def close(self) -> None:
        pass


# ---------------------------------------------------------------------------
# Core components
# ---------------------------------------------------------------------------


@pytest.fixture(scope="session")
def hasher() -> PasswordHasher:
    # Minimum bcrypt cost keeps the suite fast; behaviour is identical.
    return PasswordHasher(rounds=4)


@pytest.fixture
def issuer() -> TokenIssuer:
    return TokenIssuer(secret_key=TEST_SECRET, ttl_seconds=900)


@pytest.fixture
def carrier() -> SessionCarrier:
    return SessionCarrier(cookie_name=COOKIE_NAME, max_age=900, secure=False, samesite="lax")


@pytest.fixture
def memory_store() -> InMemoryUserStore:
    return InMemoryUserStore()


@pytest.fixture
def service(memory_store, hasher, issuer, carrier) -> AuthService:
    return AuthService(store=memory_store, hasher=hasher, issuer=issuer, carrier=carrier)


# ---------------------------------------------------------------------------
# API fixtures
# ---------------------------------------------------------------------------


def _patch_lifespan(user_store: UserStore, auth_service: AuthService):
    """Return a lifespan that wires pre-built test stores into app.state."""

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.user_store = user_store
        app.state.auth_service = auth_service
        yield

    return test_lifespan


@pytest.fixture(scope="module")
def api_client(request) -> Generator[tuple[TestClient, AuthService], None, None]:
    """Yield (client, auth_service) backed by an isolated shared-memory SQLite store.

    The DB name includes the test module name so modules never share rows.
    An admin account (ADMIN_EMAIL / ADMIN_PASSWORD) is created up front.
    """
    db_name = request.module.__name__.replace(".", "_")
    user_store = UserStore(f"sqlite:///file:{db_name}?mode=memory&cache=shared&uri=true")
    auth_service = AuthService.from_settings(user_store, get_settings())
    auth_service.create_account("Root", ADMIN_EMAIL, ADMIN_PASSWORD, "admin")

    app.router.lifespan_context = _patch_lifespan(user_store, auth_service)

    with TestClient(app, raise_server_exceptions=True) as client:
        yield client, auth_service

    user_store.close()


@pytest.fixture
def client(api_client) -> Iterator[TestClient]:
    """The module's TestClient with an empty cookie jar (anonymous)."""
    test_client, _ = api_client
    test_client.cookies.clear()
    yield test_client
    test_client.cookies.clear()


@pytest.fixture
def admin_client(client: TestClient) -> TestClient:
    """The module's TestClient holding an admin session cookie."""
    resp = client.post("/api/v1/auth/login", json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD})
    assert resp.status_code == 200, resp.text
    return client
