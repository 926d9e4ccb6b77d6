"""
auth/errors.py -- Exception taxonomy for the authentication core.

Two families:
  Business-rule failures (ConflictError, InvalidCredentialsError, TokenError)
      carry a stable machine-readable code and a generic client-safe message.
      The HTTP layer maps them to 4xx responses without adding detail.

  Infrastructure failures (HashingError, StoreError) are fatal to the request.
      They surface as a generic 500; the chained cause is logged server-side
      and never returned to the client. Nothing in auth/ retries them.

Layer rule: no imports from api/ or core/.
"""

from __future__ import annotations

from enum import Enum


class AuthError(Exception):
    """Base class for every error raised by the authentication core."""

    code: str = "auth_error"
    message: str = "Authentication error."

    def __init__(self, message: str | None = None) -> None:
        if message is not None:
            self.message = message
        super().__init__(self.message)


# ---------------------------------------------------------------------------
# Business-rule failures
# ---------------------------------------------------------------------------


class ConflictError(AuthError):
    """An account with the requested email already exists."""

    code = "conflict"
    message = "email already in use"


class InvalidCredentialsError(AuthError):
    """Login failed.

    Raised with the same code and message whether the account does not exist
    or the password is wrong. Callers must not override the message -- a
    distinct message would let an attacker enumerate registered emails.
    """

    code = "invalid_credentials"
    message = "Invalid email or password."

    def __init__(self) -> None:
        super().__init__()


class TokenErrorKind(str, Enum):
    EXPIRED = "expired"
    MALFORMED = "malformed"
    SIGNATURE_INVALID = "signature_invalid"


class TokenError(AuthError):
    """A session token failed verification. `kind` says why."""

    code = "invalid_token"
    message = "Authentication required."

    def __init__(self, kind: TokenErrorKind, message: str | None = None) -> None:
        self.kind = kind
        super().__init__(message)

    def __repr__(self) -> str:
        return f"TokenError(kind={self.kind.value!r})"


# ---------------------------------------------------------------------------
# Infrastructure failures
# ---------------------------------------------------------------------------


class HashingError(AuthError):
    code = "internal_error"
    message = "Password hashing failed."


class StoreError(AuthError):
    code = "internal_error"
    message = "Account store failure."


class DuplicateEmailError(StoreError):
    """Raised by an AccountStore when its uniqueness constraint rejects an insert."""

    message = "Unique constraint violated on users.email."
