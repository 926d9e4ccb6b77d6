"""
auth/service.py -- Register / login / logout orchestration.

AuthService composes the four collaborators in a fixed order:
  AccountStore -> PasswordHasher -> TokenIssuer -> SessionCarrier

It owns the business invariants (email uniqueness, default role, one generic
login failure) and the session lifecycle. It does not validate input shape;
the API request models guarantee non-empty name, a plausible email and a
minimum password length before any method here is called.

Security:
  [C1] login() always runs one bcrypt verification, against the dummy hash
       when the email is unknown, so response time does not reveal whether
       an account exists. The error raised is the same in both cases.

  Passwords, hashes and tokens are never logged. Log lines carry user ids.

Layer rule: may import core.config (the kernel); no imports from api/.
"""

from __future__ import annotations

import logging

from starlette.requests import Request
from starlette.responses import Response

from auth.cookies import SessionCarrier
from auth.errors import ConflictError, DuplicateEmailError, InvalidCredentialsError
from auth.models import AuthResult, PublicUser, Role, SessionClaims, User
from auth.passwords import PasswordHasher
from auth.store import AccountStore
from auth.tokens import TokenIssuer
from core.config import Settings

logger = logging.getLogger("authcore.auth")


def normalize_email(email: str) -> str:
    return email.strip().lower()


def to_public_user(user: User) -> PublicUser:
    """Project a stored User onto the fields that may leave the core."""
    if user.id is None:
        raise ValueError("user must be persisted before it can be exposed")
    return PublicUser(
        id=user.id,
        name=user.name,
        email=user.email,
        role=user.role,
        created_at=user.created_at or "",
        updated_at=user.updated_at or "",
    )


class AuthService:
    """Credential issuance and session lifecycle for one application.

    Usage:
        service = AuthService.from_settings(UserStore(settings.database_url), settings)
        result = service.register(response, "Ada", "ada@example.com", "s3cret-pass")
        result = service.login(response, "ada@example.com", "s3cret-pass")
        service.logout(response)
    """

    def __init__(
        self,
        store: AccountStore,
        hasher: PasswordHasher,
        issuer: TokenIssuer,
        carrier: SessionCarrier,
    ) -> None:
        self.store = store
        self.hasher = hasher
        self.issuer = issuer
        self.carrier = carrier

    @classmethod
    def from_settings(cls, store: AccountStore, settings: Settings) -> AuthService:
        """Build the service and its collaborators from startup configuration."""
        return cls(
            store=store,
            hasher=PasswordHasher(rounds=settings.bcrypt_rounds),
            issuer=TokenIssuer(
                secret_key=settings.secret_key,
                ttl_seconds=settings.token_expire_seconds,
            ),
            carrier=SessionCarrier(
                cookie_name=settings.session_cookie_name,
                max_age=settings.token_expire_seconds,
                secure=settings.cookie_secure,
                samesite=settings.cookie_samesite,
            ),
        )

    # ------------------------------------------------------------------
    # Accounts
    # ------------------------------------------------------------------

    def create_account(self, name: str, email: str, password: str, role: str | None = None) -> User:
        """Create a user without starting a session.

        Raises ConflictError if the email is taken -- either found by the
        pre-check or rejected by the store's unique index in a race.
        HashingError / StoreError propagate unchanged.
        """
        email = normalize_email(email)
        if self.store.find_by_email(email) is not None:
            raise ConflictError()

        hashed = self.hasher.hash(password)
        user = User(
            name=name,
            email=email,
            hashed_password=hashed,
            role=role or Role.USER.value,
        )
        try:
            created = self.store.insert(user)
        except DuplicateEmailError as exc:
            raise ConflictError() from exc
        logger.info("Account created id=%s role=%s", created.id, created.role)
        return created

    # ------------------------------------------------------------------
    # Session lifecycle
    # ------------------------------------------------------------------

    def register(
        self,
        response: Response,
        name: str,
        email: str,
        password: str,
        role: str | None = None,
    ) -> AuthResult:
        """Create an account and sign the new user in."""
        user = self.create_account(name, email, password, role)
        return self._start_session(response, user)

    def login(self, response: Response, email: str, password: str) -> AuthResult:
        """Verify credentials and start a session.

        Raises InvalidCredentialsError -- identical for unknown email and
        wrong password.
        """
        user = self.store.find_by_email(normalize_email(email))
        if user is None:
            # Equalize timing -- do NOT return early before running bcrypt [C1]
            self.hasher.verify(password, self.hasher.dummy_hash)
            logger.info("Login rejected")
            raise InvalidCredentialsError()
        if not self.hasher.verify(password, user.hashed_password):
            logger.info("Login rejected")
            raise InvalidCredentialsError()
        logger.info("Login succeeded id=%s", user.id)
        return self._start_session(response, user)

    def logout(self, response: Response) -> None:
        """Drop the session cookie. Idempotent; there is no server-side state."""
        self.carrier.clear(response)

    def authenticate(self, request: Request) -> SessionClaims | None:
        """Return verified claims for the request's session, or None if it has no cookie.

        Raises TokenError if a cookie is present but does not verify.
        """
        token = self.carrier.extract(request)
        if token is None:
            return None
        return self.issuer.verify(token)

    def _start_session(self, response: Response, user: User) -> AuthResult:
        token = self.issuer.issue(subject=user.id, email=user.email, role=user.role)
        self.carrier.attach(response, token)
        return AuthResult(user=to_public_user(user), token=token)
