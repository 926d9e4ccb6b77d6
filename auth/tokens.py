"""
auth/tokens.py -- Signed, time-bounded session tokens.

Security design decisions:
  JWT: python-jose with HS256. Tokens are signed with the server-held
       SECRET_KEY and carry sub (user id), email, role, iat and exp. The key
       and TTL are constructor arguments -- TokenIssuer never reads config.

  TTL: 15 minutes by default. Nothing is stored server-side, so a stolen
       token stays valid until exp; the short lifetime bounds that window.

  Verification raises TokenError with a kind rather than returning None, so
       the route layer can tell an expired session (prompt re-login) from a
       forged one. Structure is checked first, then the signature, then the
       claims -- a tampered token is always SIGNATURE_INVALID even when its
       exp is also in the past.

Layer rule: no imports from api/ or core/.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timedelta, timezone

from jose import jwt
from jose.exceptions import ExpiredSignatureError, JWTClaimsError, JWTError

from auth.errors import TokenError, TokenErrorKind
from auth.models import Role, SessionClaims

_ALGORITHM = "HS256"
_REQUIRED_CLAIMS = ("sub", "email", "role", "iat", "exp")
_ROLES = {r.value for r in Role}

DEFAULT_TTL_SECONDS = 15 * 60


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TokenIssuer:
    """Issue and verify HS256 session tokens.

    Usage:
        issuer = TokenIssuer(secret_key=settings.secret_key, ttl_seconds=900)
        token = issuer.issue(subject=42, email="a@example.com", role="user")
        claims = issuer.verify(token)  # SessionClaims, or raises TokenError

    clock is used at issuance only. Expiry is always judged against the real
    current time at verification.
    """

    def __init__(
        self,
        secret_key: str,
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        if not secret_key:
            raise ValueError("secret_key must not be empty")
        self._secret_key = secret_key
        self.ttl_seconds = ttl_seconds
        self._clock = clock

    def issue(self, subject: int, email: str, role: str) -> str:
        """Encode a signed JWT for the given identity, expiring after the TTL."""
        issued_at = self._clock().replace(microsecond=0)
        expires_at = issued_at + timedelta(seconds=self.ttl_seconds)
        payload = {
            "sub": str(subject),
            "email": email,
            "role": role,
            "iat": int(issued_at.timestamp()),
            "exp": int(expires_at.timestamp()),
        }
        return jwt.encode(payload, self._secret_key, algorithm=_ALGORITHM)

    def verify(self, token: str) -> SessionClaims:
        """Verify signature and expiry; return the embedded claims.

        Raises:
            TokenError(MALFORMED):         not a JWT, or required claims missing/mistyped.
            TokenError(SIGNATURE_INVALID): signature does not match this key and algorithm.
            TokenError(EXPIRED):           exp is in the past.
        """
        if not token or token.count(".") != 2:
            raise TokenError(TokenErrorKind.MALFORMED)
        try:
            jwt.get_unverified_header(token)
            jwt.get_unverified_claims(token)
        except JWTError as exc:
            raise TokenError(TokenErrorKind.MALFORMED) from exc

        try:
            payload = jwt.decode(token, self._secret_key, algorithms=[_ALGORITHM])
        except ExpiredSignatureError as exc:
            raise TokenError(TokenErrorKind.EXPIRED, "Session expired.") from exc
        except JWTClaimsError as exc:
            raise TokenError(TokenErrorKind.MALFORMED) from exc
        except JWTError as exc:
            raise TokenError(TokenErrorKind.SIGNATURE_INVALID) from exc

        return _payload_to_claims(payload)


def _payload_to_claims(payload: dict) -> SessionClaims:
    if any(name not in payload for name in _REQUIRED_CLAIMS):
        raise TokenError(TokenErrorKind.MALFORMED)
    try:
        subject = int(payload["sub"])
        issued_at = datetime.fromtimestamp(int(payload["iat"]), tz=timezone.utc)
        expires_at = datetime.fromtimestamp(int(payload["exp"]), tz=timezone.utc)
    except (TypeError, ValueError, OverflowError, OSError) as exc:
        raise TokenError(TokenErrorKind.MALFORMED) from exc
    email, role = payload["email"], payload["role"]
    if not isinstance(email, str) or role not in _ROLES:
        raise TokenError(TokenErrorKind.MALFORMED)
    return SessionClaims(
        subject=subject,
        email=email,
        role=role,
        issued_at=issued_at,
        expires_at=expires_at,
    )
