"""
auth/dependencies.py -- FastAPI Depends() helpers for request authorization.

The session cookie is the only credential. Validity is signature + expiry:
no store lookup happens here, so a role change or account deletion takes
effect when the current token expires (at most one TTL).

get_session_claims() raises TokenError for a bad cookie -- the API exception
handler turns that into 401 and clears the stale cookie -- and HTTP 401 when
there is no cookie at all.
require_role() builds a dependency that additionally raises HTTP 403.

Layer rule: auth/dependencies.py may import from fastapi because it is part of
the FastAPI dependency injection system. No imports from api/.
"""

from __future__ import annotations

from collections.abc import Callable

from fastapi import HTTPException, Request

from auth.models import Role, SessionClaims
from auth.service import AuthService


def _service(request: Request) -> AuthService:
    return request.app.state.auth_service


def get_session_claims(request: Request) -> SessionClaims:
    """Require a valid session.

    Use as a FastAPI dependency:
        @router.get("/protected")
        def route(claims: SessionClaims = Depends(get_session_claims)): ...
    """
    claims = _service(request).authenticate(request)
    if claims is None:
        raise HTTPException(
            status_code=401,
            detail={"code": "unauthorized", "message": "Authentication required."},
        )
    return claims


def require_role(*roles: str) -> Callable[[Request], SessionClaims]:
    """Build a dependency that admits only sessions holding one of ``roles``.

    Raises HTTP 401 if unauthenticated, HTTP 403 if the role does not match.
    """
    allowed = frozenset(roles)

    def dependency(request: Request) -> SessionClaims:
        claims = get_session_claims(request)
        if claims.role not in allowed:
            raise HTTPException(
                status_code=403,
                detail={"code": "forbidden", "message": "Insufficient role for this operation."},
            )
        return claims

    return dependency


require_admin = require_role(Role.ADMIN.value)
