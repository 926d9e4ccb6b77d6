"""
api/routes/v1/auth.py -- Authentication and account REST endpoints.

Routes:
  POST /api/v1/auth/register  -- self-registration; sets session cookie; 201
  POST /api/v1/auth/login     -- password login; sets session cookie
  POST /api/v1/auth/logout    -- clears cookie; 200
  GET  /api/v1/auth/me        -- current user info (requires session)
  GET  /api/v1/auth/users     -- list all users (admin only)
  POST /api/v1/auth/users     -- create a user with any role (admin only)

Security:
  [H2] register and login are rate-limited per IP (Settings.login_rate_limit).
  [C1] AuthService.login() provides timing equalization -- never inline
       store lookups + verify here.
  [M5] Cache-Control: no-store on responses that set a session cookie.
  Self-registration cannot mint admins. Admin accounts come from
  POST /auth/users or the `main.py create-user` CLI.

Handlers are plain `def`: FastAPI runs them in its worker thread pool, so a
bcrypt hash in one request does not block the event loop for the others.

Error mapping lives in api/main.py: ConflictError -> 409,
InvalidCredentialsError -> 401, TokenError -> 401, anything else -> 500.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request, Response

from api.limiter import limiter, login_rate_limit
from api.models import LoginRequest, MessageResponse, RegisterRequest, RoleEnum, UserResponse
from auth.dependencies import get_session_claims, require_admin
from auth.models import SessionClaims
from auth.service import AuthService, to_public_user
from auth.store import UserStore

# Auth policy:
# - POST /api/v1/auth/register: public -- role=admin rejected
# - POST /api/v1/auth/login:    public -- login endpoint must be unauthenticated
# - POST /api/v1/auth/logout:   public -- clearing a cookie needs no prior auth
# - GET  /api/v1/auth/me:       requires session (get_session_claims)
# - GET  /api/v1/auth/users:    requires admin (require_admin)
# - POST /api/v1/auth/users:    requires admin (require_admin)
router = APIRouter()


# ---------------------------------------------------------------------------
# Public endpoints
# ---------------------------------------------------------------------------


@router.post("/auth/register", response_model=UserResponse, status_code=201)
@limiter.limit(login_rate_limit)  # [H2] below @router so the route registers the limited wrapper
def register(request: Request, response: Response, body: RegisterRequest) -> UserResponse:
    """Create an account with role "user" and sign it in."""
    if body.role is RoleEnum.admin:
        raise HTTPException(
            status_code=403,
            detail={"code": "forbidden", "message": "Admin accounts cannot be self-registered."},
        )
    service: AuthService = request.app.state.auth_service
    result = service.register(response, body.name, body.email, body.password)
    response.headers["Cache-Control"] = "no-store"  # [M5]
    return UserResponse.from_public(result.user)


@router.post("/auth/login", response_model=UserResponse)
@limiter.limit(login_rate_limit)  # [H2]
def login(request: Request, response: Response, body: LoginRequest) -> UserResponse:
    """Authenticate with email and password; set the session cookie.

    Wrong email and wrong password produce the same 401 body, so the
    response does not reveal whether an account exists.
    """
    service: AuthService = request.app.state.auth_service
    result = service.login(response, body.email, body.password)
    response.headers["Cache-Control"] = "no-store"  # [M5]
    return UserResponse.from_public(result.user)


@router.post("/auth/logout", response_model=MessageResponse)
def logout(request: Request, response: Response) -> MessageResponse:
    """Clear the session cookie. Succeeds whether or not a session existed."""
    service: AuthService = request.app.state.auth_service
    service.logout(response)
    return MessageResponse(message="Logged out.")


# ---------------------------------------------------------------------------
# Authenticated endpoints
# ---------------------------------------------------------------------------


@router.get("/auth/me", response_model=UserResponse)
def me(request: Request, claims: SessionClaims = Depends(get_session_claims)) -> UserResponse:
    """Return the account behind the current session."""
    user_store: UserStore = request.app.state.user_store
    user = user_store.get_by_id(claims.subject)
    if user is None:
        # Valid signature, but the account is gone.
        raise HTTPException(
            status_code=401,
            detail={"code": "unauthorized", "message": "Authentication required."},
        )
    return UserResponse.from_public(to_public_user(user))


# ---------------------------------------------------------------------------
# User management (admin only)
# ---------------------------------------------------------------------------


@router.get("/auth/users", response_model=list[UserResponse])
def list_users(request: Request, claims: SessionClaims = Depends(require_admin)) -> list[UserResponse]:
    """List all user accounts. Admin only."""
    user_store: UserStore = request.app.state.user_store
    return [UserResponse.from_public(to_public_user(u)) for u in user_store.list_users()]


@router.post("/auth/users", response_model=UserResponse, status_code=201)
def create_user(
    request: Request,
    body: RegisterRequest,
    claims: SessionClaims = Depends(require_admin),
) -> UserResponse:
    """Create an account with any role. Admin only; no session is started."""
    service: AuthService = request.app.state.auth_service
    role = body.role.value if body.role is not None else None
    created = service.create_account(body.name, body.email, body.password, role)
    return UserResponse.from_public(to_public_user(created))
