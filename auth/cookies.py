"""
auth/cookies.py -- Moving session tokens in and out of an HTTP cookie.

SessionCarrier only transports the token string. It never decodes claims and
never touches the store; that separation keeps cookie policy reviewable in
one place.

Cookie attributes:
  httponly=True: page scripts cannot read the cookie (XSS mitigation).
  secure:        only sent over HTTPS. True in production.
  samesite:      "strict" in production, "lax" in development so local
                 cross-port frontends keep working.
  max_age:       matches the token TTL so both expire together.

Layer rule: no imports from api/ or core/. Works with any Starlette-style
response (set_cookie) and request (cookies mapping).
"""

from __future__ import annotations

from typing import Literal

from starlette.requests import Request
from starlette.responses import Response

SameSite = Literal["strict", "lax", "none"]


class SessionCarrier:
    def __init__(
        self,
        cookie_name: str,
        max_age: int,
        secure: bool = True,
        samesite: SameSite = "strict",
        path: str = "/",
    ) -> None:
        self.cookie_name = cookie_name
        self.max_age = max_age
        self.secure = secure
        self.samesite = samesite
        self.path = path

    def attach(self, response: Response, token: str) -> None:
        """Write ``token`` into the session cookie on ``response``."""
        response.set_cookie(
            self.cookie_name,
            value=token,
            max_age=self.max_age,
            path=self.path,
            httponly=True,
            secure=self.secure,
            samesite=self.samesite,
        )

    def extract(self, request: Request) -> str | None:
        """Return the session token from ``request``, or None if there is none.

        A missing cookie is not an error here -- the caller decides whether
        an anonymous request is acceptable.
        """
        token = request.cookies.get(self.cookie_name)
        return token or None

    def clear(self, response: Response) -> None:
        """Overwrite the session cookie with an empty, already-expired one.

        Same name, path and attributes as attach(), otherwise browsers treat
        it as a different cookie and keep the original.
        """
        response.set_cookie(
            self.cookie_name,
            value="",
            max_age=0,
            expires=0,
            path=self.path,
            httponly=True,
            secure=self.secure,
            samesite=self.samesite,
        )
