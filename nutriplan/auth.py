"""Auth token cookies and the per-browser state cookie."""

from __future__ import annotations

import uuid

from fastapi import Cookie, Header, Request, Response

from nutriplan.config import settings
from nutriplan.errors import redirect_error

USER_TOKEN_COOKIE = "userToken"
ADMIN_TOKEN_COOKIE = "adminToken"

_DAY_SECONDS = 24 * 60 * 60


def _bearer(authorization: str | None) -> str | None:
    if authorization and authorization.startswith("Bearer "):
        return authorization[7:].strip() or None
    return None


def _set_cookie(response: Response, name: str, value: str, days: int) -> None:
    response.set_cookie(
        name,
        value,
        max_age=days * _DAY_SECONDS,
        path="/",
        httponly=True,
        samesite="lax",
        secure=settings.cookie_secure,
    )


def set_user_token(response: Response, token: str) -> None:
    _set_cookie(response, USER_TOKEN_COOKIE, token, settings.user_cookie_days)


def remove_user_token(response: Response) -> None:
    response.delete_cookie(USER_TOKEN_COOKIE, path="/")


def set_admin_token(response: Response, token: str) -> None:
    _set_cookie(response, ADMIN_TOKEN_COOKIE, token, settings.admin_cookie_days)


def remove_admin_token(response: Response) -> None:
    response.delete_cookie(ADMIN_TOKEN_COOKIE, path="/")


async def get_user_token(
    user_token: str | None = Cookie(default=None, alias=USER_TOKEN_COOKIE),
    authorization: str | None = Header(default=None),
) -> str | None:
    """User token from the cookie, or from Authorization: Bearer. May be None."""
    return user_token or _bearer(authorization)


async def require_admin_token(
    admin_token: str | None = Cookie(default=None, alias=ADMIN_TOKEN_COOKIE),
    authorization: str | None = Header(default=None),
) -> str:
    """Admin token via cookie or Authorization: Bearer; 401 when absent."""
    token = admin_token or _bearer(authorization)
    if not token:
        raise redirect_error(401, "Veuillez vous connecter", "/admin/login")
    return token


async def browser_id(request: Request, response: Response) -> str:
    """Id of this browser's transient state; minted on first visit."""
    sid = request.cookies.get(settings.state_cookie_name)
    if not sid:
        sid = uuid.uuid4().hex
        _set_cookie(response, settings.state_cookie_name, sid, settings.user_cookie_days)
    return sid
