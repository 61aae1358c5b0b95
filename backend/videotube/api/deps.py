"""Shared API helpers: service wiring, the access-token guard, cookies and timing."""

from __future__ import annotations

import functools
import time
from collections.abc import Callable
from typing import Any, TypeVar, cast

from flask import Flask, Response, current_app, g, jsonify, request

from videotube.core.logger import ensure_request_id
from videotube.infra.jwt.pyjwt_token_provider import JWTTokenProvider, build_token_config
from videotube.services import AuthService, IdentityService, ServiceContext, TokenPairOut
from videotube.services._shared.ports import TokenProvider

F = TypeVar("F", bound=Callable[..., Any])

ACCESS_COOKIE = "accessToken"
REFRESH_COOKIE = "refreshToken"
_PROVIDER_KEY = "videotube.token_provider"


# ------------------------------ Service wiring ------------------------------


def init_token_provider(app: Flask) -> TokenProvider:
    """Build the token provider from ``app.config`` and store it on the app.

    Called at startup so bad secrets or expiry strings fail fast. Services
    receive the provider by injection and never read configuration.
    """
    provider = JWTTokenProvider(config=build_token_config(app.config))
    app.extensions[_PROVIDER_KEY] = provider
    return provider


def get_token_provider() -> TokenProvider:
    """Return the app-wide token provider."""
    provider = current_app.extensions.get(_PROVIDER_KEY)
    if provider is None:
        provider = init_token_provider(current_app._get_current_object())  # type: ignore[attr-defined]
    return cast(TokenProvider, provider)


def _service_context() -> ServiceContext:
    return ServiceContext(actor_id=g.get("current_user_id"), request_id=ensure_request_id())


def get_auth_service() -> AuthService:
    """Build an :class:`AuthService` bound to the current request."""
    return AuthService(token_provider=get_token_provider(), ctx=_service_context())


def get_identity_service() -> IdentityService:
    """Build an :class:`IdentityService` bound to the current request."""
    return IdentityService(ctx=_service_context())


# ------------------------------ Access guard --------------------------------


def read_access_token() -> str | None:
    """Return the access token from the cookie or a ``Bearer`` header."""
    token = request.cookies.get(ACCESS_COOKIE)
    if token:
        return token
    header = request.headers.get("Authorization", "")
    scheme, _, value = header.partition(" ")
    if scheme.lower() == "bearer" and value.strip():
        return value.strip()
    return None


def require_auth(func: F) -> F:
    """Ensure the request carries a valid access token for an existing user.

    On success the user id is stored on ``g.current_user_id``.
    """

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        service = AuthService(token_provider=get_token_provider())
        g.current_user_id = service.authenticate_access(read_access_token())
        return func(*args, **kwargs)

    return wrapper  # type: ignore[return-value]


def current_user_id() -> int:
    """Return the id set by :func:`require_auth`."""
    return cast(int, g.current_user_id)


# --------------------------------- Cookies ----------------------------------


def _cookie_options() -> dict[str, Any]:
    return {
        "httponly": True,
        "secure": bool(current_app.config.get("AUTH_COOKIE_SECURE", True)),
        "samesite": current_app.config.get("AUTH_COOKIE_SAMESITE", "Lax"),
        "path": "/",
    }


def set_auth_cookies(response: Response, tokens: TokenPairOut) -> Response:
    """Attach both tokens as HTTP-only cookies expiring with the tokens."""
    opts = _cookie_options()
    response.set_cookie(
        ACCESS_COOKIE, tokens.access_token, expires=tokens.access_expires_at, **opts
    )
    response.set_cookie(
        REFRESH_COOKIE, tokens.refresh_token, expires=tokens.refresh_expires_at, **opts
    )
    return response


def clear_auth_cookies(response: Response) -> Response:
    """Expire both token cookies."""
    opts = _cookie_options()
    response.delete_cookie(ACCESS_COOKIE, **opts)
    response.delete_cookie(REFRESH_COOKIE, **opts)
    return response


# --------------------------------- Responses --------------------------------


def json_response(payload: Any, *, status: int = 200) -> Response:
    """Return a JSON response enforcing a consistent MIME type."""
    response = jsonify(payload)
    response.status_code = status
    return response


def timing(func: F) -> F:
    """Decorator capturing handler execution time in milliseconds."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            current_app.logger.debug(
                "request.elapsed",
                extra={
                    "endpoint": getattr(request, "endpoint", None),
                    "method": request.method,
                    "elapsed_ms": round(elapsed_ms, 2),
                },
            )

    return wrapper  # type: ignore[return-value]
