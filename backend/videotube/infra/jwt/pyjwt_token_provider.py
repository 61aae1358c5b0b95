# videotube/infra/jwt/pyjwt_token_provider.py
from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Any
from uuid import uuid4

import jwt

from videotube.core.config import PLACEHOLDER_PREFIX, parse_duration
from videotube.services._shared.errors import InternalError, InvalidTokenError, TokenFailure
from videotube.services._shared.ports import (
    IdentityClaims,
    IssuedToken,
    TokenClass,
    TokenProvider,
    VerifiedToken,
)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True, slots=True)
class TokenSigningConfig:
    """
    Signing policy for one token class.

    :param secret: HMAC secret (never shared between classes).
    :type secret: str
    :param expires: Token lifetime.
    :type expires: timedelta
    :param algorithm: JWS algorithm.
    :type algorithm: str
    """

    secret: str
    expires: timedelta
    algorithm: str = "HS256"

    def __post_init__(self) -> None:
        if not self.secret:
            raise ValueError("Token secret must not be empty.")
        if self.expires <= timedelta(0):
            raise ValueError("Token lifetime must be positive.")


@dataclass(frozen=True, slots=True)
class AuthTokenConfig:
    """
    Token emission configuration for both classes.

    :param access: Access token signing policy.
    :type access: TokenSigningConfig
    :param refresh: Refresh token signing policy.
    :type refresh: TokenSigningConfig
    :raises ValueError: If both classes share the same secret.
    """

    access: TokenSigningConfig
    refresh: TokenSigningConfig

    def __post_init__(self) -> None:
        # A leaked access secret must not allow minting refresh tokens.
        if self.access.secret == self.refresh.secret:
            raise ValueError("Access and refresh tokens must use distinct secrets.")

    def for_class(self, token_class: TokenClass) -> TokenSigningConfig:
        return self.access if token_class is TokenClass.ACCESS else self.refresh


@dataclass(slots=True)
class JWTTokenProvider(TokenProvider):
    """
    PyJWT adapter issuing and verifying HS-signed access/refresh tokens.

    Issuance and verification are pure functions of the configuration and the
    injected clock. Every token gets a random ``jti`` so two tokens minted in
    the same second for the same user never collide.

    :param config: Per-class signing policies.
    :param clock: Returns the current UTC instant.
    """

    config: AuthTokenConfig
    clock: Clock = field(default=utc_now)

    # -------------------- issuance --------------------

    def _encode(
        self, *, token_class: TokenClass, subject: int, extra: dict[str, Any]
    ) -> IssuedToken:
        policy = self.config.for_class(token_class)
        now = self.clock()
        expires_at = now + policy.expires
        payload: dict[str, Any] = {
            **extra,
            "sub": str(subject),
            "type": token_class.value,
            "jti": uuid4().hex,
            "iat": int(now.timestamp()),
            "exp": int(expires_at.timestamp()),
        }
        try:
            token = jwt.encode(payload, policy.secret, algorithm=policy.algorithm)
        except (jwt.PyJWTError, NotImplementedError, TypeError) as exc:
            raise InternalError("token signing failed") from exc
        return IssuedToken(token=token, expires_at=expires_at.replace(microsecond=0))

    def issue_access(self, identity: IdentityClaims) -> IssuedToken:
        return self._encode(
            token_class=TokenClass.ACCESS,
            subject=identity.user_id,
            extra={
                "email": identity.email,
                "username": identity.username,
                "full_name": identity.full_name,
            },
        )

    def issue_refresh(self, user_id: int) -> IssuedToken:
        # Long-lived: carry the identity reference only.
        return self._encode(token_class=TokenClass.REFRESH, subject=user_id, extra={})

    # -------------------- verification --------------------

    def verify(self, token: str, token_class: TokenClass) -> VerifiedToken:
        """
        Verify signature, class and expiry of ``token``.

        :param token: Encoded token.
        :param token_class: Expected class; selects the secret.
        :returns: Verified claims.
        :raises InvalidTokenError: With ``EXPIRED``, ``INVALID_SIGNATURE`` or
            ``MALFORMED`` as reason.
        """
        if not isinstance(token, str) or not token:
            raise InvalidTokenError(TokenFailure.MALFORMED, "malformed token")

        policy = self.config.for_class(token_class)
        try:
            # Expiry is checked against the injected clock below.
            payload = jwt.decode(
                token,
                policy.secret,
                algorithms=[policy.algorithm],
                options={
                    "verify_exp": False,
                    "verify_iat": False,
                    "require": ["sub", "exp", "jti"],
                },
            )
        except jwt.InvalidSignatureError as exc:
            raise InvalidTokenError(
                TokenFailure.INVALID_SIGNATURE, "invalid token signature"
            ) from exc
        except jwt.PyJWTError as exc:
            raise InvalidTokenError(TokenFailure.MALFORMED, "malformed token") from exc

        if payload.get("type") != token_class.value:
            raise InvalidTokenError(TokenFailure.MALFORMED, "wrong token type")

        try:
            subject = int(payload["sub"])
            expires_at = datetime.fromtimestamp(int(payload["exp"]), tz=UTC)
        except (TypeError, ValueError) as exc:
            raise InvalidTokenError(TokenFailure.MALFORMED, "malformed token") from exc

        if expires_at <= self.clock():
            raise InvalidTokenError(TokenFailure.EXPIRED, "token expired")

        reserved = {"sub", "type", "jti", "iat", "exp"}
        return VerifiedToken(
            token_class=token_class,
            subject=subject,
            jti=str(payload["jti"]),
            expires_at=expires_at,
            claims={k: v for k, v in payload.items() if k not in reserved},
        )


def build_token_config(settings: Any) -> AuthTokenConfig:
    """
    Build :class:`AuthTokenConfig` from a Flask-style config mapping.

    :param settings: Mapping exposing the ``ACCESS_TOKEN_*``/``REFRESH_TOKEN_*`` keys.
    :returns: Validated token configuration.
    :raises RuntimeError: When production still uses placeholder secrets.
    """
    access_secret = str(settings.get("ACCESS_TOKEN_SECRET") or "")
    refresh_secret = str(settings.get("REFRESH_TOKEN_SECRET") or "")
    if settings.get("ENV_NAME") == "production" and any(
        s.startswith(PLACEHOLDER_PREFIX) for s in (access_secret, refresh_secret)
    ):
        raise RuntimeError("Token secrets must be configured in production.")

    algorithm = str(settings.get("JWT_ALGORITHM", "HS256"))
    return AuthTokenConfig(
        access=TokenSigningConfig(
            secret=access_secret,
            expires=parse_duration(settings.get("ACCESS_TOKEN_EXPIRY", "15m")),
            algorithm=algorithm,
        ),
        refresh=TokenSigningConfig(
            secret=refresh_secret,
            expires=parse_duration(settings.get("REFRESH_TOKEN_EXPIRY", "10d")),
            algorithm=algorithm,
        ),
    )
