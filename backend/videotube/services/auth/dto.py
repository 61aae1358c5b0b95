from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from videotube.services.identity.dto import UserPublicOut

# ---------------------------- Input DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class LoginIn:
    """
    Input DTO for login.

    Either ``username`` or ``email`` identifies the account; both are matched
    in canonical form.

    :param password: Raw password (to be verified).
    :type password: str
    :param username: Handle, optional when ``email`` is given.
    :type username: str | None
    :param email: Email, optional when ``username`` is given.
    :type email: str | None
    """

    password: str
    username: str | None = None
    email: str | None = None


@dataclass(frozen=True, slots=True)
class RefreshIn:
    """
    Input DTO for token refresh.

    :param refresh_token: Encoded refresh JWT, ``None`` when the client sent none.
    :type refresh_token: str | None
    """

    refresh_token: str | None


# --------------------------- Output DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class TokenPairOut:
    """
    Output DTO with access and refresh tokens.

    :param access_token: Encoded access JWT.
    :type access_token: str
    :param refresh_token: Encoded refresh JWT.
    :type refresh_token: str
    :param access_expires_at: Access token expiry (UTC).
    :type access_expires_at: datetime
    :param refresh_expires_at: Refresh token expiry (UTC).
    :type refresh_expires_at: datetime
    """

    access_token: str
    refresh_token: str
    access_expires_at: datetime
    refresh_expires_at: datetime


@dataclass(frozen=True, slots=True)
class LoginOut:
    """
    Output DTO for a successful login.

    :param user: Sanitized user projection.
    :type user: UserPublicOut
    :param tokens: Freshly issued token pair.
    :type tokens: TokenPairOut
    """

    user: UserPublicOut
    tokens: TokenPairOut
