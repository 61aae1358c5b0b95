from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Protocol


class TokenClass(str, Enum):
    """The two token classes; each one is signed with its own secret."""

    ACCESS = "access"
    REFRESH = "refresh"


@dataclass(frozen=True, slots=True)
class IdentityClaims:
    """
    Denormalized identity carried by an access token.

    :ivar user_id: User primary key.
    :ivar email: Canonical email.
    :ivar username: Canonical handle.
    :ivar full_name: Display name.
    """

    user_id: int
    email: str
    username: str
    full_name: str


@dataclass(frozen=True, slots=True)
class IssuedToken:
    """
    Encoded token plus its absolute expiry.

    :ivar token: Opaque signed string handed to the client.
    :ivar expires_at: Expiry instant (UTC).
    """

    token: str
    expires_at: datetime


@dataclass(frozen=True, slots=True)
class VerifiedToken:
    """
    Claims of a token that passed signature, class and expiry checks.

    :ivar token_class: Access or refresh.
    :ivar subject: User id taken from ``sub``.
    :ivar jti: Unique token identifier.
    :ivar expires_at: Expiry instant (UTC).
    :ivar claims: Remaining identity claims (empty for refresh tokens).
    """

    token_class: TokenClass
    subject: int
    jti: str
    expires_at: datetime
    claims: dict[str, Any] = field(default_factory=dict)


class TokenProvider(Protocol):
    """Port for issuing and verifying access/refresh tokens."""

    def issue_access(self, identity: IdentityClaims) -> IssuedToken: ...

    def issue_refresh(self, user_id: int) -> IssuedToken: ...

    def verify(self, token: str, token_class: TokenClass) -> VerifiedToken: ...
