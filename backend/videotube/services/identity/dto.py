"""
DTOs for IdentityService.

Data Transfer Objects (DTOs) isolate the service layer from ORM models,
ensuring clear input/output contracts and type safety.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from videotube.models.user import User

# --------------------------------------------------------------------------- #
# Input DTOs
# --------------------------------------------------------------------------- #


@dataclass(frozen=True, slots=True)
class UserRegisterIn:
    """
    Input DTO for user registration.

    :param username: Public handle (canonicalized by the model).
    :type username: str
    :param email: Login email (canonicalized by the model).
    :type email: str
    :param full_name: Display name.
    :type full_name: str
    :param password: Raw password to be hashed by the model.
    :type password: str
    :param avatar: Avatar URL returned by the media store.
    :type avatar: str
    :param cover_image: Optional cover image URL.
    :type cover_image: str | None
    """

    username: str
    email: str
    full_name: str
    password: str
    avatar: str
    cover_image: str | None = None


@dataclass(frozen=True, slots=True)
class AccountUpdateIn:
    """
    Input DTO for updating account details. At least one field is required.

    :param full_name: Optional new display name.
    :type full_name: str | None
    :param email: Optional new email.
    :type email: str | None
    """

    full_name: str | None = None
    email: str | None = None


@dataclass(frozen=True, slots=True)
class UserPasswordChangeIn:
    """
    Input DTO for changing a user's password.

    :param user_id: User identifier.
    :type user_id: int
    :param old_password: Current password.
    :type old_password: str
    :param new_password: New password (raw).
    :type new_password: str
    """

    user_id: int
    old_password: str
    new_password: str


# --------------------------------------------------------------------------- #
# Output DTOs
# --------------------------------------------------------------------------- #


@dataclass(frozen=True, slots=True)
class UserPublicOut:
    """
    Output DTO representing public-safe user data.

    Never carries the password hash or the stored refresh token.
    """

    id: int
    username: str
    email: str
    full_name: str
    avatar: str
    cover_image: str | None
    watch_history: tuple[str, ...]
    created_at: datetime | None
    updated_at: datetime | None

    @classmethod
    def from_user(cls, user: User) -> UserPublicOut:
        """Project a loaded :class:`User` into its sanitized form."""
        return cls(
            id=user.id,
            username=user.username,
            email=user.email,
            full_name=user.full_name,
            avatar=user.avatar,
            cover_image=user.cover_image,
            watch_history=tuple(user.watch_history or ()),
            created_at=user.created_at,
            updated_at=user.updated_at,
        )
