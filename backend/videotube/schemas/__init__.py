"""Convenience exports for application schemas."""

from __future__ import annotations

from .auth import (
    ChangePasswordSchema,
    LoginSchema,
    RefreshSchema,
    RegisterSchema,
    TokenPairSchema,
)
from .user import (
    AvatarSchema,
    CoverImageSchema,
    UpdateAccountSchema,
    UserSchema,
    WatchEntrySchema,
)

__all__ = [
    "RegisterSchema",
    "LoginSchema",
    "RefreshSchema",
    "ChangePasswordSchema",
    "TokenPairSchema",
    "UserSchema",
    "UpdateAccountSchema",
    "AvatarSchema",
    "CoverImageSchema",
    "WatchEntrySchema",
]
