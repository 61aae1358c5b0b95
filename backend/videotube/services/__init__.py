"""Service layer public API.

This package exposes the essential building blocks for the service layer so that
callers can import from :mod:`videotube.services` without knowing internal structure.

Re-exports
----------
- Base primitives (from ``videotube.services._shared.base``)
    * :class:`BaseService`
    * :class:`ServiceContext`

- Identity service (from ``videotube.services.identity``)
    * :class:`IdentityService`
    * DTOs: :class:`UserRegisterIn`, :class:`AccountUpdateIn`,
      :class:`UserPasswordChangeIn`, :class:`UserPublicOut`

- Auth service (from ``videotube.services.auth``)
    * :class:`AuthService`
    * DTOs: :class:`LoginIn`, :class:`RefreshIn`, :class:`LoginOut`,
      :class:`TokenPairOut`
"""

from __future__ import annotations

# Base primitives (service base + request-scoped context)
from ._shared.base import BaseService, ServiceContext

# Auth service + DTOs
from .auth.dto import LoginIn, LoginOut, RefreshIn, TokenPairOut
from .auth.service import AuthService

# Identity service + DTOs
from .identity.dto import (
    AccountUpdateIn,
    UserPasswordChangeIn,
    UserPublicOut,
    UserRegisterIn,
)
from .identity.service import IdentityService

__all__ = [
    # Base
    "BaseService",
    "ServiceContext",
    # Identity
    "IdentityService",
    "UserRegisterIn",
    "AccountUpdateIn",
    "UserPasswordChangeIn",
    "UserPublicOut",
    # Auth
    "AuthService",
    "LoginIn",
    "RefreshIn",
    "LoginOut",
    "TokenPairOut",
]
