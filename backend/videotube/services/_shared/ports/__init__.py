"""
videotube.services._shared.ports
================================

*Ports* (hexagonal interfaces) that define the contracts for token
management.

These ports decouple the service layer from the concrete token
implementation.

Modules
-------
- :mod:`token_provider`:
    Defines :class:`~.TokenProvider` (issue access/refresh tokens, verify a
    token of a given class) and its value objects :class:`~.TokenClass`,
    :class:`~.IdentityClaims`, :class:`~.IssuedToken` and
    :class:`~.VerifiedToken`.

Design Notes
------------
Concrete adapters (e.g., PyJWT) implement these interfaces under
``videotube.infra``.
"""

from __future__ import annotations

from .token_provider import (
    IdentityClaims,
    IssuedToken,
    TokenClass,
    TokenProvider,
    VerifiedToken,
)

__all__ = [
    "TokenProvider",
    "TokenClass",
    "IdentityClaims",
    "IssuedToken",
    "VerifiedToken",
]
