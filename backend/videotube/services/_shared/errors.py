"""
Domain-level exceptions used within the service layer.

These exceptions are **framework-agnostic** and should never import or depend
on Flask or HTTP directly. They serve as stable contracts between
repositories, the token provider, and application services.

Every error carries an :class:`ErrorKind` and a short machine-stable message.
The translation to HTTP responses (RFC 7807) is handled by
``videotube/core/errors.py``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from sqlalchemy.exc import IntegrityError


def violates(exc: IntegrityError, constraint_name: str) -> bool:
    """
    Check whether an IntegrityError originates from a specific constraint.

    PostgreSQL reports the constraint name; SQLite reports ``table.column``,
    so callers may pass either form.

    Parameters
    ----------
    exc : IntegrityError
        The exception raised by SQLAlchemy during flush/commit.
    constraint_name : str
        Constraint name (e.g., 'uq_users_email') or ``table.column`` pair.

    Returns
    -------
    bool
        True if the IntegrityError matches the given constraint.
    """
    message = str(exc.orig).lower() if exc.orig else ""
    return constraint_name.lower() in message


class ErrorKind(str, Enum):
    """Fixed error vocabulary exposed by the service layer."""

    VALIDATION = "VALIDATION"
    DUPLICATE_USER = "DUPLICATE_USER"
    NOT_FOUND = "NOT_FOUND"
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    UNAUTHORIZED = "UNAUTHORIZED"
    INVALID_TOKEN = "INVALID_TOKEN"
    TOKEN_REUSE_OR_EXPIRED = "TOKEN_REUSE_OR_EXPIRED"
    INTERNAL = "INTERNAL"


class TokenFailure(str, Enum):
    """Reason a token failed verification."""

    EXPIRED = "EXPIRED"
    INVALID_SIGNATURE = "INVALID_SIGNATURE"
    MALFORMED = "MALFORMED"


# --------------------------------------------------------------------------- #
# Base types
# --------------------------------------------------------------------------- #


class ServiceError(Exception):
    """
    Base class for all service-level errors.

    Notes
    -----
    - These are *not* HTTP errors.
    - They can be safely raised from repositories or domain logic.
    - The API layer translates ``kind`` into a status code.
    """

    kind: ErrorKind = ErrorKind.INTERNAL


# --------------------------------------------------------------------------- #
# Specific domain-level errors
# --------------------------------------------------------------------------- #


class ValidationFailedError(ServiceError):
    """Raised when required input is missing or blank."""

    kind = ErrorKind.VALIDATION


@dataclass(slots=True)
class NotFoundError(ServiceError):
    """
    Raised when an entity is not found in the repository.

    :param entity: Entity name (e.g., "User").
    :type entity: str
    :param key: Identifier or search key.
    :type key: str | int
    """

    entity: str
    key: str | int

    kind = ErrorKind.NOT_FOUND

    def __str__(self) -> str:
        return f"{self.entity} not found: {self.key}"


@dataclass(slots=True)
class ConflictError(ServiceError):
    """
    Raised when a unique constraint conflict occurs.

    :param entity: Entity name (e.g., "User").
    :type entity: str
    :param detail: Short machine-stable explanation.
    :type detail: str
    """

    entity: str
    detail: str

    kind = ErrorKind.DUPLICATE_USER

    def __str__(self) -> str:
        return f"Conflict on {self.entity}: {self.detail}"


class DuplicateUserError(ConflictError):
    """Handle or email already taken by another user."""

    def __init__(self, detail: str = "username or email already in use") -> None:
        super().__init__("User", detail)


class InvalidCredentialsError(ServiceError):
    """Password verification failed."""

    kind = ErrorKind.INVALID_CREDENTIALS

    def __init__(self, message: str = "invalid credentials") -> None:
        super().__init__(message)


class UnauthorizedError(ServiceError):
    """A required credential was not presented or has no active session."""

    kind = ErrorKind.UNAUTHORIZED

    def __init__(self, message: str = "unauthorized request") -> None:
        super().__init__(message)


class InvalidTokenError(ServiceError):
    """
    A token failed verification (bad signature, malformed or expired).

    :param reason: Specific verification failure.
    :type reason: TokenFailure
    :param message: Short machine-stable message.
    :type message: str
    """

    kind = ErrorKind.INVALID_TOKEN

    def __init__(self, reason: TokenFailure, message: str = "invalid token") -> None:
        super().__init__(message)
        self.reason = reason


class TokenReuseError(ServiceError):
    """A validly signed refresh token no longer matches the stored one."""

    kind = ErrorKind.TOKEN_REUSE_OR_EXPIRED

    def __init__(self, message: str = "refresh token is expired or used") -> None:
        super().__init__(message)


class InternalError(ServiceError):
    """Hashing or signing subsystem failure."""

    kind = ErrorKind.INTERNAL
