"""One-way password hashing built on :mod:`werkzeug.security`."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from flask import Flask
from werkzeug.security import check_password_hash, generate_password_hash

from videotube.services._shared.errors import InternalError

log = logging.getLogger(__name__)

DEFAULT_METHOD = "scrypt"
DEFAULT_SALT_LENGTH = 16


@dataclass(frozen=True, slots=True)
class PasswordHasher:
    """
    Salted, deliberately slow password hasher.

    Hashing the same plaintext twice yields different strings (random salt);
    :meth:`verify` is correct for any of them because the method and salt are
    encoded in the hash itself.

    :param method: Werkzeug method string (``"scrypt"``, ``"pbkdf2:sha256"``...).
    :type method: str
    :param salt_length: Number of salt characters.
    :type salt_length: int
    """

    method: str = DEFAULT_METHOD
    salt_length: int = DEFAULT_SALT_LENGTH

    def hash(self, plaintext: str) -> str:
        """
        Hash ``plaintext``.

        :param plaintext: Raw password; must be a non-empty string.
        :type plaintext: str
        :returns: Encoded hash (``method$salt$digest``).
        :rtype: str
        :raises ValueError: If ``plaintext`` is empty or not a string.
        :raises InternalError: If the hashing backend fails.
        """
        if not isinstance(plaintext, str) or not plaintext:
            raise ValueError("Password must be a non-empty string.")
        try:
            return generate_password_hash(
                plaintext, method=self.method, salt_length=self.salt_length
            )
        except (ValueError, TypeError) as exc:
            log.error("password.hash_failed method=%s", self.method)
            raise InternalError("password hashing failed") from exc

    def verify(self, plaintext: str, hashed: str | None) -> bool:
        """
        Check ``plaintext`` against a stored hash.

        :param plaintext: Candidate password.
        :type plaintext: str
        :param hashed: Stored hash; ``None``/empty never verifies.
        :type hashed: str | None
        :returns: ``True`` when the password matches.
        :rtype: bool
        """
        if not hashed or not isinstance(plaintext, str):
            return False
        return bool(check_password_hash(hashed, plaintext))


_hasher = PasswordHasher()


def get_hasher() -> PasswordHasher:
    """Return the process-wide hasher configured by :func:`init_app`."""
    return _hasher


def init_app(app: Flask) -> None:
    """Configure the process-wide hasher from ``PASSWORD_HASH_METHOD``."""
    global _hasher
    _hasher = PasswordHasher(method=app.config.get("PASSWORD_HASH_METHOD", DEFAULT_METHOD))


__all__ = ["PasswordHasher", "get_hasher", "init_app"]
