"""User model definition for the video-sharing backend."""

from __future__ import annotations

from typing import Any

from sqlalchemy import JSON, Index, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, validates

from videotube.core.extensions import db
from videotube.core.security import get_hasher

from .base import PKMixin, ReprMixin, TimestampMixin


def canonical(value: str) -> str:
    """
    Return the canonical form used for handle/email uniqueness.

    :param value: Raw handle or email.
    :type value: str
    :returns: Trimmed, case-folded value.
    :rtype: str
    """
    return value.strip().lower()


class User(PKMixin, ReprMixin, TimestampMixin, db.Model):
    """
    Account identity and session anchor.

    Fields
    ------
    username : str
        Public handle. Stored canonical (trimmed, lowercase), unique.
    email : str
        Login email. Stored canonical (trimmed, lowercase), unique.
    full_name : str
        Display name (trimmed).
    avatar : str
        Avatar URL from the media store (required).
    cover_image : str | None
        Cover image URL (optional).
    watch_history : list[str]
        Ordered video identifiers, most recent last.
    password_hash : str
        Hashed password (write-only setter via ``password``).
    refresh_token : str | None
        The single refresh token currently valid; ``None`` means no session.
    created_at : datetime
        Creation timestamp (from mixin).
    updated_at : datetime
        Update timestamp (from mixin).
    """

    __tablename__ = "users"
    __repr_attrs__ = ("username",)

    # Columns
    username: Mapped[str] = mapped_column(String(50), nullable=False)
    email: Mapped[str] = mapped_column(String(254), nullable=False)
    full_name: Mapped[str] = mapped_column(String(100), nullable=False)
    avatar: Mapped[str] = mapped_column(String(2048), nullable=False)
    cover_image: Mapped[str | None] = mapped_column(String(2048), nullable=True)
    watch_history: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    password_hash: Mapped[str] = mapped_column(String(254), nullable=False)
    refresh_token: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Constraints & indexes
    __table_args__ = (
        UniqueConstraint("email", name="uq_users_email"),
        UniqueConstraint("username", name="uq_users_username"),
        Index("ix_users_full_name", "full_name"),
    )

    # -------------------- Password API --------------------
    @property
    def password(self) -> Any:  # pragma: no cover - explicit write-only contract
        """
        Disallow reading passwords.

        :raises AttributeError: Always, to ensure password is write-only.
        """
        raise AttributeError("Password is write-only.")

    @password.setter
    def password(self, raw: str) -> None:
        """
        Hash and set the password.

        Assigning this attribute is the only way ``password_hash`` changes, so
        unrelated updates never re-hash.

        :param raw: Plain text password to hash.
        :type raw: str
        :raises ValueError: If ``raw`` is empty.
        """
        self.password_hash = get_hasher().hash(raw)

    def verify_password(self, raw: str) -> bool:
        """
        Verify a password against the stored hash.

        :param raw: Plain text password candidate.
        :type raw: str
        :returns: ``True`` if it matches; otherwise ``False``.
        :rtype: bool
        """
        return get_hasher().verify(raw, self.password_hash)

    # -------------------- Validators --------------------
    @validates("email")
    def _normalize_email(self, key: str, value: str) -> str:
        """
        Normalize and validate email.

        :param key: Field name (``email``).
        :type key: str
        :param value: Email to normalize.
        :type value: str
        :returns: Canonical email.
        :rtype: str
        :raises ValueError: If email is missing or malformed.
        """
        if not value or not isinstance(value, str):
            raise ValueError("Email is required.")
        v = canonical(value)
        # Minimal sanity check; full validation happens at API layer.
        if "@" not in v or "." not in v.split("@")[-1]:
            raise ValueError("Email format looks invalid.")
        return v

    @validates("username")
    def _normalize_username(self, key: str, value: str) -> str:
        """
        Normalize and validate the handle.

        :param key: Field name (``username``).
        :type key: str
        :param value: Handle to normalize.
        :type value: str
        :returns: Canonical handle.
        :rtype: str
        :raises ValueError: If the handle is missing or only whitespace.
        """
        if not isinstance(value, str) or not value.strip():
            raise ValueError("Username is required.")
        return canonical(value)

    @validates("full_name")
    def _normalize_full_name(self, key: str, value: str) -> str:
        if not isinstance(value, str) or not value.strip():
            raise ValueError("Full name is required.")
        return value.strip()

    @validates("avatar")
    def _validate_avatar(self, key: str, value: str) -> str:
        if not isinstance(value, str) or not value.strip():
            raise ValueError("Avatar is required.")
        return value.strip()
