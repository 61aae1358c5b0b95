"""User repository: canonical lookups, password gate and refresh-token storage."""

from __future__ import annotations

from typing import Any, cast

from sqlalchemy import CursorResult, or_, select, update

from videotube.models.user import User, canonical
from videotube.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """Persistence-only repository for :class:`User`.

    Password-bearing writes go through :meth:`create` and :meth:`set_password`
    only; :meth:`update_profile_fields` rejects them. Refresh-token writes are
    single UPDATE statements keyed on the user id so they never load, validate
    or re-hash anything else on the record.
    """

    model = User

    def _updatable_fields(self):
        """Profile fields only (no password, no refresh token)."""
        return {"full_name", "email", "avatar", "cover_image"}

    # ---------------------------- Lookup helpers ----------------------------

    def find_by_handle_or_email(
        self, *, username: str | None = None, email: str | None = None
    ) -> User | None:
        """Fetch the user matching either the handle or the email.

        Blank or missing values are ignored; both are compared canonically.

        :param username: Handle candidate.
        :type username: str | None
        :param email: Email candidate.
        :type email: str | None
        :returns: Matching user or ``None``.
        :rtype: User | None
        """
        clauses = []
        if username and username.strip():
            clauses.append(User.username == canonical(username))
        if email and email.strip():
            clauses.append(User.email == canonical(email))
        if not clauses:
            return None
        stmt = select(User).where(or_(*clauses)).order_by(User.id.asc())
        return cast(User | None, self.session.execute(stmt).scalars().first())

    def exists_by_handle_or_email(self, *, username: str, email: str) -> bool:
        """Return ``True`` when the handle or the email is already taken."""
        return self.find_by_handle_or_email(username=username, email=email) is not None

    def email_taken_by_other(self, email: str, user_id: int) -> bool:
        """Return ``True`` when another user already owns ``email``."""
        stmt = select(User.id).where(User.email == canonical(email), User.id != user_id)
        return self.session.execute(stmt).first() is not None

    # ---------------------------- Creation ----------------------------

    def create(
        self,
        *,
        username: str,
        email: str,
        full_name: str,
        password: str,
        avatar: str,
        cover_image: str | None = None,
    ) -> User:
        """Create and flush a user; the model setter hashes ``password``.

        :raises ValueError: If a field fails model validation.
        :raises sqlalchemy.exc.IntegrityError: On handle/email collisions.
        """
        user = User(
            username=username,
            email=email,
            full_name=full_name,
            avatar=avatar,
            cover_image=cover_image or None,
            watch_history=[],
        )
        user.password = password
        return self.add(user)

    # ---------------------------- Password ops ----------------------------

    def verify_password(self, user: User, password: str) -> bool:
        """Check ``password`` against the user's stored hash."""
        return user.verify_password(password)

    def set_password(self, user: User, new_password: str) -> None:
        """Re-hash and store a new password, then flush.

        :param user: Target user.
        :type user: User
        :param new_password: Raw password; hashing happens in the model setter.
        :type new_password: str
        """
        user.password = new_password
        self.flush()

    # ---------------------------- Profile ops ----------------------------

    def update_profile_fields(self, user: User, fields: dict[str, Any]) -> User:
        """Assign whitelisted profile fields; password keys raise ``ValueError``."""
        return self.assign_updates(user, fields, strict=True, flush=True)

    def record_watch(self, user: User, video_id: str) -> list[str]:
        """Move ``video_id`` to the end of the user's watch history.

        :returns: The new ordered history.
        :rtype: list[str]
        """
        history = [v for v in (user.watch_history or []) if v != video_id]
        history.append(video_id)
        # Reassign so the JSON column is flagged dirty.
        user.watch_history = history
        self.flush()
        return history

    # ---------------------------- Refresh token ----------------------------

    def get_refresh_token(self, user_id: int) -> str | None:
        """Read the stored refresh token straight from the database."""
        stmt = select(User.refresh_token).where(User.id == user_id)
        return cast(str | None, self.session.execute(stmt).scalar_one_or_none())

    def set_refresh_token(self, user_id: int, token: str | None) -> bool:
        """Unconditionally store (or clear with ``None``) the refresh token.

        :returns: ``True`` when the user row exists.
        :rtype: bool
        """
        stmt = update(User).where(User.id == user_id).values(refresh_token=token)
        result = cast(CursorResult[Any], self.session.execute(stmt))
        return result.rowcount == 1

    def swap_refresh_token(self, user_id: int, *, expected: str, new: str) -> bool:
        """Atomically replace the refresh token only if it still equals ``expected``.

        A single conditional ``UPDATE ... WHERE id = :id AND refresh_token =
        :expected``: of two concurrent callers holding the same token, only the
        first one matches a row.

        :param user_id: Owner user id.
        :type user_id: int
        :param expected: Token value presented by the client.
        :type expected: str
        :param new: Replacement token.
        :type new: str
        :returns: ``True`` if this call won the swap.
        :rtype: bool
        """
        stmt = (
            update(User)
            .where(User.id == user_id, User.refresh_token == expected)
            .values(refresh_token=new)
        )
        result = cast(CursorResult[Any], self.session.execute(stmt))
        return result.rowcount == 1
