"""
IdentityService
===============

Aggregate service responsible for managing the `User` record:
- Registration (canonical handle/email uniqueness)
- Profile fields (display name, email, avatar, cover image)
- Password lifecycle
- Watch history
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.exc import IntegrityError

from videotube.repositories.user import UserRepository
from videotube.services._shared.base import BaseService
from videotube.services._shared.errors import (
    DuplicateUserError,
    InvalidCredentialsError,
    NotFoundError,
    ValidationFailedError,
    violates,
)
from videotube.services.identity.dto import (
    AccountUpdateIn,
    UserPasswordChangeIn,
    UserPublicOut,
    UserRegisterIn,
)

log = logging.getLogger(__name__)


def _blank(value: str | None) -> bool:
    return value is None or not str(value).strip()


def _raise_duplicate(exc: IntegrityError) -> None:
    # PostgreSQL names the constraint; SQLite reports ``table.column``.
    if violates(exc, "uq_users_email") or violates(exc, "users.email"):
        raise DuplicateUserError("email already in use") from exc
    if violates(exc, "uq_users_username") or violates(exc, "users.username"):
        raise DuplicateUserError("username already in use") from exc


class IdentityService(BaseService):
    """
    Application service for the `User` record.

    Responsibilities
    ----------------
    - Register users ensuring handle and email uniqueness.
    - Retrieve and update profile fields safely.
    - Manage the password lifecycle behind current-password verification.
    - Maintain the ordered watch history.
    """

    # --------------------------------------------------------------------- #
    # Registration
    # --------------------------------------------------------------------- #

    def register(self, dto: UserRegisterIn) -> UserPublicOut:
        """
        Register a new user.

        :param dto: User registration input DTO.
        :type dto: UserRegisterIn
        :returns: Public-safe user DTO.
        :rtype: UserPublicOut
        :raises ValidationFailedError: If a required field is missing or blank.
        :raises DuplicateUserError: If the handle or email is already taken.
        """
        missing = [
            name
            for name in ("username", "email", "full_name", "password")
            if _blank(getattr(dto, name))
        ]
        if missing:
            raise ValidationFailedError(f"required fields missing: {', '.join(missing)}")
        if _blank(dto.avatar):
            raise ValidationFailedError("avatar file is required")

        with self.rw_uow() as uow:
            repo: UserRepository = uow.users

            if repo.exists_by_handle_or_email(username=dto.username, email=dto.email):
                raise DuplicateUserError()

            try:
                user = repo.create(
                    username=dto.username,
                    email=dto.email,
                    full_name=dto.full_name,
                    password=dto.password,
                    avatar=dto.avatar,
                    cover_image=dto.cover_image,
                )
            except ValueError as exc:
                raise ValidationFailedError(str(exc)) from exc
            except IntegrityError as exc:
                _raise_duplicate(exc)
                raise

            out = UserPublicOut.from_user(user)

        log.info("user registered", extra={"user_id": out.id})
        return out

    # --------------------------------------------------------------------- #
    # Retrieval
    # --------------------------------------------------------------------- #

    def get_user(self, user_id: int) -> UserPublicOut:
        """
        Retrieve a user by identifier.

        :param user_id: User primary key.
        :type user_id: int
        :returns: Public-safe user DTO.
        :rtype: UserPublicOut
        :raises NotFoundError: If user does not exist.
        """
        with self.ro_uow() as uow:
            user = uow.users.get(user_id)
            if user is None:
                raise NotFoundError("User", user_id)
            return UserPublicOut.from_user(user)

    def get_watch_history(self, user_id: int) -> list[str]:
        """Return the user's watch history, oldest first."""
        with self.ro_uow() as uow:
            user = uow.users.get(user_id)
            if user is None:
                raise NotFoundError("User", user_id)
            return list(user.watch_history or [])

    # --------------------------------------------------------------------- #
    # Profile updates
    # --------------------------------------------------------------------- #

    def update_account(self, user_id: int, dto: AccountUpdateIn) -> UserPublicOut:
        """
        Update the display name and/or email.

        :param user_id: User identifier.
        :type user_id: int
        :param dto: Input DTO containing new values.
        :type dto: AccountUpdateIn
        :returns: Updated user DTO.
        :rtype: UserPublicOut
        :raises ValidationFailedError: When no field is provided.
        :raises DuplicateUserError: When the email belongs to another user.
        :raises NotFoundError: When user not found.
        """
        updates: dict[str, Any] = {
            k: v
            for k, v in {"full_name": dto.full_name, "email": dto.email}.items()
            if not _blank(v)
        }
        if not updates:
            raise ValidationFailedError("full_name or email is required")

        with self.rw_uow() as uow:
            repo: UserRepository = uow.users
            user = repo.get_for_update(user_id)
            if user is None:
                raise NotFoundError("User", user_id)

            if "email" in updates and repo.email_taken_by_other(updates["email"], user_id):
                raise DuplicateUserError("email already in use")

            try:
                repo.update_profile_fields(user, updates)
            except ValueError as exc:
                raise ValidationFailedError(str(exc)) from exc
            except IntegrityError as exc:
                _raise_duplicate(exc)
                raise

            return UserPublicOut.from_user(user)

    def update_avatar(self, user_id: int, avatar_url: str | None) -> UserPublicOut:
        """
        Replace the avatar reference.

        :raises ValidationFailedError: When ``avatar_url`` is blank.
        :raises NotFoundError: When user not found.
        """
        if _blank(avatar_url):
            raise ValidationFailedError("avatar file is missing")
        return self._update_media(user_id, "avatar", avatar_url)

    def update_cover_image(self, user_id: int, cover_image_url: str | None) -> UserPublicOut:
        """
        Replace the cover image reference.

        :raises ValidationFailedError: When ``cover_image_url`` is blank.
        :raises NotFoundError: When user not found.
        """
        if _blank(cover_image_url):
            raise ValidationFailedError("cover image file is missing")
        return self._update_media(user_id, "cover_image", cover_image_url)

    def _update_media(self, user_id: int, field: str, url: str | None) -> UserPublicOut:
        with self.rw_uow() as uow:
            repo: UserRepository = uow.users
            user = repo.get_for_update(user_id)
            if user is None:
                raise NotFoundError("User", user_id)
            try:
                repo.update_profile_fields(user, {field: url.strip() if url else url})
            except ValueError as exc:
                raise ValidationFailedError(str(exc)) from exc
            return UserPublicOut.from_user(user)

    # --------------------------------------------------------------------- #
    # Watch history
    # --------------------------------------------------------------------- #

    def record_watch(self, user_id: int, video_id: str) -> list[str]:
        """
        Append ``video_id`` to the watch history (moved to the end if present).

        :param user_id: User identifier.
        :type user_id: int
        :param video_id: Video identifier from the catalogue.
        :type video_id: str
        :returns: The updated history.
        :rtype: list[str]
        :raises ValidationFailedError: When ``video_id`` is blank.
        :raises NotFoundError: When user not found.
        """
        if _blank(video_id):
            raise ValidationFailedError("video id is required")

        with self.rw_uow() as uow:
            repo: UserRepository = uow.users
            user = repo.get_for_update(user_id)
            if user is None:
                raise NotFoundError("User", user_id)
            return repo.record_watch(user, video_id.strip())

    # --------------------------------------------------------------------- #
    # Password management
    # --------------------------------------------------------------------- #

    def change_password(self, dto: UserPasswordChangeIn) -> None:
        """
        Change a user's password after verifying the current one.

        The stored refresh token is left untouched, so an existing session
        keeps refreshing after a password change.

        :param dto: Input DTO containing old and new passwords.
        :type dto: UserPasswordChangeIn
        :raises ValidationFailedError: When either password is blank.
        :raises NotFoundError: When user not found.
        :raises InvalidCredentialsError: When the current password is wrong.
        """
        if _blank(dto.old_password) or _blank(dto.new_password):
            raise ValidationFailedError("old and new passwords are required")

        with self.rw_uow() as uow:
            repo: UserRepository = uow.users
            user = repo.get_for_update(dto.user_id)
            if user is None:
                raise NotFoundError("User", dto.user_id)

            if not repo.verify_password(user, dto.old_password):
                log.warning("password change refused", extra={"user_id": dto.user_id})
                raise InvalidCredentialsError("invalid old password")

            repo.set_password(user, dto.new_password)

        log.info("password changed", extra={"user_id": dto.user_id})
