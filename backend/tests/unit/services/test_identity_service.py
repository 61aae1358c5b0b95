"""Tests for IdentityService."""

from __future__ import annotations

import pytest

from tests.factories.user import UserFactory
from videotube.models.user import User
from videotube.services import AccountUpdateIn, UserPasswordChangeIn, UserRegisterIn
from videotube.services._shared.errors import (
    DuplicateUserError,
    ErrorKind,
    InvalidCredentialsError,
    NotFoundError,
    ValidationFailedError,
)


def _register_in(**overrides) -> UserRegisterIn:
    data = {
        "username": "alice",
        "email": "a@x.com",
        "full_name": "Alice",
        "password": "p1",
        "avatar": "http://cdn/a.png",
    }
    data.update(overrides)
    return UserRegisterIn(**data)


class TestRegister:
    def test_returns_sanitized_projection(self, identity_service, session):
        out = identity_service.register(_register_in(username=" Alice "))

        assert out.id is not None
        assert out.username == "alice"
        assert out.watch_history == ()
        assert not hasattr(out, "password_hash")
        assert not hasattr(out, "refresh_token")

        stored = session.get(User, out.id)
        assert stored.password_hash != "p1"
        assert stored.verify_password("p1")

    def test_cover_image_is_optional(self, identity_service):
        out = identity_service.register(_register_in(cover_image="http://cdn/c.png"))
        assert out.cover_image == "http://cdn/c.png"
        other = identity_service.register(_register_in(username="b", email="b@x.com"))
        assert other.cover_image is None

    @pytest.mark.parametrize("field", ["username", "email", "full_name", "password"])
    def test_blank_fields_fail_validation(self, identity_service, field):
        with pytest.raises(ValidationFailedError) as excinfo:
            identity_service.register(_register_in(**{field: "   "}))
        assert excinfo.value.kind is ErrorKind.VALIDATION

    def test_avatar_required(self, identity_service):
        with pytest.raises(ValidationFailedError, match="avatar"):
            identity_service.register(_register_in(avatar=""))

    def test_duplicate_handle_does_not_touch_existing_user(self, identity_service, session):
        existing = UserFactory(username="alice", email="first@x.com", full_name="First")
        before = existing.password_hash

        with pytest.raises(DuplicateUserError) as excinfo:
            identity_service.register(_register_in(username="ALICE", email="other@x.com"))
        assert excinfo.value.kind is ErrorKind.DUPLICATE_USER

        session.refresh(existing)
        assert existing.email == "first@x.com"
        assert existing.full_name == "First"
        assert existing.password_hash == before

    def test_duplicate_email_is_case_insensitive(self, identity_service):
        UserFactory(username="someone", email="a@x.com")
        with pytest.raises(DuplicateUserError):
            identity_service.register(_register_in(email="A@X.COM"))

    def test_malformed_email_fails_validation(self, identity_service):
        with pytest.raises(ValidationFailedError):
            identity_service.register(_register_in(email="nope"))


class TestProfile:
    def test_get_user(self, identity_service):
        user = UserFactory()
        assert identity_service.get_user(user.id).email == user.email

    def test_get_missing_user(self, identity_service):
        with pytest.raises(NotFoundError):
            identity_service.get_user(424242)

    def test_update_account_requires_a_field(self, identity_service):
        user = UserFactory()
        with pytest.raises(ValidationFailedError):
            identity_service.update_account(user.id, AccountUpdateIn(full_name=" ", email=None))

    def test_update_account(self, identity_service):
        user = UserFactory(password="keep-me")
        out = identity_service.update_account(
            user.id, AccountUpdateIn(full_name="New Name", email="New@X.com")
        )
        assert out.full_name == "New Name"
        assert out.email == "new@x.com"
        assert user.verify_password("keep-me")

    def test_update_account_email_must_stay_unique(self, identity_service):
        UserFactory(email="taken@x.com")
        user = UserFactory()
        with pytest.raises(DuplicateUserError):
            identity_service.update_account(user.id, AccountUpdateIn(email="TAKEN@x.com"))

    def test_update_account_with_own_email_is_allowed(self, identity_service):
        user = UserFactory(email="mine@x.com")
        out = identity_service.update_account(user.id, AccountUpdateIn(email="mine@x.com"))
        assert out.email == "mine@x.com"

    def test_update_avatar_and_cover(self, identity_service):
        user = UserFactory()
        assert identity_service.update_avatar(user.id, "http://cdn/new.png").avatar == (
            "http://cdn/new.png"
        )
        assert identity_service.update_cover_image(user.id, "http://cdn/cover.png").cover_image == (
            "http://cdn/cover.png"
        )

    @pytest.mark.parametrize("url", [None, "", "  "])
    def test_media_urls_are_required(self, identity_service, url):
        user = UserFactory()
        with pytest.raises(ValidationFailedError):
            identity_service.update_avatar(user.id, url)
        with pytest.raises(ValidationFailedError):
            identity_service.update_cover_image(user.id, url)


class TestWatchHistory:
    def test_record_and_read(self, identity_service):
        user = UserFactory()
        identity_service.record_watch(user.id, "v1")
        identity_service.record_watch(user.id, "v2")
        assert identity_service.record_watch(user.id, "v1") == ["v2", "v1"]
        assert identity_service.get_watch_history(user.id) == ["v2", "v1"]

    def test_blank_video_id(self, identity_service):
        user = UserFactory()
        with pytest.raises(ValidationFailedError):
            identity_service.record_watch(user.id, " ")

    def test_missing_user(self, identity_service):
        with pytest.raises(NotFoundError):
            identity_service.record_watch(424242, "v1")


class TestChangePassword:
    def test_changes_password(self, identity_service, session):
        user = UserFactory(password="old")
        identity_service.change_password(
            UserPasswordChangeIn(user_id=user.id, old_password="old", new_password="new")
        )
        session.refresh(user)
        assert user.verify_password("new")
        assert not user.verify_password("old")

    def test_wrong_old_password(self, identity_service, session):
        user = UserFactory(password="old")
        before = user.password_hash
        with pytest.raises(InvalidCredentialsError) as excinfo:
            identity_service.change_password(
                UserPasswordChangeIn(user_id=user.id, old_password="nope", new_password="new")
            )
        assert excinfo.value.kind is ErrorKind.INVALID_CREDENTIALS
        session.refresh(user)
        assert user.password_hash == before

    def test_keeps_the_stored_refresh_token(self, identity_service, session):
        user = UserFactory(password="old", refresh_token="rt-1")
        identity_service.change_password(
            UserPasswordChangeIn(user_id=user.id, old_password="old", new_password="new")
        )
        session.refresh(user)
        assert user.refresh_token == "rt-1"
