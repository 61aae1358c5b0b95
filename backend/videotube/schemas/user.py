"""User resource schemas."""

from __future__ import annotations

from marshmallow import Schema, fields, validate


class UserSchema(Schema):
    """Public representation of a user (no password hash, no refresh token)."""

    id = fields.Integer(required=True)
    username = fields.String(required=True)
    email = fields.Email(required=True)
    full_name = fields.String(data_key="fullName", required=True)
    avatar = fields.String(required=True)
    cover_image = fields.String(data_key="coverImage", allow_none=True)
    watch_history = fields.List(fields.String(), data_key="watchHistory")
    created_at = fields.DateTime(data_key="createdAt")
    updated_at = fields.DateTime(data_key="updatedAt")


class UpdateAccountSchema(Schema):
    """Partial update of the display name and/or email."""

    full_name = fields.String(
        data_key="fullName", load_default=None, validate=validate.Length(max=100)
    )
    email = fields.String(load_default=None, validate=validate.Length(max=254))


class AvatarSchema(Schema):
    """New avatar URL produced by the media store."""

    avatar = fields.String(load_default=None, validate=validate.Length(max=2048))


class CoverImageSchema(Schema):
    """New cover image URL produced by the media store."""

    cover_image = fields.String(
        data_key="coverImage", load_default=None, validate=validate.Length(max=2048)
    )


class WatchEntrySchema(Schema):
    """A video the current user has just watched."""

    video_id = fields.String(
        data_key="videoId", required=True, validate=validate.Length(min=1, max=64)
    )
