"""Authentication-related Marshmallow schemas.

Blank or missing identity fields are left to the service layer, which reports
them as validation failures; these schemas only enforce types and shapes.
"""

from __future__ import annotations

from marshmallow import EXCLUDE, Schema, fields, validate


class RegisterSchema(Schema):
    """Input payload for account registration."""

    username = fields.String(load_default=None, validate=validate.Length(max=50))
    email = fields.String(load_default=None, validate=validate.Length(max=254))
    full_name = fields.String(
        data_key="fullName", load_default=None, validate=validate.Length(max=100)
    )
    password = fields.String(load_default=None, validate=validate.Length(max=128))
    avatar = fields.String(load_default=None, validate=validate.Length(max=2048))
    cover_image = fields.String(
        data_key="coverImage", load_default=None, validate=validate.Length(max=2048)
    )


class LoginSchema(Schema):
    """Input payload for authenticating by handle or email."""

    class Meta:
        unknown = EXCLUDE

    username = fields.String(load_default=None)
    email = fields.String(load_default=None)
    password = fields.String(load_default=None)


class RefreshSchema(Schema):
    """Body fallback for clients that cannot send the refresh cookie."""

    class Meta:
        unknown = EXCLUDE

    refresh_token = fields.String(data_key="refreshToken", load_default=None)


class ChangePasswordSchema(Schema):
    """Input payload for changing the current user's password."""

    old_password = fields.String(data_key="oldPassword", load_default=None)
    new_password = fields.String(
        data_key="newPassword", load_default=None, validate=validate.Length(max=128)
    )


class TokenPairSchema(Schema):
    """Response payload carrying a freshly issued token pair."""

    access_token = fields.String(data_key="accessToken", required=True)
    refresh_token = fields.String(data_key="refreshToken", required=True)
