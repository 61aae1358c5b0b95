"""User account and session endpoints."""

from __future__ import annotations

from flask import Blueprint, request

from videotube.api.deps import (
    REFRESH_COOKIE,
    clear_auth_cookies,
    current_user_id,
    get_auth_service,
    get_identity_service,
    json_response,
    require_auth,
    set_auth_cookies,
    timing,
)
from videotube.schemas import (
    AvatarSchema,
    ChangePasswordSchema,
    CoverImageSchema,
    LoginSchema,
    RefreshSchema,
    RegisterSchema,
    TokenPairSchema,
    UpdateAccountSchema,
    UserSchema,
    WatchEntrySchema,
)
from videotube.services import (
    AccountUpdateIn,
    LoginIn,
    RefreshIn,
    UserPasswordChangeIn,
    UserRegisterIn,
)

bp = Blueprint("users", __name__)

register_schema = RegisterSchema()
login_schema = LoginSchema()
refresh_schema = RefreshSchema()
change_password_schema = ChangePasswordSchema()
token_schema = TokenPairSchema()
user_schema = UserSchema()
update_account_schema = UpdateAccountSchema()
avatar_schema = AvatarSchema()
cover_image_schema = CoverImageSchema()
watch_entry_schema = WatchEntrySchema()


def _json_body() -> dict:
    return request.get_json(silent=True) or {}


# ------------------------------- Session ---------------------------------


@bp.post("/register")
@timing
def register():
    """Register a new account and return its public representation."""
    data = register_schema.load(_json_body())
    user = get_identity_service().register(UserRegisterIn(**data))
    return json_response({"data": user_schema.dump(user)}, status=201)


@bp.post("/login")
@timing
def login():
    """Authenticate by handle or email; tokens go to HTTP-only cookies and the body."""
    data = login_schema.load(_json_body())
    result = get_auth_service().login(LoginIn(**data))
    body = {"data": {"user": user_schema.dump(result.user), **token_schema.dump(result.tokens)}}
    return set_auth_cookies(json_response(body), result.tokens)


@bp.post("/logout")
@require_auth
@timing
def logout():
    """End the current session and expire both cookies."""
    get_auth_service().logout(current_user_id())
    return clear_auth_cookies(json_response({"data": {}}))


@bp.post("/refresh-token")
@timing
def refresh_token():
    """Rotate the refresh token (cookie first, then ``refreshToken`` in the body)."""
    token = request.cookies.get(REFRESH_COOKIE)
    if not token:
        token = refresh_schema.load(_json_body())["refresh_token"]
    tokens = get_auth_service().refresh(RefreshIn(refresh_token=token))
    return set_auth_cookies(json_response({"data": token_schema.dump(tokens)}), tokens)


@bp.post("/change-password")
@require_auth
@timing
def change_password():
    """Change the password after verifying the current one."""
    data = change_password_schema.load(_json_body())
    get_identity_service().change_password(
        UserPasswordChangeIn(
            user_id=current_user_id(),
            old_password=data["old_password"],
            new_password=data["new_password"],
        )
    )
    return json_response({"data": {}})


# ------------------------------- Profile ---------------------------------


@bp.get("/current-user")
@require_auth
@timing
def get_current_user():
    user = get_identity_service().get_user(current_user_id())
    return json_response({"data": user_schema.dump(user)})


@bp.patch("/update-account")
@require_auth
@timing
def update_account():
    data = update_account_schema.load(_json_body())
    user = get_identity_service().update_account(current_user_id(), AccountUpdateIn(**data))
    return json_response({"data": user_schema.dump(user)})


@bp.patch("/avatar")
@require_auth
@timing
def update_avatar():
    data = avatar_schema.load(_json_body())
    user = get_identity_service().update_avatar(current_user_id(), data["avatar"])
    return json_response({"data": user_schema.dump(user)})


@bp.patch("/cover-image")
@require_auth
@timing
def update_cover_image():
    data = cover_image_schema.load(_json_body())
    user = get_identity_service().update_cover_image(current_user_id(), data["cover_image"])
    return json_response({"data": user_schema.dump(user)})


# ---------------------------- Watch history ------------------------------


@bp.get("/history")
@require_auth
@timing
def get_watch_history():
    history = get_identity_service().get_watch_history(current_user_id())
    return json_response({"data": history})


@bp.post("/history")
@require_auth
@timing
def record_watch():
    """Record a watched video, moving it to the end of the history."""
    data = watch_entry_schema.load(_json_body())
    history = get_identity_service().record_watch(current_user_id(), data["video_id"])
    return json_response({"data": history}, status=201)
