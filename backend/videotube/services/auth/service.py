from __future__ import annotations

import logging

from videotube.models.user import User
from videotube.repositories.user import UserRepository
from videotube.services._shared.base import BaseService, ServiceContext
from videotube.services._shared.errors import (
    InvalidCredentialsError,
    InvalidTokenError,
    NotFoundError,
    TokenFailure,
    TokenReuseError,
    UnauthorizedError,
    ValidationFailedError,
)
from videotube.services._shared.ports.token_provider import (
    IdentityClaims,
    TokenClass,
    TokenProvider,
)
from videotube.services.auth.dto import LoginIn, LoginOut, RefreshIn, TokenPairOut
from videotube.services.identity.dto import UserPublicOut

log = logging.getLogger(__name__)


class AuthService(BaseService):
    """
    Session lifecycle service (login / refresh / logout / access guard).

    Tokens are issued and verified through a pluggable :class:`TokenProvider`.
    The single valid refresh token of each user lives on the user row; rotation
    replaces it with one conditional UPDATE so that, of two clients racing with
    the same token, exactly one wins.

    Session states per user::

        Anonymous --login--> Authenticated(access, refresh)
        Authenticated --refresh--> Authenticated(rotated pair)
        Authenticated --logout--> Anonymous
    """

    def __init__(
        self,
        *,
        token_provider: TokenProvider,
        ctx: ServiceContext | None = None,
    ) -> None:
        """
        Initialize the service with its dependencies.

        :param token_provider: Adapter for issuing/verifying JWTs.
        :param ctx: Optional request-scoped context.
        """
        super().__init__(ctx=ctx)
        self.tokens = token_provider

    # ------------------------------------------------------------------ #
    # Login
    # ------------------------------------------------------------------ #

    def login(self, dto: LoginIn) -> LoginOut:
        """
        Authenticate credentials and issue a fresh token pair.

        The new refresh token overwrites any previous one, which ends the
        previous session's ability to refresh.

        :param dto: Login input.
        :returns: Sanitized user plus the access/refresh pair.
        :raises ValidationFailedError: If no identifier or no password is given.
        :raises NotFoundError: If no user matches the handle or email.
        :raises InvalidCredentialsError: If the password does not verify.
        """
        if not dto.password or not ((dto.username or "").strip() or (dto.email or "").strip()):
            raise ValidationFailedError("username or email and password are required")

        with self.rw_uow() as uow:
            repo: UserRepository = uow.users
            user = repo.find_by_handle_or_email(username=dto.username, email=dto.email)
            if user is None:
                raise NotFoundError("User", dto.username or dto.email or "")

            if not repo.verify_password(user, dto.password):
                log.warning("login refused: invalid credentials", extra={"user_id": user.id})
                raise InvalidCredentialsError()

            tokens = self._issue_pair(user)
            repo.set_refresh_token(user.id, tokens.refresh_token)
            out = LoginOut(user=UserPublicOut.from_user(user), tokens=tokens)

        log.info("user logged in", extra={"user_id": out.user.id})
        return out

    # ------------------------------------------------------------------ #
    # Refresh with atomic rotation
    # ------------------------------------------------------------------ #

    def refresh(self, dto: RefreshIn) -> TokenPairOut:
        """
        Rotate a refresh token and emit a new token pair.

        :param dto: Refresh input carrying the presented token.
        :returns: New access/refresh pair; the refresh value always differs
            from the presented one.
        :raises UnauthorizedError: If no token is presented, or the user has
            no active session (logged out).
        :raises InvalidTokenError: If verification fails or the subject no
            longer exists.
        :raises TokenReuseError: If the token is validly signed but is not the
            one currently stored (already rotated or superseded).
        """
        presented = dto.refresh_token
        if not presented or not presented.strip():
            raise UnauthorizedError()

        verified = self.tokens.verify(presented, TokenClass.REFRESH)

        with self.rw_uow() as uow:
            repo: UserRepository = uow.users
            user = repo.get(verified.subject)
            if user is None:
                raise InvalidTokenError(TokenFailure.MALFORMED, "invalid refresh token")

            tokens = self._issue_pair(user)
            if not repo.swap_refresh_token(
                user.id, expected=presented, new=tokens.refresh_token
            ):
                if repo.get_refresh_token(user.id) is None:
                    log.warning("refresh refused: no active session", extra={"user_id": user.id})
                    raise UnauthorizedError("no active session")
                log.warning("refresh refused: stale refresh token", extra={"user_id": user.id})
                raise TokenReuseError()

        log.info("refresh token rotated", extra={"user_id": verified.subject})
        return tokens

    # ------------------------------------------------------------------ #
    # Logout
    # ------------------------------------------------------------------ #

    def logout(self, user_id: int) -> None:
        """
        Clear the stored refresh token. Logging out twice is not an error.

        :param user_id: Authenticated user id.
        :raises NotFoundError: If the user no longer exists.
        """
        with self.rw_uow() as uow:
            if not uow.users.set_refresh_token(user_id, None):
                raise NotFoundError("User", user_id)

        log.info("user logged out", extra={"user_id": user_id})

    # ------------------------------------------------------------------ #
    # Access guard
    # ------------------------------------------------------------------ #

    def authenticate_access(self, token: str | None) -> int:
        """
        Resolve the user id behind an access token.

        :param token: Encoded access JWT, ``None`` when absent.
        :returns: Id of an existing user.
        :raises UnauthorizedError: If no token is presented.
        :raises InvalidTokenError: If verification fails or the user is gone.
        """
        if not token or not token.strip():
            raise UnauthorizedError()

        verified = self.tokens.verify(token.strip(), TokenClass.ACCESS)

        with self.ro_uow() as uow:
            if uow.users.get(verified.subject) is None:
                raise InvalidTokenError(TokenFailure.MALFORMED, "invalid access token")
        return verified.subject

    # ------------------------------------------------------------------ #
    # Utilities
    # ------------------------------------------------------------------ #

    def _issue_pair(self, user: User) -> TokenPairOut:
        access = self.tokens.issue_access(
            IdentityClaims(
                user_id=user.id,
                email=user.email,
                username=user.username,
                full_name=user.full_name,
            )
        )
        refresh = self.tokens.issue_refresh(user.id)
        return TokenPairOut(
            access_token=access.token,
            refresh_token=refresh.token,
            access_expires_at=access.expires_at,
            refresh_expires_at=refresh.expires_at,
        )
