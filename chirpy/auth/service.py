"""
Session authentication: login, access token refresh, refresh token revocation
and bearer authentication of inbound requests.

Every failure surfaces as one of the error kinds in chirpy.core.exceptions.
Authentication failures are deliberately generic; the specific reason is only
ever logged.
"""
from __future__ import annotations

import logging
import uuid
from collections.abc import Mapping
from dataclasses import dataclass

from fastapi.concurrency import run_in_threadpool

from chirpy.auth import security
from chirpy.auth.refresh_tokens import RefreshTokenManager
from chirpy.auth.repositories import UserRepository
from chirpy.auth.schemas import UserResponse
from chirpy.core.exceptions import (
    AuthenticationFailure,
    InvalidTokenError,
    MissingOrInvalidCredential,
    ValidationError,
)

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "
INCORRECT_CREDENTIALS = "Incorrect email or password"
INVALID_REFRESH_TOKEN = "Invalid, expired, or revoked refresh token"
INVALID_ACCESS_TOKEN = "Invalid or missing token"


def get_bearer_token(carrier: Mapping[str, str]) -> str:
    """Pull the token out of an ``Authorization: Bearer <token>`` header.

    ``carrier`` is anything header-like; Starlette's Headers are
    case-insensitive, plain dicts may use either spelling of the key.
    """
    authorization = carrier.get("authorization")
    if authorization is None:
        authorization = carrier.get("Authorization")
    if not isinstance(authorization, str) or not authorization.startswith(BEARER_PREFIX):
        raise MissingOrInvalidCredential()
    token = authorization[len(BEARER_PREFIX):]
    if not token or any(ch.isspace() for ch in token):
        raise MissingOrInvalidCredential()
    return token


@dataclass(frozen=True)
class LoginResult:
    user: UserResponse
    access_token: str
    refresh_token: str


def _require_credentials(email: object, password: object) -> None:
    if not isinstance(email, str) or not isinstance(password, str):
        raise ValidationError('Invalid or missing "email" or "password"')


class SessionAuthenticator:
    def __init__(
        self,
        users: UserRepository,
        refresh_tokens: RefreshTokenManager,
        secret: str,
    ):
        self.users = users
        self.refresh_tokens = refresh_tokens
        self.secret = secret

    async def hash_password(self, password: str) -> str:
        return await run_in_threadpool(security.get_password_hash, password)

    async def verify_password(self, password: str, hashed_password: str) -> bool:
        return await run_in_threadpool(security.verify_password, password, hashed_password)

    def issue_access_token(self, user_id: uuid.UUID) -> str:
        return security.create_access_token(user_id, security.ACCESS_TOKEN_TTL, self.secret)

    async def login(self, email: str, password: str) -> LoginResult:
        _require_credentials(email, password)

        user = await self.users.find_by_email(email)
        if user is None:
            await run_in_threadpool(security.verify_password_against_dummy, password)
            logger.info("Login rejected: unknown email")
            raise AuthenticationFailure(INCORRECT_CREDENTIALS)

        if not await self.verify_password(password, user.hashed_password):
            logger.info("Login rejected: password mismatch for user %s", user.id)
            raise AuthenticationFailure(INCORRECT_CREDENTIALS)

        access_token = self.issue_access_token(user.id)
        refresh_record = await self.refresh_tokens.create(user.id)
        logger.info("User %s logged in", user.id)
        return LoginResult(
            user=UserResponse.model_validate(user),
            access_token=access_token,
            refresh_token=refresh_record.token,
        )

    async def refresh_access_token(self, carrier: Mapping[str, str]) -> str:
        token = get_bearer_token(carrier)
        user_id = await self.refresh_tokens.resolve_user(token)
        if user_id is None:
            raise AuthenticationFailure(INVALID_REFRESH_TOKEN)
        # The refresh token stays valid; it is not rotated here.
        return self.issue_access_token(user_id)

    async def revoke_refresh_token(self, carrier: Mapping[str, str]) -> None:
        token = get_bearer_token(carrier)
        await self.refresh_tokens.revoke(token)

    async def authenticate_request(self, carrier: Mapping[str, str]) -> uuid.UUID:
        token = get_bearer_token(carrier)
        try:
            return security.decode_access_token(token, self.secret)
        except InvalidTokenError as exc:
            raise AuthenticationFailure(INVALID_ACCESS_TOKEN) from exc

    async def register(self, email: str, password: str) -> UserResponse:
        _require_credentials(email, password)
        if await self.users.find_by_email(email):
            raise ValidationError("The user with this email already exists in the system.")
        user = await self.users.create(email, await self.hash_password(password))
        logger.info("Registered user %s", user.id)
        return UserResponse.model_validate(user)

    async def update_credentials(self, user_id: uuid.UUID, email: str, password: str) -> UserResponse:
        _require_credentials(email, password)
        existing = await self.users.find_by_email(email)
        if existing is not None and existing.id != user_id:
            raise ValidationError("The user with this email already exists in the system.")
        user = await self.users.update_credentials(user_id, email, await self.hash_password(password))
        if user is None:
            raise AuthenticationFailure()
        logger.info("Updated credentials for user %s", user.id)
        return UserResponse.model_validate(user)
