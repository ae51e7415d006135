from __future__ import annotations

import logging
import secrets
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from chirpy.auth.repositories import RefreshTokenRepository

logger = logging.getLogger(__name__)

REFRESH_TOKEN_TTL = timedelta(days=60)
REFRESH_TOKEN_BYTES = 32


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def generate_refresh_token() -> str:
    """32 random bytes from the OS CSPRNG, hex encoded (64 characters)."""
    return secrets.token_hex(REFRESH_TOKEN_BYTES)


@dataclass(frozen=True)
class RefreshTokenRecord:
    token: str
    user_id: uuid.UUID
    created_at: datetime
    expires_at: datetime
    revoked_at: datetime | None = None


class RefreshTokenManager:
    """Issues, resolves and revokes opaque refresh tokens.

    Expired, revoked and never-issued tokens all resolve to None; callers
    cannot tell them apart.
    """

    def __init__(
        self,
        repository: RefreshTokenRepository,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.repository = repository
        self.clock = clock

    async def create(self, user_id: uuid.UUID) -> RefreshTokenRecord:
        now = self.clock()
        record = RefreshTokenRecord(
            token=generate_refresh_token(),
            user_id=user_id,
            created_at=now,
            expires_at=now + REFRESH_TOKEN_TTL,
        )
        await self.repository.insert(record.token, record.user_id, record.created_at, record.expires_at)
        logger.info("Issued refresh token for user %s (expires %s)", user_id, record.expires_at.isoformat())
        return record

    async def resolve_user(self, token: str) -> uuid.UUID | None:
        user_id = await self.repository.find_live_by_token(token, self.clock())
        if user_id is None:
            logger.debug("Refresh token did not resolve to a live record")
        return user_id

    async def revoke(self, token: str) -> None:
        await self.repository.mark_revoked(token, self.clock())
