"""
Persistence seams used by the authentication core.

The core only talks to the two protocols below; the SQLAlchemy classes are the
production implementations and expect one AsyncSession per request.
"""
from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Protocol

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from chirpy.models.auth import RefreshToken
from chirpy.models.chirp import Chirp
from chirpy.models.user import User


class UserRepository(Protocol):
    async def find_by_email(self, email: str) -> User | None: ...

    async def get(self, user_id: uuid.UUID) -> User | None: ...

    async def create(self, email: str, hashed_password: str) -> User: ...

    async def update_credentials(self, user_id: uuid.UUID, email: str, hashed_password: str) -> User | None: ...

    async def delete_all(self) -> None: ...


class RefreshTokenRepository(Protocol):
    async def insert(
        self, token: str, user_id: uuid.UUID, created_at: datetime, expires_at: datetime
    ) -> RefreshToken: ...

    async def find_live_by_token(self, token: str, now: datetime) -> uuid.UUID | None: ...

    async def mark_revoked(self, token: str, now: datetime) -> None: ...


class SqlUserRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_by_email(self, email: str) -> User | None:
        result = await self.db.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def get(self, user_id: uuid.UUID) -> User | None:
        result = await self.db.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    async def create(self, email: str, hashed_password: str) -> User:
        user = User(email=email, hashed_password=hashed_password)
        self.db.add(user)
        await self.db.commit()
        await self.db.refresh(user)
        return user

    async def update_credentials(self, user_id: uuid.UUID, email: str, hashed_password: str) -> User | None:
        user = await self.get(user_id)
        if user is None:
            return None
        user.email = email
        user.hashed_password = hashed_password
        user.updated_at = datetime.now(timezone.utc)
        await self.db.commit()
        await self.db.refresh(user)
        return user

    async def delete_all(self) -> None:
        # Dependents first so the wipe does not rely on ON DELETE CASCADE support.
        await self.db.execute(delete(RefreshToken))
        await self.db.execute(delete(Chirp))
        await self.db.execute(delete(User))
        await self.db.commit()


class SqlRefreshTokenRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def insert(
        self, token: str, user_id: uuid.UUID, created_at: datetime, expires_at: datetime
    ) -> RefreshToken:
        record = RefreshToken(
            token=token,
            user_id=user_id,
            expires_at=expires_at,
            created_at=created_at,
            updated_at=created_at,
        )
        self.db.add(record)
        await self.db.commit()
        return record

    async def find_live_by_token(self, token: str, now: datetime) -> uuid.UUID | None:
        stmt = select(RefreshToken.user_id).where(
            RefreshToken.token == token,
            RefreshToken.revoked_at.is_(None),
            RefreshToken.expires_at > now,
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def mark_revoked(self, token: str, now: datetime) -> None:
        stmt = (
            update(RefreshToken)
            .where(RefreshToken.token == token, RefreshToken.revoked_at.is_(None))
            .values(revoked_at=now, updated_at=now)
        )
        await self.db.execute(stmt)
        await self.db.commit()
