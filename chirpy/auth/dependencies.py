import uuid
from typing import Annotated
from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from chirpy.config import settings
from chirpy.database import get_db
from chirpy.auth.refresh_tokens import RefreshTokenManager
from chirpy.auth.repositories import SqlRefreshTokenRepository, SqlUserRepository
from chirpy.auth.service import SessionAuthenticator


async def get_authenticator(
    db: Annotated[AsyncSession, Depends(get_db)]
) -> SessionAuthenticator:
    return SessionAuthenticator(
        users=SqlUserRepository(db),
        refresh_tokens=RefreshTokenManager(SqlRefreshTokenRepository(db)),
        secret=settings.SECRET_KEY,
    )

async def get_current_user_id(
    request: Request,
    authenticator: Annotated[SessionAuthenticator, Depends(get_authenticator)],
) -> uuid.UUID:
    return await authenticator.authenticate_request(request.headers)
