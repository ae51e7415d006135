import os

# Settings are read at import time, so the environment must be ready first.
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-chirpy-suite")
os.environ.setdefault("DB_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("PLATFORM", "prod")

import pytest
from typing import AsyncGenerator, Awaitable, Callable
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

import chirpy.models  # noqa: F401
from chirpy.auth.refresh_tokens import RefreshTokenManager
from chirpy.auth.repositories import SqlRefreshTokenRepository, SqlUserRepository
from chirpy.auth.security import get_password_hash
from chirpy.auth.service import SessionAuthenticator
from chirpy.config import settings
from chirpy.database import Base, get_db
from chirpy.main import app
from chirpy.models.user import User

DEFAULT_PASSWORD = "password123"


@pytest.fixture(scope="function")
async def db_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()

@pytest.fixture(scope="function")
async def db_session(db_engine) -> AsyncGenerator[AsyncSession, None]:
    async_session = async_sessionmaker(
        bind=db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False
    )
    async with async_session() as session:
        yield session

@pytest.fixture(scope="function")
async def client(db_session) -> AsyncGenerator[AsyncClient, None]:
    app.state.metrics.reset()

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()
    app.state.metrics.reset()

@pytest.fixture
def authenticator(db_session) -> SessionAuthenticator:
    return SessionAuthenticator(
        users=SqlUserRepository(db_session),
        refresh_tokens=RefreshTokenManager(SqlRefreshTokenRepository(db_session)),
        secret=settings.SECRET_KEY,
    )

@pytest.fixture
def create_user(db_session) -> Callable[..., Awaitable[User]]:
    async def _create(email: str = "user@example.com", password: str = DEFAULT_PASSWORD) -> User:
        user = User(email=email, hashed_password=get_password_hash(password))
        db_session.add(user)
        await db_session.commit()
        await db_session.refresh(user)
        return user

    return _create

@pytest.fixture
def login(client):
    async def _login(email: str, password: str = DEFAULT_PASSWORD) -> dict:
        response = await client.post(
            f"{settings.API_PREFIX}/login",
            json={"email": email, "password": password},
        )
        assert response.status_code == 200
        return response.json()["data"]

    return _login
