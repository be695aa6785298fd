# Copyright (C) 2024 FP Innova Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Pytest fixtures. Each test gets a fresh in-memory SQLite database."""

import os

# Settings are read at import time; keep the app off PostgreSQL and the cleanup loop off.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("CODE_CLEANUP_INTERVAL_MINUTES", "0")

from datetime import datetime, timedelta, timezone

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from fpinnova_server import rate_limit
from fpinnova_server.auth import create_access_token, hash_password
from fpinnova_server.database import get_db
from fpinnova_server.main import app
from fpinnova_server.models import Base, User, UserRole
from fpinnova_server.services.verification_codes import VerificationCodeRegistry, get_code_registry


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: datetime):
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> None:
        self.current += timedelta(**kwargs)


@pytest.fixture
async def engine():
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest.fixture
async def db(session_maker):
    async with session_maker() as session:
        yield session


@pytest.fixture
def clock():
    return FakeClock(datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc))


@pytest.fixture
def registry(session_maker, clock):
    return VerificationCodeRegistry(session_maker, now=clock)


async def _add_user(session_maker, email: str, role: UserRole, password: str = "secret123") -> User:
    async with session_maker() as session:
        user = User(
            name=email.split("@")[0],
            email=email,
            password_hash=hash_password(password),
            role=role.value,
        )
        session.add(user)
        await session.commit()
        return user


@pytest.fixture
async def admin_user(session_maker) -> User:
    return await _add_user(session_maker, "admin@fpinnova.es", UserRole.ADMIN)


@pytest.fixture
async def reviewer_user(session_maker) -> User:
    return await _add_user(session_maker, "ana@example.com", UserRole.REVIEWER)


@pytest.fixture
def admin_headers(admin_user) -> dict:
    return {"Authorization": f"Bearer {create_access_token({'sub': admin_user.id})}"}


@pytest.fixture
def reviewer_headers(reviewer_user) -> dict:
    return {"Authorization": f"Bearer {create_access_token({'sub': reviewer_user.id})}"}


@pytest.fixture(autouse=True)
def _reset_rate_limits():
    rate_limit.reset()
    yield
    rate_limit.reset()


@pytest.fixture
async def client(session_maker, registry):
    async def _get_db():
        async with session_maker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_code_registry] = lambda: registry
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
