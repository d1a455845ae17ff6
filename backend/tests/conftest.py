"""
Inkwell Backend — Test Configuration (conftest.py)
===================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Every test gets a fresh in-memory SQLite database (aiosqlite) with
       the full schema created from the ORM metadata. The FastAPI app's
       session dependency is overridden to use the same database, so API
       tests and direct service tests see the same rows.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── engine:          in-memory SQLite engine with all tables
    ├── session_factory: async_sessionmaker bound to `engine`
    ├── db:              one AsyncSession for arranging data and asserting
    ├── reader / author / admin: committed UserProfile rows
    ├── make_article:    factory for Article rows
    ├── make_token:      signs an access token for a profile
    └── client:          HTTPX AsyncClient talking to the app
"""

import os

# Override settings BEFORE any inkwell import reads them
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["JWT_SECRET"] = "test-secret-not-real"
os.environ["JWT_AUDIENCE"] = "authenticated"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["RATE_LIMIT_REQUESTS"] = "10000"
os.environ["SITE_URL"] = "https://example.test"
os.environ["SITE_NAME"] = "Inkwell Test"
os.environ["DEFAULT_LOCALE"] = "th"

import uuid
from datetime import datetime, timedelta, timezone
from typing import AsyncGenerator

import jwt
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import inkwell.models  # noqa: F401
from inkwell.config import settings
from inkwell.database import Base, get_db_session
from inkwell.models.article import Article, ArticleStatus
from inkwell.models.user_profile import UserProfile, UserRole


# ══════════════════════════════════════════════════════════════════════════
# Database
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def engine():
    """
    One in-memory database per test. StaticPool keeps a single connection,
    so every session in the test sees the same database.
    """
    test_engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield test_engine
    await test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


# ══════════════════════════════════════════════════════════════════════════
# Users & Tokens
# ══════════════════════════════════════════════════════════════════════════

async def _create_profile(db: AsyncSession, role: str, name: str, **overrides) -> UserProfile:
    profile = UserProfile(
        user_id=uuid.uuid4(),
        email=f"{name}@example.test",
        username=name,
        full_name=name.title(),
        role=role,
        **overrides,
    )
    db.add(profile)
    await db.commit()
    return profile


@pytest_asyncio.fixture
async def reader(db) -> UserProfile:
    return await _create_profile(db, UserRole.READER.value, "reader")


@pytest_asyncio.fixture
async def author(db) -> UserProfile:
    return await _create_profile(db, UserRole.AUTHOR.value, "author")


@pytest_asyncio.fixture
async def admin(db) -> UserProfile:
    return await _create_profile(db, UserRole.ADMIN.value, "admin")


@pytest.fixture
def make_token():
    """
    Signs an access token the way the hosted auth provider does.

    Usage:
        headers = {"Authorization": f"Bearer {make_token(admin)}"}
    """

    def _make(profile=None, subject=None, expires_in=3600, secret=None, **claims):
        now = datetime.now(timezone.utc)
        payload = {
            "sub": subject or str(profile.user_id),
            "aud": settings.jwt_audience,
            "iat": now,
            "exp": now + timedelta(seconds=expires_in),
            **claims,
        }
        return jwt.encode(payload, secret or settings.jwt_secret, algorithm="HS256")

    return _make


@pytest.fixture
def auth_headers(make_token):
    def _headers(profile) -> dict:
        return {"Authorization": f"Bearer {make_token(profile)}"}

    return _headers


# ══════════════════════════════════════════════════════════════════════════
# Articles
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def make_article(db):
    """
    Factory for committed Article rows.

    Usage:
        article = await make_article(author, status="pending_approval")
    """

    async def _make(owner: UserProfile, **fields) -> Article:
        status = fields.pop("status", ArticleStatus.DRAFT.value)
        slug = fields.pop("slug", f"article-{uuid.uuid4().hex[:8]}")
        values = {
            "title": "Mindful Breathing",
            "content": "Breathe in. Breathe out. " * 50,
            "language": "th",
            **fields,
        }
        if status == ArticleStatus.PUBLISHED.value:
            values.setdefault("published_at", datetime.now(timezone.utc))
        article = Article(
            id=uuid.uuid4(),
            author_id=owner.user_id,
            slug=slug,
            status=status,
            **values,
        )
        db.add(article)
        await db.commit()
        return article

    return _make


# ══════════════════════════════════════════════════════════════════════════
# HTTP Client
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def client(engine, session_factory, monkeypatch) -> AsyncGenerator[AsyncClient, None]:
    """
    HTTPX AsyncClient routed straight into the ASGI app.

    Each request gets its own session on the test database, committed on
    success and rolled back on error, as in production. The health check
    probes the same database.
    """
    from inkwell.main import app

    monkeypatch.setattr("inkwell.routes.health.engine", engine)

    async def override_get_db_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_session] = override_get_db_session
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as http_client:
        yield http_client
    app.dependency_overrides.clear()
