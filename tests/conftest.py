"""Test fixtures — a fresh SQLite database per test.

Learn: Testing pattern for async SQLAlchemy + FastAPI + aiosqlite:

1. Each test gets its own database file under tmp_path, with the schema
   created straight from the models. Nothing leaks between tests.
2. Every HTTP request gets its own session from that database, just as
   it would in production, so services really commit and later requests
   really read back what was stored.
3. Tests that need two concurrent writers open two sessions on the same
   file; the UNIQUE and FOREIGN KEY constraints behave as they would on
   PostgreSQL.

Settings are read at import time, so the environment is set up before
anything from coursehub is imported.
"""

import os

os.environ.setdefault("COURSEHUB_ENVIRONMENT", "test")
os.environ.setdefault("COURSEHUB_DATABASE_URL", "sqlite+aiosqlite:///./coursehub-test.db")
os.environ.setdefault("COURSEHUB_JWT_SECRET", "test-secret-that-is-long-enough-for-hs256-keys")
os.environ.setdefault("COURSEHUB_BCRYPT_ROUNDS", "4")

import uuid  # noqa: E402

import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker  # noqa: E402

from coursehub.db.engine import build_engine, get_db  # noqa: E402
from coursehub.db.models import Base  # noqa: E402
from coursehub.main import app  # noqa: E402

PASSWORD = "correct-horse-battery"


@pytest_asyncio.fixture()
async def engine(tmp_path):
    """Per-test engine over a throwaway SQLite file with the full schema."""
    eng = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'coursehub.db'}")
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    try:
        yield eng
    finally:
        await eng.dispose()


@pytest_asyncio.fixture()
async def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture()
async def db_session(session_factory):
    """A session for driving services directly."""
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture()
async def client(session_factory):
    """HTTP client with get_db pointed at the per-test database.

    Learn: No auth override here — every protected route goes through
    the real session-token pipeline, so tests register and log in like
    a real client would (see the helpers below).
    """

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# ─── Helpers ────────────────────────────────────────────


def unique_email(prefix: str = "user") -> str:
    return f"{prefix}-{uuid.uuid4().hex[:8]}@example.com"


def auth_headers(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


async def register(client, role: str, name: str = None, email: str = None) -> dict:
    """Register an account over HTTP and return the session response."""
    r = await client.post(
        "/api/v1/auth/register",
        json={
            "name": name or f"{role.title()} {uuid.uuid4().hex[:4]}",
            "email": email or unique_email(role),
            "password": PASSWORD,
            "role": role,
        },
    )
    assert r.status_code == 201, r.text
    return r.json()


async def create_course(client, token: str, **fields) -> dict:
    body = {"title": "Intro to Pottery", "price": 49.0, "lesson_count": 12}
    body.update(fields)
    r = await client.post("/api/v1/courses", json=body, headers=auth_headers(token))
    assert r.status_code == 201, r.text
    return r.json()
