"""Shared fixtures: a throwaway SQLite database and an in-process API client."""

import os
import tempfile

# Settings are read at import time, so the environment must be ready first.
_DB_DIR = tempfile.mkdtemp(prefix="story-moderation-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_DB_DIR}/test.db"
os.environ["ENVIRONMENT"] = "test"
os.environ["RATE_LIMIT_BACKEND"] = "memory"
os.environ["MODERATION_EXTERNAL_ENABLED"] = "false"
os.environ["DATABASE_AUTO_CREATE"] = "false"
os.environ.pop("GOOGLE_API_KEY", None)

import httpx  # noqa: E402
import pytest  # noqa: E402

import src.modules.moderation.models  # noqa: E402,F401
import src.modules.reports.models  # noqa: E402,F401
from src.core.database import AsyncSessionLocal, Base, engine  # noqa: E402


@pytest.fixture
async def db_tables():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    yield
    await engine.dispose()


@pytest.fixture
async def session(db_tables):
    async with AsyncSessionLocal() as db:
        yield db


@pytest.fixture
async def app(db_tables):
    from api import app as fastapi_app
    from api import lifespan

    async with lifespan(fastapi_app):
        yield fastapi_app
    fastapi_app.dependency_overrides.clear()


@pytest.fixture
async def client(app):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as http_client:
        yield http_client
