from __future__ import annotations

import asyncio
import os

# Settings are read at import time
os.environ["DB_URL"] = "sqlite+aiosqlite:///./test-recruit.db"
os.environ.pop("REDIS_URL", None)
os.environ["LOG_FORMAT"] = "text"
os.environ["RATE_LIMIT_ENABLED"] = "true"
os.environ["FIELD_ENCRYPTION_KEY"] = "test-field-encryption-passphrase"

import pytest
from fastapi.testclient import TestClient
from redis.exceptions import ConnectionError as RedisConnectionError
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from recruit import models
from recruit.api import app
from recruit.cache import get_redis
from recruit.db import get_session

RECRUITER = {"X-User-Id": "urecruiter0000000000000001", "X-User-Role": "RECRUITER"}
ADMIN = {"X-User-Id": "uadmin000000000000000000001", "X-User-Role": "ADMIN"}
PLAIN_USER = {"X-User-Id": "uplain000000000000000000001", "X-User-Role": "USER"}


class FakeRedis:
    """In-memory stand-in for the handful of Redis commands the service uses."""

    def __init__(self):
        self.store: dict[str, object] = {}
        self.ttls: dict[str, int] = {}

    async def incr(self, key):
        self.store[key] = int(self.store.get(key, 0)) + 1
        return self.store[key]

    async def expire(self, key, seconds):
        self.ttls[key] = int(seconds)
        return True

    async def ttl(self, key):
        if key not in self.store:
            return -2
        return self.ttls.get(key, -1)

    async def get(self, key):
        return self.store.get(key)

    async def set(self, key, value, ex=None):
        self.store[key] = value
        if ex:
            self.ttls[key] = int(ex)
        return True

    async def ping(self):
        return True


class BrokenRedis:
    """Every command fails as if the server were unreachable."""

    async def _fail(self, *args, **kwargs):
        raise RedisConnectionError("Connection refused")

    incr = expire = ttl = get = set = ping = _fail


class FailingSession:
    """Session whose queries fail like a dropped database connection."""

    async def execute(self, *args, **kwargs):
        raise OperationalError("SELECT 1", {}, Exception("database is locked"))

    async def commit(self):
        pass

    async def rollback(self):
        pass

    def add(self, instance):
        pass


@pytest.fixture
def session_factory(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'recruit.db'}", poolclass=NullPool)

    async def create_all():
        async with engine.begin() as conn:
            await conn.run_sync(models.Base.metadata.create_all)

    asyncio.run(create_all())
    yield async_sessionmaker(bind=engine, expire_on_commit=False, class_=AsyncSession)
    asyncio.run(engine.dispose())


@pytest.fixture
def seed(session_factory):
    """Persist model instances: ``seed(candidate, user, ...)``."""

    def _seed(*rows):
        async def add_all():
            async with session_factory() as session:
                session.add_all(rows)
                await session.commit()

        asyncio.run(add_all())
        return rows

    return _seed


@pytest.fixture
def run_with_session(session_factory):
    """Run ``fn(session)`` to completion and return its result."""

    def _run(fn):
        async def runner():
            async with session_factory() as session:
                return await fn(session)

        return asyncio.run(runner())

    return _run


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def client(session_factory, fake_redis):
    async def override_session():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_session] = override_session
    app.dependency_overrides[get_redis] = lambda: fake_redis
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def make_candidate(**overrides) -> models.Candidate:
    fields = {
        "id": models.new_cuid(),
        "name": "Jane Doe",
        "email": "jane@example.com",
        "phone": "+1-555-0100",
        "address": "1 Main St",
        "title": "Senior React Developer",
        "skills": ["React", "TypeScript", "Node.js"],
        "work_experience": [
            {
                "title": "Senior React Developer",
                "company": "Acme",
                "startDate": "2019-01",
                "endDate": "2023-01",
                "description": "Built dashboards with React and GraphQL",
            }
        ],
        "education": [{"degree": "B.S. Computer Science", "level": None, "institution": "MIT"}],
        "resume_text": "Frontend engineer who enjoys mentoring.",
    }
    fields.update(overrides)
    return models.Candidate(**fields)
