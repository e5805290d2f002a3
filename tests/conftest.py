import fnmatch

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlmodel import SQLModel

import clinic_scheduler.db.models  # noqa: F401
from clinic_scheduler.api.deps import get_auth_context
from clinic_scheduler.core.redis import PermissionCache
from clinic_scheduler.core.security import AuthorizationContext
from clinic_scheduler.db.session import get_session, get_session_factory
from clinic_scheduler.main import app

BRANCH = "branch-kochi"
DOCTOR = "doctor-anand"
MONDAY = "2026-10-19"  # template day_of_week 1
TUESDAY = "2026-10-20"  # template day_of_week 2


class FakeRedis:
    """Just enough of redis.asyncio.Redis for PermissionCache."""

    def __init__(self):
        self.data = {}
        self.gets = 0

    async def get(self, key):
        self.gets += 1
        return self.data.get(key)

    async def set(self, key, value, ex=None):
        self.data[key] = value
        return True

    async def delete(self, *keys):
        removed = 0
        for key in keys:
            if self.data.pop(key, None) is not None:
                removed += 1
        return removed

    async def scan_iter(self, match="*"):
        for key in list(self.data):
            if fnmatch.fnmatch(key, match):
                yield key

    async def close(self):
        pass


@pytest_asyncio.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path}/scheduler.db")
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def context():
    return AuthorizationContext(
        actor_id="user-reception-1",
        branch_id=BRANCH,
        roles=("RECEPTIONIST",),
        permissions=frozenset({"appointment:read", "appointment:write"}),
    )


@pytest_asyncio.fixture
async def client(session_factory, context):
    async def override_get_session():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    app.dependency_overrides[get_auth_context] = lambda: context
    app.state.permission_cache = PermissionCache(FakeRedis())

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
