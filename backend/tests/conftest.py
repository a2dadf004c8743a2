"""Shared fixtures. Every test gets fresh stores, caches and services."""
from datetime import datetime, timedelta

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from adventure_api.domain.adventure.models import User
from adventure_api.domain.adventure.services import AdventureService
from adventure_api.infra.cache.memory import MemoryCache
from adventure_api.infra.db.base import Base
from adventure_api.infra.db.models import AdventureModel, FriendModel, UserModel  # noqa: F401
from adventure_api.infra.db.repositories.adventure_repo import SqlAdventureStore
from adventure_api.infra.db.repositories.user_repo import UserRepositoryImpl
from adventure_api.infra.memory.adventure_store import InMemoryAdventureStore
from adventure_api.infra.memory.users import InMemoryFriendRepository, InMemoryUserDirectory
from adventure_api.infra.storage.s3_signer import S3Signer

SHARE_BASE_URL = "https://app.example"


def pytest_configure(config):
    config.addinivalue_line(
        "markers", "integration: marks tests that need a real DB (deselect with '-m \"not integration\"')"
    )


class FakeClock:
    """Monotonic clock for cache TTLs, advanced by hand."""

    def __init__(self, start: float = 1000.0):
        self.value = start

    def __call__(self) -> float:
        return self.value

    def advance(self, seconds: float) -> None:
        self.value += seconds


class TickingNow:
    """Timestamp source that moves forward one second per call."""

    def __init__(self, start: datetime = datetime(2026, 1, 1, 12, 0, 0)):
        self.current = start

    def __call__(self) -> datetime:
        self.current += timedelta(seconds=1)
        return self.current


@pytest.fixture
def alice() -> User:
    return User(id="alice", username="alice", avatar_url="https://cdn.example/alice.png")


@pytest.fixture
def bob() -> User:
    return User(id="bob", username="bob")


@pytest.fixture
def carol() -> User:
    return User(id="carol", username="carol")


@pytest.fixture
def users(alice, bob, carol) -> InMemoryUserDirectory:
    return InMemoryUserDirectory([alice, bob, carol])


@pytest.fixture
def friends(alice, bob, carol) -> InMemoryFriendRepository:
    repo = InMemoryFriendRepository()
    repo.add(alice.id, bob)
    repo.add(alice.id, carol)
    return repo


@pytest.fixture
def now() -> TickingNow:
    return TickingNow()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
async def db_session(alice, bob, carol):
    """Fresh in-memory SQLite database with all tables and the three users."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        users = UserRepositoryImpl(session)
        for user in (alice, bob, carol):
            await users.create(user)
        yield session

    await engine.dispose()


@pytest.fixture(params=["memory", "sql"])
def store(request, now):
    """Adventure store; every test using it runs against both backends."""
    if request.param == "memory":
        return InMemoryAdventureStore(now=now)
    return SqlAdventureStore(request.getfixturevalue("db_session"), now=now)


@pytest.fixture
def cache(clock) -> MemoryCache:
    return MemoryCache(clock=clock)


@pytest.fixture
def signer() -> S3Signer:
    return S3Signer()


@pytest.fixture
def service(store, users, cache, signer, friends, now) -> AdventureService:
    return AdventureService(
        store=store,
        users=users,
        cache=cache,
        signer=signer,
        friends=friends,
        share_base_url=SHARE_BASE_URL,
        now=now,
    )
