import os

os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["CRON_SECRET"] = "test-cron-secret"
os.environ["APP_URL"] = "https://garden.test"
os.environ["TIMEZONE"] = "America/Chicago"

from dataclasses import dataclass
from typing import Optional

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

import app.models  # noqa: F401  (registers every table on Base.metadata)
from app.core.deps import get_mail_transport
from app.db.base import Base
from app.db.session import get_session_factory
from app.main import app
from app.models.user import User, UserSettings


# A fresh SQLite file per test keeps the batch runner's own sessions and the
# test session looking at the same data without cross-test leakage.
@pytest_asyncio.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", poolclass=NullPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@dataclass
class SentMessage:
    to: str
    subject: str
    body: str


class Outbox:
    """In-memory mail transport. Set ``fail_with`` to make sends raise."""

    def __init__(self):
        self.messages: list[SentMessage] = []
        self.fail_with: Optional[Exception] = None

    async def send(self, to: str, subject: str, body: str) -> None:
        if self.fail_with is not None:
            raise self.fail_with
        self.messages.append(SentMessage(to, subject, body))


@pytest.fixture
def outbox():
    return Outbox()


@pytest.fixture
def create_user(db: AsyncSession):
    async def _create(
        email: Optional[str] = "gardener@example.com",
        *,
        first_name: Optional[str] = "Sam",
        profile: Optional[dict] = None,
        with_settings: bool = True,
        seeds=(),
        wishlist=(),
    ) -> User:
        user = User(email=email, first_name=first_name, is_active=True)
        if with_settings:
            user.settings = UserSettings(**(profile or {}))
        user.seeds = list(seeds)
        user.wishlist_items = list(wishlist)
        db.add(user)
        await db.commit()
        return user

    return _create


@pytest_asyncio.fixture
async def client(session_factory, outbox: Outbox):
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    app.dependency_overrides[get_mail_transport] = lambda: outbox.send

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c

    app.dependency_overrides.clear()
