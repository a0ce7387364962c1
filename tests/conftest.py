import os

# must be set before appointly.core.config is imported
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("ENV", "test")

from datetime import UTC, datetime, timedelta  # noqa: E402

import pytest  # noqa: E402

from appointly.core.db import create_engine_for, create_session_maker, init_db  # noqa: E402
from appointly.models.user import User  # noqa: E402

# Wednesday; the Monday after (2026-06-15) is inside the 14-day horizon
NOW = datetime(2026, 6, 10, 12, 0, tzinfo=UTC)


class FixedClock:
    """Clock frozen at one instant; ``advance`` moves it forward."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now = self.now + delta


@pytest.fixture
async def engine(tmp_path):
    # File-backed so that separate sessions really are separate connections
    engine = create_engine_for(f"sqlite+aiosqlite:///{tmp_path / 'appointly-test.db'}")
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(engine):
    return create_session_maker(engine)


@pytest.fixture
async def session(session_maker):
    async with session_maker() as session:
        yield session


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(NOW)


async def _make_user(session, email: str) -> User:
    user = User(email=email, name=email.split("@")[0], hashed_password="not-a-real-hash")
    session.add(user)
    await session.commit()
    return user


@pytest.fixture
async def owner(session) -> User:
    return await _make_user(session, "owner@example.com")


@pytest.fixture
async def other_owner(session) -> User:
    return await _make_user(session, "other@example.com")
