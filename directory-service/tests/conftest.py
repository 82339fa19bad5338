"""Shared pytest fixtures for the user directory tests."""

from pathlib import Path

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from sqlalchemy import create_engine as create_sync_engine
from sqlalchemy.orm import Session

from app.config import Settings
from app.database import create_engine, create_session_maker
from app.models import Base, User
from main import create_app

STATES = ["CA", "NY", "TX", "ZZ"]


def make_users(count: int = 10) -> list[User]:
    return [
        User(
            id=f"u{i:02d}",
            name=f"User {i}",
            username=f"user{i}",
            email=f"user{i}@example.com",
            phone=f"555-01{i:02d}",
            street=f"{i} Main St",
            state=STATES[i % len(STATES)],
            city="Springfield",
            zipcode=f"900{i:02d}",
        )
        for i in range(1, count + 1)
    ]


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    return tmp_path / "test.db"


@pytest.fixture
def settings(db_path: Path) -> Settings:
    return Settings(
        database_url=f"sqlite+aiosqlite:///{db_path}",
        database_echo=False,
        api_url="",
        log_level="WARNING",
        stale_time_seconds=600,
    )


@pytest.fixture
def seeded_db(db_path: Path) -> Path:
    """Create the schema and ten users with a synchronous engine."""
    engine = create_sync_engine(f"sqlite:///{db_path}")
    Base.metadata.create_all(engine)
    with Session(engine) as session:
        session.add_all(make_users())
        session.commit()
    engine.dispose()
    return db_path


@pytest.fixture
def client(settings: Settings, seeded_db: Path):
    app = create_app(settings)
    with TestClient(app) as test_client:
        # no backoff sleeps when a view-side fetch fails
        app.state.hooks.cache.retries = 0
        yield test_client


@pytest_asyncio.fixture
async def engine(settings: Settings, seeded_db: Path):
    engine = create_engine(settings.database_url)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session(engine):
    async with create_session_maker(engine)() as session:
        yield session
