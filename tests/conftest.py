"""
Pytest fixtures for the connection manager, repositories and seed data.

Each test gets its own SQLite file so constraint behaviour (unique indexes,
foreign keys) is the real store's, with no server to run.
"""

from typing import AsyncGenerator

import pytest
import pytest_asyncio

from devevent.db.session import ConnectionManager
from devevent.models.event import Event
from devevent.services.booking_service import BookingRepository
from devevent.services.event_service import EventRepository
from devevent.services.factory import build_repositories


def sqlite_url(path) -> str:
    return f"sqlite+aiosqlite:///{path}"


@pytest_asyncio.fixture
async def connections(tmp_path) -> AsyncGenerator[ConnectionManager, None]:
    """A manager over a fresh database with the schema created on connect."""
    manager = ConnectionManager(
        sqlite_url(tmp_path / "devevent.db"),
        create_schema=True,
        connect_args={"timeout": 30},
    )
    yield manager
    await manager.dispose()


@pytest.fixture
def events(connections: ConnectionManager) -> EventRepository:
    return build_repositories(connections).events


@pytest.fixture
def bookings(connections: ConnectionManager) -> BookingRepository:
    return build_repositories(connections).bookings


@pytest.fixture
def event_payload() -> dict:
    """Raw submission as the ingestion layer hands it over."""
    return {
        "title": "React Conf Europe!",
        "description": "  The biggest React gathering in Europe.  ",
        "overview": "Two days of talks and workshops.",
        "image": "https://images.example.com/devevent/react-conf.png",
        "venue": "RAI Amsterdam",
        "location": "Amsterdam, Netherlands",
        "date": "2024-10-05",
        "time": "10:00am",
        "mode": "offline",
        "audience": "Frontend developers",
        "agenda": ["Keynote", " Server Components deep dive "],
        "organizer": "React Community",
        "tags": ["react", "javascript"],
    }


@pytest_asyncio.fixture
async def test_event(events: EventRepository, event_payload: dict) -> Event:
    return await events.create(event_payload)
