"""
Repository wiring.
Builds the repositories around one ConnectionManager so every caller in a
process shares the same handle.
"""

from typing import NamedTuple, Optional

from devevent.db.session import ConnectionManager, get_connection_manager
from devevent.services.booking_service import BookingRepository
from devevent.services.booking_validator import BookingValidator
from devevent.services.event_service import EventRepository


class Repositories(NamedTuple):
    events: EventRepository
    bookings: BookingRepository


def build_repositories(connections: ConnectionManager) -> Repositories:
    events = EventRepository(connections)
    bookings = BookingRepository(connections, BookingValidator(events))
    return Repositories(events=events, bookings=bookings)


# Singleton instance
_repositories: Optional[Repositories] = None


def get_repositories() -> Repositories:
    """Process-wide repositories over the settings-configured connection manager."""
    global _repositories
    if _repositories is None:
        _repositories = build_repositories(get_connection_manager())
    return _repositories
