"""
Helpers for reading storage-level constraint violations.

Postgres reports the constraint name, SQLite reports table.column pairs, so
callers pass markers for both.
"""

from sqlalchemy.exc import IntegrityError


def violated(exc: IntegrityError, *markers: str) -> bool:
    detail = str(exc.orig).lower()
    return any(marker.lower() in detail for marker in markers)


SLUG_UNIQUE = ("uq_events_slug", "events.slug")
BOOKING_UNIQUE = ("uq_event_email_booking", "bookings.event_id, bookings.email")
BOOKING_EVENT_FK = ("fk_bookings_event_id", "foreign key")
