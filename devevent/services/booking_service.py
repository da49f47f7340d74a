"""
Booking repository with storage-enforced uniqueness.

CONCURRENCY STRATEGY: Constraint as Arbiter
===========================================

Problem:
  The same attendee double-submits the booking form. Both requests check
  "does this email already have a booking for this event?", both see no,
  both insert. Result: two bookings for one seat holder.

Solution:
  The bookings table carries UNIQUE (event_id, email). We never look for an
  existing booking before inserting; we insert and let the store decide.

  1. Normalize email (trim, lowercase) and syntax-check it
  2. Confirm the event exists (clear error for the common case)
  3. INSERT the booking
  4. IntegrityError on uq_event_email_booking  -> DuplicateBooking
     IntegrityError on fk_bookings_event_id    -> ReferencedEventNotFound

  Steps 1-2 finish before a session is opened, so an abandoned request never
  leaves anything behind. Step 3 is a single-row insert: it either commits or
  nothing is visible.

Alternative approaches considered:
  - SELECT then INSERT: racy, both writers pass the SELECT.
  - SELECT FOR UPDATE on the event row: serializes every booking for an event
    to protect a constraint the index already guarantees.
"""

from typing import Any, Mapping

from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError

from devevent.core.errors import (
    DomainError,
    DuplicateBooking,
    ReferencedEventNotFound,
)
from devevent.core.logging import get_logger
from devevent.core.metrics import record_booking_attempt, record_db_operation
from devevent.db.integrity import BOOKING_EVENT_FK, BOOKING_UNIQUE, violated
from devevent.db.session import ConnectionManager
from devevent.models.booking import Booking
from devevent.models.event import MAX_EVENT_ID
from devevent.services.booking_validator import BookingValidator, normalize_email

logger = get_logger(__name__)


class BookingRepository:
    def __init__(self, connections: ConnectionManager, validator: BookingValidator):
        self._connections = connections
        self._validator = validator

    async def create(self, candidate: Mapping[str, Any]) -> Booking:
        """
        Book an event for an email address.

        Raises MissingField/InvalidEmail for a bad address,
        ReferencedEventNotFound for an unknown event and DuplicateBooking when
        the address already holds a booking for the event.
        """
        try:
            email = normalize_email(candidate.get("email"))
            event_id = await self._validator.assert_event_exists(candidate.get("event_id"))
        except DomainError as e:
            record_booking_attempt("rejected")
            logger.warning(
                "booking_rejected",
                code=e.code.value,
                reason=e.message,
                event_id=candidate.get("event_id"),
            )
            raise

        handle = await self._connections.acquire()
        booking = Booking(event_id=event_id, email=email)

        async with handle.session() as session:
            session.add(booking)
            record_db_operation("write")
            try:
                await session.flush()
            except IntegrityError as e:
                if violated(e, *BOOKING_UNIQUE):
                    record_booking_attempt("duplicate")
                    logger.warning("booking_duplicate", event_id=event_id)
                    raise DuplicateBooking(event_id, email) from e
                if violated(e, *BOOKING_EVENT_FK):
                    # Event vanished between the existence check and the insert
                    record_booking_attempt("rejected")
                    logger.warning("booking_event_vanished", event_id=event_id)
                    raise ReferencedEventNotFound(event_id) from e
                raise
            await session.refresh(booking)
            await session.commit()

        record_booking_attempt("success")
        logger.info("booking_created", booking_id=booking.id, event_id=event_id)
        return booking

    async def list_for_event(self, event_id: int) -> list[Booking]:
        """An event's bookings, newest first."""
        if not 0 < event_id <= MAX_EVENT_ID:
            return []
        handle = await self._connections.acquire()
        async with handle.session() as session:
            result = await session.execute(
                select(Booking)
                .where(Booking.event_id == event_id)
                .order_by(Booking.created_at.desc(), Booking.id.desc())
            )
            bookings = list(result.scalars().all())
        record_db_operation("read")
        return bookings

    async def list_for_email(self, email: str) -> list[Booking]:
        """Every booking held by one attendee."""
        email = normalize_email(email)
        handle = await self._connections.acquire()
        async with handle.session() as session:
            result = await session.execute(
                select(Booking)
                .where(Booking.email == email)
                .order_by(Booking.created_at.desc(), Booking.id.desc())
            )
            bookings = list(result.scalars().all())
        record_db_operation("read")
        return bookings

    async def count_for_event(self, event_id: int) -> int:
        if not 0 < event_id <= MAX_EVENT_ID:
            return 0
        handle = await self._connections.acquire()
        async with handle.session() as session:
            total = await session.scalar(
                select(func.count()).select_from(Booking).where(Booking.event_id == event_id)
            )
        record_db_operation("read")
        return total
