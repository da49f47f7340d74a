"""
Booking validation: attendee email shape and the referenced event's existence.

The existence check gives callers a clear ReferencedEventNotFound before an
insert is attempted. It is not what keeps bookings consistent under
concurrency: an event can change between this check and the insert, so the
fk_bookings_event_id and uq_event_email_booking constraints still decide.
"""

import re
from typing import Any

from devevent.core.errors import InvalidEmail, MissingField, ReferencedEventNotFound
from devevent.core.logging import get_logger
from devevent.models.event import MAX_EVENT_ID
from devevent.services.event_service import EventRepository

logger = get_logger(__name__)

# RFC 5322 shaped: permissive local part, dot-separated LDH domain labels
EMAIL_PATTERN = re.compile(
    r"^[a-zA-Z0-9.!#$%&'*+/=?^_`{|}~-]+"
    r"@[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?"
    r"(?:\.[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?)*$"
)


def normalize_email(raw: Any) -> str:
    """Trim, lowercase and syntax-check an attendee email."""
    email = "" if raw is None else str(raw).strip().lower()
    if not email:
        raise MissingField("email")
    if not EMAIL_PATTERN.match(email):
        raise InvalidEmail(email)
    return email


def parse_event_id(raw: Any) -> int:
    """Event ids are positive 32-bit integers; digit strings are accepted."""
    if isinstance(raw, bool):
        raise ReferencedEventNotFound(raw)
    if isinstance(raw, int):
        event_id = raw
    elif isinstance(raw, str) and raw.strip().isascii() and raw.strip().isdigit():
        event_id = int(raw.strip())
    else:
        raise ReferencedEventNotFound(raw)
    if event_id <= 0 or event_id > MAX_EVENT_ID:
        raise ReferencedEventNotFound(raw)
    return event_id


class BookingValidator:
    def __init__(self, events: EventRepository):
        self._events = events

    async def assert_event_exists(self, event_id: Any) -> int:
        """Return the parsed event id, or raise ReferencedEventNotFound."""
        parsed = parse_event_id(event_id)
        if not await self._events.exists_by_id(parsed):
            logger.info("booking_event_missing", event_id=parsed)
            raise ReferencedEventNotFound(parsed)
        return parsed
