"""
Event repository: the only writer of Event rows.

Slug uniqueness is enforced by the uq_events_slug constraint. There is no
"look up the slug, then insert" step: two writers deriving the same slug both
reach the insert, the store lets exactly one through and the other gets
DuplicateSlug.
"""

from typing import Any, Mapping

from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError

from devevent.core.config import get_settings
from devevent.core.errors import DomainError, DuplicateSlug, EventNotFound
from devevent.core.logging import get_logger
from devevent.core.metrics import record_db_operation, record_event_write
from devevent.db.integrity import SLUG_UNIQUE, violated
from devevent.db.session import ConnectionManager
from devevent.models.event import MAX_EVENT_ID, Event
from devevent.services.event_normalizer import (
    REQUIRED_LIST_FIELDS,
    REQUIRED_STRING_FIELDS,
    normalize_event,
)

logger = get_logger(__name__)
settings = get_settings()

_STORED_FIELDS = ("slug", *REQUIRED_STRING_FIELDS, *REQUIRED_LIST_FIELDS)


def _stored_fields(event: Event) -> dict[str, Any]:
    return {name: getattr(event, name) for name in _STORED_FIELDS}


def _storable_id(event_id: Any) -> bool:
    """Ids the events.id column can hold; anything else cannot match a row."""
    if isinstance(event_id, bool) or not isinstance(event_id, int):
        return False
    return 0 < event_id <= MAX_EVENT_ID


def _log_rejection(error: DomainError, **context) -> None:
    record_event_write("rejected")
    logger.warning("event_rejected", code=error.code.value, reason=error.message, **context)


class EventRepository:
    def __init__(self, connections: ConnectionManager):
        self._connections = connections

    async def create(self, candidate: Mapping[str, Any]) -> Event:
        """Normalize a raw candidate and insert it."""
        try:
            normalized = normalize_event(candidate)
        except DomainError as e:
            _log_rejection(e, title=candidate.get("title"))
            raise

        handle = await self._connections.acquire()
        event = Event(**normalized.model_dump())

        async with handle.session() as session:
            session.add(event)
            record_db_operation("write")
            try:
                await session.flush()
            except IntegrityError as e:
                if violated(e, *SLUG_UNIQUE):
                    record_event_write("duplicate")
                    logger.warning("event_duplicate_slug", slug=normalized.slug)
                    raise DuplicateSlug(normalized.slug) from e
                raise
            await session.refresh(event)
            await session.commit()

        record_event_write("created")
        logger.info("event_created", event_id=event.id, slug=event.slug, date=event.date)
        return event

    async def update(self, event_id: int, changes: Mapping[str, Any]) -> Event:
        """
        Apply changes to a stored event and re-run the pipeline over the
        merged record. The slug is regenerated only when the title changed.
        """
        if not _storable_id(event_id):
            raise EventNotFound(event_id)
        handle = await self._connections.acquire()

        async with handle.session() as session:
            event = await session.get(Event, event_id)
            if event is None:
                raise EventNotFound(event_id)

            previous = _stored_fields(event)
            try:
                normalized = normalize_event({**previous, **changes}, previous=previous)
            except DomainError as e:
                _log_rejection(e, event_id=event_id)
                raise

            for name, value in normalized.model_dump().items():
                setattr(event, name, value)
            record_db_operation("write")
            try:
                await session.flush()
            except IntegrityError as e:
                if violated(e, *SLUG_UNIQUE):
                    record_event_write("duplicate")
                    logger.warning("event_duplicate_slug", event_id=event_id, slug=normalized.slug)
                    raise DuplicateSlug(normalized.slug) from e
                raise
            await session.refresh(event)
            await session.commit()

        record_event_write("updated")
        logger.info(
            "event_updated",
            event_id=event.id,
            slug=event.slug,
            slug_changed=event.slug != previous["slug"],
        )
        return event

    async def exists_by_id(self, event_id: int) -> bool:
        """Existence check that reads the primary key only."""
        if not _storable_id(event_id):
            return False
        handle = await self._connections.acquire()
        async with handle.session() as session:
            found = await session.scalar(select(Event.id).where(Event.id == event_id))
        record_db_operation("exists")
        return found is not None

    async def get(self, event_id: int) -> Event:
        if not _storable_id(event_id):
            raise EventNotFound(event_id)
        handle = await self._connections.acquire()
        async with handle.session() as session:
            event = await session.get(Event, event_id)
        record_db_operation("read")
        if event is None:
            raise EventNotFound(event_id)
        return event

    async def get_by_slug(self, slug: str) -> Event:
        handle = await self._connections.acquire()
        async with handle.session() as session:
            result = await session.execute(select(Event).where(Event.slug == slug))
            event = result.scalar_one_or_none()
        record_db_operation("read")
        if event is None:
            raise EventNotFound(slug)
        return event

    async def list_events(self, page: int = 1, page_size: int = 20) -> tuple[list[Event], int]:
        """Newest events first, paginated."""
        page = max(page, 1)
        page_size = min(max(page_size, 1), settings.EVENTS_PAGE_SIZE_MAX)

        handle = await self._connections.acquire()
        async with handle.session() as session:
            total = await session.scalar(select(func.count()).select_from(Event))
            result = await session.execute(
                select(Event)
                .order_by(Event.created_at.desc(), Event.id.desc())
                .offset((page - 1) * page_size)
                .limit(page_size)
            )
            events = list(result.scalars().all())

        record_db_operation("read")
        return events, total
