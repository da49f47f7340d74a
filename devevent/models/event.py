"""
Event model: one schedulable gathering.

Key design decisions:
- `slug` carries a named unique constraint; the insert is what decides a slug
  race, not a lookup beforehand
- `date` and `time` are stored as canonical strings (YYYY-MM-DD, HH:MM), the
  normalizer guarantees the shape before a row is built
- No `bookings` relationship: bookings point at events, events don't own them
"""

from sqlalchemy import Column, Integer, String, Text, JSON, UniqueConstraint, Index

from devevent.db.base import Base, TimestampMixin

# events.id is a 32-bit INTEGER on every supported backend
MAX_EVENT_ID = 2**31 - 1


class Event(Base, TimestampMixin):
    __tablename__ = "events"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    slug = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    overview = Column(Text, nullable=False)
    image = Column(String(1024), nullable=False)
    venue = Column(String(255), nullable=False)
    location = Column(String(255), nullable=False)
    date = Column(String(10), nullable=False)  # YYYY-MM-DD
    time = Column(String(5), nullable=False)  # HH:MM, 24-hour
    mode = Column(String(50), nullable=False)  # online, offline, hybrid...
    audience = Column(String(255), nullable=False)
    agenda = Column(JSON, nullable=False)
    organizer = Column(String(255), nullable=False)
    tags = Column(JSON, nullable=False)

    __table_args__ = (
        UniqueConstraint("slug", name="uq_events_slug"),
        # Listing shows newest first
        Index("ix_events_created_at", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Event(id={self.id}, slug={self.slug}, date={self.date} {self.time})>"
