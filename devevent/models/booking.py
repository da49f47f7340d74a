"""
Booking model: one attendee's registration for one event.

Key design decisions:
- Unique constraint on (event_id, email) is the final arbiter for concurrent
  duplicate submissions
- Foreign key to events.id with no ON DELETE action: the store refuses to
  delete an event that still has bookings
- No ORM relationship back to Event; lookups go through the indexes below
"""

from sqlalchemy import Column, Integer, String, ForeignKey, UniqueConstraint, Index

from devevent.db.base import Base, TimestampMixin


class Booking(Base, TimestampMixin):
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, index=True)
    event_id = Column(Integer, ForeignKey("events.id", name="fk_bookings_event_id"), nullable=False)
    email = Column(String(320), nullable=False)

    __table_args__ = (
        UniqueConstraint("event_id", "email", name="uq_event_email_booking"),
        Index("ix_bookings_event_id", "event_id"),
        # An event's bookings, newest first
        Index("ix_bookings_event_created", "event_id", "created_at"),
        # All bookings for one attendee
        Index("ix_bookings_email", "email"),
    )

    def __repr__(self) -> str:
        return f"<Booking(id={self.id}, event={self.event_id}, email={self.email})>"
