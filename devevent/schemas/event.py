"""
Pydantic schemas for event shapes.

NormalizedEvent is what the normalizer hands the repository: every field is
already canonical, so building a row from it needs no further checks.
"""

from datetime import datetime
from pydantic import BaseModel, Field


class NormalizedEvent(BaseModel):
    title: str = Field(..., min_length=1)
    slug: str = Field(..., min_length=1, pattern=r"^[a-z0-9]+(?:-[a-z0-9]+)*$")
    description: str = Field(..., min_length=1)
    overview: str = Field(..., min_length=1)
    image: str = Field(..., min_length=1)
    venue: str = Field(..., min_length=1)
    location: str = Field(..., min_length=1)
    date: str = Field(..., pattern=r"^\d{4}-\d{2}-\d{2}$")
    time: str = Field(..., pattern=r"^([01]\d|2[0-3]):[0-5]\d$")
    mode: str = Field(..., min_length=1)
    audience: str = Field(..., min_length=1)
    agenda: list[str] = Field(..., min_length=1)
    organizer: str = Field(..., min_length=1)
    tags: list[str] = Field(..., min_length=1)


class EventResponse(BaseModel):
    id: int
    title: str
    slug: str
    description: str
    overview: str
    image: str
    venue: str
    location: str
    date: str
    time: str
    mode: str
    audience: str
    agenda: list[str]
    organizer: str
    tags: list[str]
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class EventListResponse(BaseModel):
    events: list[EventResponse]
    total: int
    page: int
    page_size: int
