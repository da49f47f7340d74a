"""
Pydantic schemas for booking read shapes.
"""

from datetime import datetime
from pydantic import BaseModel


class BookingResponse(BaseModel):
    id: int
    event_id: int
    email: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
