from devevent.schemas.event import NormalizedEvent, EventResponse, EventListResponse
from devevent.schemas.booking import BookingResponse

__all__ = [
    "NormalizedEvent", "EventResponse", "EventListResponse",
    "BookingResponse",
]
