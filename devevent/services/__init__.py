from devevent.services.event_service import EventRepository
from devevent.services.booking_validator import BookingValidator
from devevent.services.booking_service import BookingRepository
from devevent.services.factory import Repositories, build_repositories, get_repositories

__all__ = [
    "EventRepository", "BookingValidator", "BookingRepository",
    "Repositories", "build_repositories", "get_repositories",
]
