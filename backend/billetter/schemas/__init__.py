from billetter.schemas.event import EventCreate, EventCreated, EventResponse
from billetter.schemas.booking import BookingCreate, BookingCreated, BookingAction, BookingResponse
from billetter.schemas.seat import SeatSelect, SeatRelease, SeatResponse

__all__ = [
    "EventCreate", "EventCreated", "EventResponse",
    "BookingCreate", "BookingCreated", "BookingAction", "BookingResponse",
    "SeatSelect", "SeatRelease", "SeatResponse",
]
