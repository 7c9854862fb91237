from billetter.models.event import Event
from billetter.models.seat import Seat, SeatStatus
from billetter.models.booking import Booking, BookingStatus

__all__ = [
    "Event",
    "Seat", "SeatStatus",
    "Booking", "BookingStatus",
]
