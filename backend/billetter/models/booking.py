"""
Booking snapshot and lifecycle.

Key design decisions:
- Seat selection does not change the booking status; a `booked` booking
  collects seats until payment is initiated.
- `confirmed` and `cancelled` are terminal.
- The transition table is the single source of truth for what the store
  may do to a booking.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, FrozenSet


class BookingStatus(str, Enum):
    BOOKED = "booked"
    PAYMENT_INITIATED = "payment_initiated"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


_ALLOWED_TRANSITIONS: Dict[BookingStatus, FrozenSet[BookingStatus]] = {
    BookingStatus.BOOKED: frozenset({
        BookingStatus.PAYMENT_INITIATED,
        BookingStatus.CANCELLED,
    }),
    BookingStatus.PAYMENT_INITIATED: frozenset({
        BookingStatus.CONFIRMED,
        BookingStatus.CANCELLED,
    }),
    BookingStatus.CONFIRMED: frozenset(),
    BookingStatus.CANCELLED: frozenset(),
}


def can_transition(from_status: BookingStatus, to_status: BookingStatus) -> bool:
    return to_status in _ALLOWED_TRANSITIONS[from_status]


def is_terminal(status: BookingStatus) -> bool:
    return not _ALLOWED_TRANSITIONS[status]


@dataclass(frozen=True)
class Booking:
    id: int
    event_id: int
    status: BookingStatus
    seat_ids: FrozenSet[int] = frozenset()

    def __repr__(self) -> str:
        return f"<Booking(id={self.id}, event={self.event_id}, status={self.status.value}, seats={len(self.seat_ids)})>"
