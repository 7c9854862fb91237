"""
Error taxonomy for the booking store.

The HTTP layer maps each class to a status code (see api/errors.py):
  NotFoundError        -> 404
  ConflictError        -> 409 (seat contention, wrong booking state)
  InvalidArgumentError -> 400 (pagination bounds)
"""


class BookingError(Exception):
    """Base exception for all booking store errors."""


class NotFoundError(BookingError):
    """Referenced event, booking or seat does not exist."""

    def __init__(self, entity: str, entity_id: int):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity.capitalize()} not found")


class ConflictError(BookingError):
    """The requested transition collides with the current seat or booking state."""


class InvalidStateError(ConflictError):
    """
    Raised when a booking is asked for a transition its status does not allow.
    """

    def __init__(self, booking_id: int, from_state: str, to_state: str):
        self.booking_id = booking_id
        self.from_state = from_state
        self.to_state = to_state
        super().__init__(
            f"Invalid booking status: {from_state} -> {to_state} "
            f"not allowed for booking {booking_id}"
        )


class InvalidArgumentError(BookingError):
    """Caller supplied out-of-range arguments (e.g. pagination)."""
