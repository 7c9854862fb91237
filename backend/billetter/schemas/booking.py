"""
Pydantic schemas for booking-related request/response validation.
"""

from pydantic import BaseModel, StrictInt

from billetter.models.booking import BookingStatus


class BookingCreate(BaseModel):
    event_id: StrictInt


class BookingCreated(BaseModel):
    id: int


class BookingAction(BaseModel):
    """Body of the initiatePayment and cancel endpoints."""
    booking_id: StrictInt


class BookingResponse(BaseModel):
    id: int
    event_id: int
    status: BookingStatus

    model_config = {"from_attributes": True}
