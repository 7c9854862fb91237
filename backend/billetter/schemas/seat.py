"""
Pydantic schemas for seat-related request/response validation.
"""

from pydantic import BaseModel, StrictInt

from billetter.models.seat import SeatStatus


class SeatSelect(BaseModel):
    booking_id: StrictInt
    seat_id: StrictInt


class SeatRelease(BaseModel):
    seat_id: StrictInt


class SeatResponse(BaseModel):
    id: int
    row: int
    number: int
    status: SeatStatus
    price: str

    model_config = {"from_attributes": True}
