"""
Pydantic schemas for event-related request/response validation.
"""

from pydantic import BaseModel, StrictBool, StrictStr


class EventCreate(BaseModel):
    title: StrictStr
    external: StrictBool


class EventCreated(BaseModel):
    id: int


class EventResponse(BaseModel):
    id: int
    title: str
    external: bool

    model_config = {"from_attributes": True}
