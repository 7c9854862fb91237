"""
Event endpoints: creation with seat inventory and filtered listing.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from billetter.api.dependencies import get_store
from billetter.schemas.event import EventCreate, EventCreated, EventResponse
from billetter.services.booking_store import BookingStore

router = APIRouter(prefix="/events", tags=["Events"])


@router.post("", response_model=EventCreated, status_code=status.HTTP_201_CREATED)
def create_event_endpoint(
    event_data: EventCreate,
    store: BookingStore = Depends(get_store),
):
    """
    Create an event. Its seats are generated up front: 1000 for a regular
    event, 100 000 when the title names a stadium-sized show.
    """
    event_id = store.create_event(event_data.title, event_data.external)
    return EventCreated(id=event_id)


@router.get("", response_model=list[EventResponse])
def list_events_endpoint(
    query: Optional[str] = Query(None),
    date: Optional[str] = Query(None),
    page: Optional[int] = Query(None),
    page_size: Optional[int] = Query(None, alias="pageSize"),
    store: BookingStore = Depends(get_store),
):
    """
    List events, optionally filtered by a title substring.
    `date` is accepted for client compatibility; events carry no date yet.
    """
    return store.list_events(query=query, page=page, page_size=page_size)
