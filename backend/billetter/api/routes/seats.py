"""
Seat endpoints with conflict-safe selection.
"""

from fastapi import APIRouter, Depends, Query

from billetter.api.dependencies import get_store
from billetter.schemas.seat import SeatRelease, SeatResponse, SeatSelect
from billetter.services.booking_store import BookingStore

router = APIRouter(prefix="/seats", tags=["Seats"])


@router.get("", response_model=list[SeatResponse])
def list_seats_endpoint(
    event_id: int = Query(...),
    page: int = Query(1),
    page_size: int = Query(20, alias="pageSize"),
    store: BookingStore = Depends(get_store),
):
    """
    Page through an event's seats in row order.
    400 if page < 1 or pageSize is outside [1, 20]; an empty list past the end.
    """
    return store.list_seats(event_id, page=page, page_size=page_size)


@router.patch("/select", response_model=str)
def select_seat_endpoint(
    selection: SeatSelect,
    store: BookingStore = Depends(get_store),
):
    """
    Reserve a seat for a booking.

    Concurrent requests for the same seat resolve to exactly one 200; every
    other caller gets 409. The reservation lapses after 15 minutes unless
    payment is initiated first.
    """
    store.select_seat(selection.booking_id, selection.seat_id)
    return "Seat successfully added to booking"


@router.patch("/release", response_model=str)
def release_seat_endpoint(
    release: SeatRelease,
    store: BookingStore = Depends(get_store),
):
    """Give a reserved seat back. 409 if the seat is not RESERVED."""
    store.release_seat(release.seat_id)
    return "Seat successfully released"
