"""
Booking endpoints: creation, listing, payment initiation and cancellation.
"""

from fastapi import APIRouter, Depends, status
from fastapi.responses import RedirectResponse

from billetter.api.dependencies import get_store
from billetter.schemas.booking import BookingAction, BookingCreate, BookingCreated, BookingResponse
from billetter.services.booking_store import BookingStore

router = APIRouter(prefix="/bookings", tags=["Bookings"])


@router.post("", response_model=BookingCreated, status_code=status.HTTP_201_CREATED)
def create_booking_endpoint(
    booking_data: BookingCreate,
    store: BookingStore = Depends(get_store),
):
    """Open an empty booking for an event. 404 if the event does not exist."""
    booking_id = store.create_booking(booking_data.event_id)
    return BookingCreated(id=booking_id)


@router.get("", response_model=list[BookingResponse])
def list_bookings_endpoint(store: BookingStore = Depends(get_store)):
    return store.list_bookings()


@router.patch(
    "/initiatePayment",
    response_class=RedirectResponse,
    status_code=status.HTTP_302_FOUND,
)
def initiate_payment_endpoint(
    action: BookingAction,
    store: BookingStore = Depends(get_store),
):
    """
    Start payment and redirect the client to the payment page.
    Seat reservation timers stop here; the pending payment holds the seats.
    409 unless the booking is still `booked`.
    """
    return store.initiate_payment(action.booking_id)


@router.patch("/cancel", response_model=str)
def cancel_booking_endpoint(
    action: BookingAction,
    store: BookingStore = Depends(get_store),
):
    """
    Cancel a booking and release its seats.
    Confirmed bookings are left as they are but the call still succeeds.
    """
    store.cancel_booking(action.booking_id)
    return "Booking successfully cancelled"
