"""
Payment provider callbacks.

Both endpoints always answer "OK". Unknown orders, duplicates and
out-of-order deliveries are absorbed by the store.
"""

from fastapi import APIRouter, Depends, Query

from billetter.api.dependencies import get_store
from billetter.services.booking_store import BookingStore

router = APIRouter(prefix="/payments", tags=["Payments"])


@router.get("/success", response_model=str)
def payment_success_endpoint(
    order_id: int = Query(..., alias="orderId"),
    store: BookingStore = Depends(get_store),
):
    store.confirm_payment(order_id)
    return "OK"


@router.get("/fail", response_model=str)
def payment_fail_endpoint(
    order_id: int = Query(..., alias="orderId"),
    store: BookingStore = Depends(get_store),
):
    store.fail_payment(order_id)
    return "OK"
