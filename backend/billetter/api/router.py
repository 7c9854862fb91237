"""
Central API router that aggregates all route modules.
"""

from fastapi import APIRouter

from billetter.api.routes import bookings, events, payments, seats
from billetter.core.config import get_settings

api_router = APIRouter(prefix=get_settings().API_PREFIX)
api_router.include_router(events.router)
api_router.include_router(bookings.router)
api_router.include_router(seats.router)
api_router.include_router(payments.router)
