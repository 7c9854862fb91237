"""
Billetter Booking API - Main Application Entry Point

Ticket sales over a fixed seat inventory:
- Conflict-safe seat selection with per-seat locking
- Reservation timeouts that hand unpaid seats back
- Idempotent payment callbacks that confirm or roll back a booking
- Structured logging with request correlation
"""

from contextlib import asynccontextmanager
from fastapi import Depends, FastAPI

from billetter.core.config import get_settings
from billetter.core.logging import setup_logging, get_logger
from billetter.core.metrics import metrics_endpoint
from billetter.api.dependencies import get_store, close_store
from billetter.api.errors import register_exception_handlers
from billetter.api.router import api_router
from billetter.api.middleware import RequestLoggingMiddleware
from billetter.services.booking_store import BookingStore

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle: startup and shutdown hooks."""
    setup_logging()
    logger = get_logger(__name__)

    logger.info(
        "application_starting",
        app=settings.APP_NAME,
        version=settings.APP_VERSION,
        environment=settings.ENVIRONMENT,
        reservation_timeout_s=settings.SEAT_RESERVATION_TIMEOUT_SECONDS,
    )

    get_store().start()

    yield

    close_store()
    logger.info("application_shutdown")


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Ticket booking API with conflict-safe seat reservations",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(RequestLoggingMiddleware)
register_exception_handlers(app)
app.include_router(api_router)


@app.get("/health", tags=["Health"])
def health_check(store: BookingStore = Depends(get_store)):
    """Health check endpoint for Docker and load balancers."""
    return {
        "status": "healthy",
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
        "active_reservations": store.reservation_count(),
    }


@app.get("/metrics", tags=["Health"], include_in_schema=False)
def metrics():
    return metrics_endpoint()


@app.get("/", tags=["Root"])
async def root():
    return {
        "message": f"Welcome to {settings.APP_NAME}",
        "version": settings.APP_VERSION,
        "docs": "/docs",
    }
