"""
Pytest fixtures for the booking store and the HTTP client.

The store runs on a fake clock with the reservation worker stopped, so
tests decide exactly when reservation timeouts fire. Regular events get a
single row of 10 seats to keep scenarios readable.
"""

from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from billetter.main import app
from billetter.api.dependencies import get_store
from billetter.services.booking_store import BookingStore
from billetter.services.reservation_scheduler import ReservationScheduler
from billetter.services.seat_layout import SeatLayout

RESERVATION_TIMEOUT = 900.0


class FakeClock:
    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def scheduler(clock: FakeClock) -> ReservationScheduler:
    return ReservationScheduler(clock=clock)


@pytest.fixture
def store(scheduler: ReservationScheduler) -> BookingStore:
    """Store with 10-seat regular events and 1000-seat stadium events."""
    layout = SeatLayout(seats_per_row=10, regular_rows=1, large_rows=100)
    return BookingStore(
        layout=layout,
        scheduler=scheduler,
        reservation_timeout=RESERVATION_TIMEOUT,
        payment_url="http://payments.test/pay",
    )


@pytest.fixture
def expire_reservations(clock: FakeClock, scheduler: ReservationScheduler):
    """Jump past the reservation timeout and fire whatever is due."""

    def _expire(seconds: float = RESERVATION_TIMEOUT + 1) -> int:
        clock.advance(seconds)
        return scheduler.run_due()

    return _expire


@pytest.fixture
def event_id(store: BookingStore) -> int:
    return store.create_event("Test Concert", external=False)


@pytest_asyncio.fixture(scope="function")
async def client(store: BookingStore) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client that overrides the store dependency with the test store."""
    app.dependency_overrides[get_store] = lambda: store

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
