"""
Process-wide booking store, handed to routes through FastAPI dependencies.
Tests swap it out with app.dependency_overrides[get_store].
"""

from typing import Optional

from billetter.core.config import get_settings
from billetter.services.booking_store import BookingStore

_store: Optional[BookingStore] = None


def get_store() -> BookingStore:
    """Get or create the booking store."""
    global _store

    if _store is None:
        _store = BookingStore.from_settings(get_settings())
    return _store


def close_store() -> None:
    """Stop the reservation worker and drop the store on shutdown."""
    global _store
    if _store:
        _store.close()
        _store = None
