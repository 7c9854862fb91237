"""
Seat inventory sizing for new events.

Regular events get a small hall (10 rows x 100 seats); titles that look like
stadium-sized shows ("Stadium", "100k") get 1000 rows x 100 seats.
"""

from dataclasses import dataclass
from typing import Tuple

from billetter.core.config import Settings


@dataclass(frozen=True)
class SeatLayout:
    seats_per_row: int = 100
    regular_rows: int = 10
    large_rows: int = 1000
    large_event_keywords: Tuple[str, ...] = ("stadium", "100k")
    price: str = "10.00"

    @classmethod
    def from_settings(cls, settings: Settings) -> "SeatLayout":
        return cls(
            seats_per_row=settings.SEATS_PER_ROW,
            regular_rows=settings.REGULAR_EVENT_ROWS,
            large_rows=settings.LARGE_EVENT_ROWS,
            large_event_keywords=tuple(k.lower() for k in settings.LARGE_EVENT_KEYWORDS),
            price=settings.SEAT_PRICE,
        )

    def is_large_event(self, title: str) -> bool:
        lowered = title.lower()
        return any(keyword in lowered for keyword in self.large_event_keywords)

    def grid_for(self, title: str) -> Tuple[int, int]:
        """Return (rows, seats_per_row) for an event with this title."""
        rows = self.large_rows if self.is_large_event(title) else self.regular_rows
        return rows, self.seats_per_row
