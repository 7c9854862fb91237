"""
Seat snapshot and lifecycle states.

FREE --select--> RESERVED --release / timeout--> FREE
RESERVED --payment confirmed--> SOLD (terminal)
"""

from dataclasses import dataclass
from enum import Enum


class SeatStatus(str, Enum):
    FREE = "FREE"
    RESERVED = "RESERVED"
    SOLD = "SOLD"


@dataclass(frozen=True)
class Seat:
    id: int
    event_id: int
    row: int
    number: int
    status: SeatStatus
    price: str

    def __repr__(self) -> str:
        return f"<Seat(id={self.id}, event={self.event_id}, {self.row}-{self.number}, status={self.status.value})>"
