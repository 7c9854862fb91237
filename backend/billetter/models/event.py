"""
Event snapshot.

Events are immutable once created; their seat inventory is generated
synchronously by the store at creation time.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class Event:
    id: int
    title: str
    external: bool

    def __repr__(self) -> str:
        return f"<Event(id={self.id}, title={self.title}, external={self.external})>"
