"""Ticket booking service: events, seats, bookings and payment callbacks."""

__version__ = "1.0.0"
