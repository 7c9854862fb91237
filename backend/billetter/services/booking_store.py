"""
In-memory booking store with concurrency-safe seat selection.

CONCURRENCY STRATEGY: Per-entity locks
======================================

Problem:
  Two bookings try to select the same seat simultaneously.
  Both read status=FREE, both write RESERVED, both succeed.
  Result: The seat is held twice.

Solution:
  Every seat and every booking carries its own lock. The FREE -> RESERVED
  check-and-set happens inside the seat lock, so exactly one caller wins
  and everybody else sees RESERVED and gets a ConflictError.

  Lock order is always booking -> seat. Operations that start from a seat
  (release_seat, reservation expiry) read the owning booking id first, then
  take booking -> seat and re-check that ownership has not changed.

  A registry lock only guards id allocation and the entity maps. Records are
  never removed from the maps, so single-key lookups go without it.

Reservation timeouts:
  Selecting a seat for a `booked` booking schedules its release after
  SEAT_RESERVATION_TIMEOUT_SECONDS. Each reservation gets a fresh token; the
  timer only frees the seat if the booking is still `booked` and the seat is
  still RESERVED under the same token. Initiating payment, releasing the seat
  or cancelling the booking cancels the timer.

Payment callbacks:
  confirm_payment / fail_payment never raise. Duplicates and late arrivals
  are absorbed. When both race on one booking, whichever takes the booking
  lock first wins and the other finds a terminal status and does nothing.
"""

import threading
from dataclasses import dataclass, field
from functools import partial
from typing import Dict, List, Optional, Set

from billetter.core.config import Settings
from billetter.core.exceptions import (
    ConflictError,
    InvalidArgumentError,
    InvalidStateError,
    NotFoundError,
)
from billetter.core.logging import get_logger
from billetter.core.metrics import (
    record_booking_transition,
    record_payment_callback,
    record_seat_release,
    record_seat_selection,
    seats_sold,
)
from billetter.models.booking import Booking, BookingStatus, can_transition, is_terminal
from billetter.models.event import Event
from billetter.models.seat import Seat, SeatStatus
from billetter.services.reservation_scheduler import ReservationScheduler
from billetter.services.seat_layout import SeatLayout

logger = get_logger(__name__)

DEFAULT_EVENT_PAGE_SIZE = 10


@dataclass(slots=True, eq=False)
class _EventRecord:
    event: Event
    seat_ids: List[int]


@dataclass(slots=True, eq=False)
class _SeatRecord:
    id: int
    event_id: int
    row: int
    number: int
    price: str
    status: SeatStatus = SeatStatus.FREE
    booking_id: Optional[int] = None
    reservation: int = 0
    lock: threading.Lock = field(default_factory=threading.Lock)

    def snapshot(self) -> Seat:
        return Seat(
            id=self.id,
            event_id=self.event_id,
            row=self.row,
            number=self.number,
            status=self.status,
            price=self.price,
        )


@dataclass(slots=True, eq=False)
class _BookingRecord:
    id: int
    event_id: int
    status: BookingStatus = BookingStatus.BOOKED
    seat_ids: Set[int] = field(default_factory=set)
    lock: threading.Lock = field(default_factory=threading.Lock)

    def snapshot(self) -> Booking:
        # Caller holds self.lock
        return Booking(
            id=self.id,
            event_id=self.event_id,
            status=self.status,
            seat_ids=frozenset(self.seat_ids),
        )


class BookingStore:
    """Registry of events, seats and bookings. All state changes go through here."""

    def __init__(
        self,
        layout: Optional[SeatLayout] = None,
        scheduler: Optional[ReservationScheduler] = None,
        reservation_timeout: float = 900.0,
        payment_url: str = "http://localhost:3000/payment",
        seat_page_size_max: int = 20,
        event_page_size_max: int = 100,
    ):
        self._layout = layout or SeatLayout()
        self._scheduler = scheduler or ReservationScheduler()
        self._reservation_timeout = reservation_timeout
        self._payment_url = payment_url
        self._seat_page_size_max = seat_page_size_max
        self._event_page_size_max = event_page_size_max

        self._registry_lock = threading.Lock()
        self._events: Dict[int, _EventRecord] = {}
        self._seats: Dict[int, _SeatRecord] = {}
        self._bookings: Dict[int, _BookingRecord] = {}
        self._next_event_id = 1
        self._next_seat_id = 1
        self._next_booking_id = 1

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        scheduler: Optional[ReservationScheduler] = None,
    ) -> "BookingStore":
        return cls(
            layout=SeatLayout.from_settings(settings),
            scheduler=scheduler,
            reservation_timeout=settings.SEAT_RESERVATION_TIMEOUT_SECONDS,
            payment_url=settings.PAYMENT_URL,
            seat_page_size_max=settings.SEAT_PAGE_SIZE_MAX,
            event_page_size_max=settings.EVENT_PAGE_SIZE_MAX,
        )

    def start(self) -> None:
        """Start firing reservation timeouts in the background."""
        self._scheduler.start()

    def close(self) -> None:
        self._scheduler.stop()

    def reservation_count(self) -> int:
        return self._scheduler.pending_count()

    # Events

    def create_event(self, title: str, external: bool) -> int:
        """Create an event and its whole seat inventory. Returns the event id."""
        rows, per_row = self._layout.grid_for(title)
        seat_count = rows * per_row

        with self._registry_lock:
            event_id = self._next_event_id
            self._next_event_id += 1
            first_seat_id = self._next_seat_id
            self._next_seat_id += seat_count

        # Build outside the registry lock; nothing can reach these ids yet
        seats = []
        seat_id = first_seat_id
        for row in range(1, rows + 1):
            for number in range(1, per_row + 1):
                seats.append(_SeatRecord(seat_id, event_id, row, number, self._layout.price))
                seat_id += 1

        record = _EventRecord(
            event=Event(id=event_id, title=title, external=external),
            seat_ids=[seat.id for seat in seats],
        )
        with self._registry_lock:
            self._seats.update((seat.id, seat) for seat in seats)
            self._events[event_id] = record

        logger.info("event_created", event_id=event_id, title=title, seats=seat_count)
        return event_id

    def list_events(
        self,
        query: Optional[str] = None,
        page: Optional[int] = None,
        page_size: Optional[int] = None,
    ) -> List[Event]:
        """
        List events in creation order.
        `query` is a case-insensitive title substring. Pagination only applies
        when page or page_size is given.
        """
        with self._registry_lock:
            events = [self._events[event_id].event for event_id in sorted(self._events)]

        if query:
            needle = query.lower()
            events = [event for event in events if needle in event.title.lower()]

        if page is not None or page_size is not None:
            page = 1 if page is None else page
            page_size = DEFAULT_EVENT_PAGE_SIZE if page_size is None else page_size
            self._check_page(page, page_size, self._event_page_size_max)
            offset = (page - 1) * page_size
            events = events[offset:offset + page_size]

        return events

    # Bookings

    def create_booking(self, event_id: int) -> int:
        with self._registry_lock:
            if event_id not in self._events:
                raise NotFoundError("event", event_id)
            booking_id = self._next_booking_id
            self._next_booking_id += 1
            self._bookings[booking_id] = _BookingRecord(booking_id, event_id)

        record_booking_transition(BookingStatus.BOOKED.value)
        logger.info("booking_created", booking_id=booking_id, event_id=event_id)
        return booking_id

    def get_booking(self, booking_id: int) -> Booking:
        booking = self._require_booking(booking_id)
        with booking.lock:
            return booking.snapshot()

    def list_bookings(self) -> List[Booking]:
        with self._registry_lock:
            records = list(self._bookings.values())
        snapshots = []
        for booking in records:
            with booking.lock:
                snapshots.append(booking.snapshot())
        return snapshots

    # Seats

    def get_seat(self, seat_id: int) -> Seat:
        return self._require_seat(seat_id).snapshot()

    def list_seats(self, event_id: int, page: int = 1, page_size: int = 20) -> List[Seat]:
        """
        Page through an event's seats in row-major order.
        Returns an empty list once the offset runs past the last seat.
        """
        event = self._events.get(event_id)
        if event is None:
            raise NotFoundError("event", event_id)
        self._check_page(page, page_size, self._seat_page_size_max)

        offset = (page - 1) * page_size
        return [self._seats[seat_id].snapshot() for seat_id in event.seat_ids[offset:offset + page_size]]

    def select_seat(self, booking_id: int, seat_id: int) -> None:
        """Reserve a FREE seat for a booking. Exactly one concurrent caller wins."""
        booking = self._require_booking(booking_id)
        seat = self._require_seat(seat_id)

        with booking.lock:
            if is_terminal(booking.status):
                record_seat_selection(False)
                logger.info(
                    "seat_select_rejected",
                    booking_id=booking_id,
                    seat_id=seat_id,
                    booking_status=booking.status.value,
                )
                raise ConflictError("Failed to add seat to booking")

            if seat.event_id != booking.event_id:
                record_seat_selection(False)
                raise ConflictError("Seat does not belong to the booking event")

            with seat.lock:
                if seat.status is not SeatStatus.FREE:
                    record_seat_selection(False)
                    logger.info(
                        "seat_conflict",
                        booking_id=booking_id,
                        seat_id=seat_id,
                        seat_status=seat.status.value,
                    )
                    raise ConflictError("Failed to add seat to booking")

                seat.status = SeatStatus.RESERVED
                seat.booking_id = booking.id
                seat.reservation += 1
                booking.seat_ids.add(seat.id)

                # Once payment is pending the booking itself holds the seat
                if booking.status is BookingStatus.BOOKED:
                    self._scheduler.schedule(
                        seat.id,
                        self._reservation_timeout,
                        partial(self._expire_reservation, booking.id, seat.id, seat.reservation),
                    )

        record_seat_selection(True)
        logger.info("seat_selected", booking_id=booking_id, seat_id=seat_id)

    def release_seat(self, seat_id: int) -> None:
        """Return a RESERVED seat to FREE and drop it from its booking."""
        seat = self._require_seat(seat_id)

        while True:
            with seat.lock:
                if seat.status is not SeatStatus.RESERVED:
                    raise ConflictError("Failed to release seat")
                owner_id = seat.booking_id

            booking = self._bookings[owner_id]
            with booking.lock:
                with seat.lock:
                    if seat.status is SeatStatus.RESERVED and seat.booking_id == owner_id:
                        self._free_seat(booking, seat)
                        break
            # Ownership moved between the two lock acquisitions; look again

        record_seat_release("released")
        logger.info("seat_released", seat_id=seat_id, booking_id=owner_id)

    # Payment lifecycle

    def initiate_payment(self, booking_id: int) -> str:
        """Move a booking to payment_initiated. Returns the payment redirect URL."""
        booking = self._require_booking(booking_id)

        with booking.lock:
            self._transition(booking, BookingStatus.PAYMENT_INITIATED)
            for seat_id in booking.seat_ids:
                self._scheduler.cancel(seat_id)
            held = len(booking.seat_ids)

        logger.info("payment_initiated", booking_id=booking_id, seats=held)
        return f"{self._payment_url}?booking_id={booking_id}"

    def cancel_booking(self, booking_id: int) -> None:
        """
        Cancel a booking and free every seat it holds.
        Confirmed and already-cancelled bookings are left untouched.
        """
        booking = self._require_booking(booking_id)

        with booking.lock:
            if booking.status is BookingStatus.CONFIRMED:
                # TODO: product sign-off on whether this should be a conflict instead
                logger.warning("cancel_confirmed_booking_ignored", booking_id=booking_id)
                return
            if booking.status is BookingStatus.CANCELLED:
                return
            self._transition(booking, BookingStatus.CANCELLED)
            released = self._free_all_seats(booking)

        record_seat_release("cancelled", released)
        logger.info("booking_cancelled", booking_id=booking_id, seats_released=released)

    def confirm_payment(self, booking_id: int) -> bool:
        """
        Payment-success callback. Never raises.
        Returns True if the booking moved to confirmed.
        """
        booking = self._bookings.get(booking_id)
        if booking is None:
            return self._ignore_callback("success", booking_id, None)

        with booking.lock:
            if booking.status is not BookingStatus.PAYMENT_INITIATED:
                return self._ignore_callback("success", booking_id, booking.status)
            self._transition(booking, BookingStatus.CONFIRMED)
            for seat_id in booking.seat_ids:
                seat = self._seats[seat_id]
                with seat.lock:
                    seat.status = SeatStatus.SOLD
            sold = len(booking.seat_ids)

        seats_sold.inc(sold)
        record_payment_callback("success", True)
        logger.info("payment_confirmed", booking_id=booking_id, seats_sold=sold)
        return True

    def fail_payment(self, booking_id: int) -> bool:
        """
        Payment-failure callback. Never raises.
        Returns True if the booking was rolled back to cancelled.
        """
        booking = self._bookings.get(booking_id)
        if booking is None:
            return self._ignore_callback("fail", booking_id, None)

        with booking.lock:
            if is_terminal(booking.status):
                return self._ignore_callback("fail", booking_id, booking.status)
            self._transition(booking, BookingStatus.CANCELLED)
            released = self._free_all_seats(booking)

        record_seat_release("payment_failed", released)
        record_payment_callback("fail", True)
        logger.info("payment_failed", booking_id=booking_id, seats_released=released)
        return True

    # Internals

    def _require_booking(self, booking_id: int) -> _BookingRecord:
        booking = self._bookings.get(booking_id)
        if booking is None:
            raise NotFoundError("booking", booking_id)
        return booking

    def _require_seat(self, seat_id: int) -> _SeatRecord:
        seat = self._seats.get(seat_id)
        if seat is None:
            raise NotFoundError("seat", seat_id)
        return seat

    @staticmethod
    def _check_page(page: int, page_size: int, max_page_size: int) -> None:
        if page < 1 or page_size < 1 or page_size > max_page_size:
            raise InvalidArgumentError("Invalid pagination parameters")

    @staticmethod
    def _transition(booking: _BookingRecord, to_status: BookingStatus) -> None:
        # Caller holds booking.lock
        if not can_transition(booking.status, to_status):
            raise InvalidStateError(booking.id, booking.status.value, to_status.value)
        booking.status = to_status
        record_booking_transition(to_status.value)

    def _free_seat(self, booking: _BookingRecord, seat: _SeatRecord) -> None:
        # Caller holds booking.lock and seat.lock. The timer is cancelled under
        # the seat lock so it cannot hit a timer scheduled by the next holder.
        seat.status = SeatStatus.FREE
        seat.booking_id = None
        booking.seat_ids.discard(seat.id)
        self._scheduler.cancel(seat.id)

    def _free_all_seats(self, booking: _BookingRecord) -> int:
        # Caller holds booking.lock
        released = 0
        for seat_id in list(booking.seat_ids):
            seat = self._seats[seat_id]
            with seat.lock:
                self._free_seat(booking, seat)
            released += 1
        return released

    def _expire_reservation(self, booking_id: int, seat_id: int, reservation: int) -> None:
        booking = self._bookings[booking_id]
        seat = self._seats[seat_id]

        with booking.lock:
            if booking.status is not BookingStatus.BOOKED:
                return
            with seat.lock:
                if (
                    seat.status is not SeatStatus.RESERVED
                    or seat.booking_id != booking_id
                    or seat.reservation != reservation
                ):
                    return
                self._free_seat(booking, seat)

        record_seat_release("expired")
        logger.info("reservation_expired", booking_id=booking_id, seat_id=seat_id)

    def _ignore_callback(
        self,
        outcome: str,
        booking_id: int,
        status: Optional[BookingStatus],
    ) -> bool:
        record_payment_callback(outcome, False)
        logger.info(
            "payment_callback_ignored",
            outcome=outcome,
            booking_id=booking_id,
            booking_status=status.value if status else None,
        )
        return False
