"""
Tests for reservation timeouts: unpaid seats go back to FREE, paid or
released ones are never touched by a stale timer.
"""

from billetter.models.booking import BookingStatus
from billetter.models.seat import SeatStatus

RESERVATION_TIMEOUT = 900.0


def test_reservation_expires_after_timeout(store, event_id, clock, scheduler):
    booking_id = store.create_booking(event_id)
    store.select_seat(booking_id, 2)

    clock.advance(RESERVATION_TIMEOUT - 1)
    assert scheduler.run_due() == 0
    assert store.get_seat(2).status is SeatStatus.RESERVED

    clock.advance(2)
    assert scheduler.run_due() == 1
    assert store.get_seat(2).status is SeatStatus.FREE
    assert store.get_booking(booking_id).seat_ids == frozenset()
    # The booking itself stays open
    assert store.get_booking(booking_id).status is BookingStatus.BOOKED


def test_expired_seat_can_be_selected_again(store, event_id, expire_reservations):
    first = store.create_booking(event_id)
    second = store.create_booking(event_id)
    store.select_seat(first, 2)

    expire_reservations()
    store.select_seat(second, 2)

    assert store.get_booking(second).seat_ids == {2}
    assert store.reservation_count() == 1


def test_initiate_payment_stops_the_clock(store, event_id, expire_reservations):
    booking_id = store.create_booking(event_id)
    store.select_seat(booking_id, 1)
    store.select_seat(booking_id, 2)
    assert store.reservation_count() == 2

    store.initiate_payment(booking_id)
    assert store.reservation_count() == 0

    assert expire_reservations() == 0
    assert store.get_seat(1).status is SeatStatus.RESERVED
    assert store.get_seat(2).status is SeatStatus.RESERVED
    assert store.get_booking(booking_id).seat_ids == {1, 2}


def test_release_cancels_the_timer(store, event_id, expire_reservations):
    booking_id = store.create_booking(event_id)
    store.select_seat(booking_id, 3)

    store.release_seat(3)

    assert store.reservation_count() == 0
    assert expire_reservations() == 0


def test_stale_timer_does_not_release_a_newer_reservation(store, event_id, clock, scheduler):
    booking_id = store.create_booking(event_id)
    store.select_seat(booking_id, 3)

    clock.advance(RESERVATION_TIMEOUT / 2)
    store.release_seat(3)
    store.select_seat(booking_id, 3)

    # Past the first reservation's deadline, before the second one's
    clock.advance(RESERVATION_TIMEOUT / 2 + 1)
    assert scheduler.run_due() == 0
    assert store.get_seat(3).status is SeatStatus.RESERVED

    clock.advance(RESERVATION_TIMEOUT / 2)
    assert scheduler.run_due() == 1
    assert store.get_seat(3).status is SeatStatus.FREE


def test_timer_fired_after_payment_started_is_a_noop(store, event_id):
    booking_id = store.create_booking(event_id)
    store.select_seat(booking_id, 4)
    seat = store._seats[4]
    expire = store._expire_reservation

    store.initiate_payment(booking_id)
    # Simulate a callback that was already dequeued when payment started
    expire(booking_id, 4, seat.reservation)

    assert store.get_seat(4).status is SeatStatus.RESERVED
    assert store.get_booking(booking_id).seat_ids == {4}


def test_seat_selected_during_payment_has_no_timer(store, event_id, expire_reservations):
    booking_id = store.create_booking(event_id)
    store.initiate_payment(booking_id)

    store.select_seat(booking_id, 5)

    assert store.reservation_count() == 0
    expire_reservations()
    assert store.get_seat(5).status is SeatStatus.RESERVED
    store.confirm_payment(booking_id)
    assert store.get_seat(5).status is SeatStatus.SOLD


def test_expiry_only_touches_its_own_seat(store, event_id, clock, scheduler):
    booking_id = store.create_booking(event_id)
    store.select_seat(booking_id, 1)
    clock.advance(600)
    store.select_seat(booking_id, 2)

    clock.advance(RESERVATION_TIMEOUT - 600 + 1)
    assert scheduler.run_due() == 1

    assert store.get_seat(1).status is SeatStatus.FREE
    assert store.get_seat(2).status is SeatStatus.RESERVED
    assert store.get_booking(booking_id).seat_ids == {2}
