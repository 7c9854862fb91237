"""
Metrics instrumentation for observability.
Exposes Prometheus-compatible metrics at /metrics endpoint.
"""

from prometheus_client import Counter, Gauge, generate_latest, CONTENT_TYPE_LATEST
from fastapi import Response

# Seat metrics
seat_selections = Counter(
    'seat_selections_total',
    'Seat selection attempts',
    ['result']  # success, conflict
)

seat_releases = Counter(
    'seat_releases_total',
    'Seats returned to FREE',
    ['reason']  # released, expired, cancelled, payment_failed
)

seats_sold = Counter(
    'seats_sold_total',
    'Seats moved to SOLD after a confirmed payment'
)

active_reservations = Gauge(
    'active_seat_reservations',
    'Pending reservation timers'
)

# Booking metrics
booking_transitions = Counter(
    'booking_transitions_total',
    'Booking status transitions',
    ['status']  # booked, payment_initiated, confirmed, cancelled
)

payment_callbacks = Counter(
    'payment_callbacks_total',
    'Payment provider callbacks',
    ['outcome', 'effect']  # success/fail, applied/ignored
)


def metrics_endpoint() -> Response:
    """
    Prometheus metrics endpoint.

    Usage:
        @app.get("/metrics")
        def metrics():
            return metrics_endpoint()
    """
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )


def record_seat_selection(success: bool):
    result = "success" if success else "conflict"
    seat_selections.labels(result=result).inc()


def record_seat_release(reason: str, count: int = 1):
    """Reason: released, expired, cancelled, payment_failed"""
    if count:
        seat_releases.labels(reason=reason).inc(count)


def record_booking_transition(status: str):
    booking_transitions.labels(status=status).inc()


def record_payment_callback(outcome: str, applied: bool):
    """Record a payment callback. Outcome: success, fail"""
    effect = "applied" if applied else "ignored"
    payment_callbacks.labels(outcome=outcome, effect=effect).inc()
