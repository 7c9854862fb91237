"""
Locust Load Test Suite

Run scenarios:
  locust -f locustfile.py --tags concurrency  # Test double-selling of seats
  locust -f locustfile.py --tags throughput   # Test read paths
  locust -f locustfile.py --tags edge         # Test bad input
  locust -f locustfile.py                     # All tests
"""

import random
from locust import HttpUser, task, between, tag, events

# Shared state
EVENT_IDS = []
CONTESTED_EVENT_ID = None
CONTESTED_SEATS = range(1, 11)


def random_title():
    return f"Event {random.randint(1, 10000)}"


@events.test_start.add_listener
def on_test_start(environment, **kwargs):
    """Setup banner; the contested event is created by the first ConcurrencyUser."""
    print("\n" + "=" * 60)
    print("SETUP: Creating contested seat event...")
    print("=" * 60)


class ConcurrencyUser(HttpUser):
    """
    TEST 1: Concurrency - every user fights over the same 10 seats

    Run: locust -f locustfile.py --tags concurrency -u 100 -r 50 --run-time 30s

    After the test, page through GET /api/seats?event_id=X: every seat is
    FREE, RESERVED or SOLD, and the run logs show no 5xx responses.
    """
    wait_time = between(0, 0.1)

    def on_start(self):
        global CONTESTED_EVENT_ID

        if not CONTESTED_EVENT_ID:
            resp = self.client.post("/api/events", json={
                "title": "Concurrency Test Event",
                "external": False,
            })
            if resp.status_code == 201:
                CONTESTED_EVENT_ID = resp.json()["id"]
                print(f"\n✓ Created event {CONTESTED_EVENT_ID}\n")

        self.booking_id = None
        if CONTESTED_EVENT_ID:
            resp = self.client.post("/api/bookings", json={"event_id": CONTESTED_EVENT_ID})
            if resp.status_code == 201:
                self.booking_id = resp.json()["id"]

    @tag("concurrency")
    @task
    def grab_contested_seat(self):
        """All users select the first 10 seats of the event."""
        if not self.booking_id:
            return

        seat_id = self._first_seat_id() + random.choice(CONTESTED_SEATS) - 1
        with self.client.patch("/api/seats/select",
            json={"booking_id": self.booking_id, "seat_id": seat_id},
            name="/api/seats/select [contested]",
            catch_response=True
        ) as resp:
            if resp.status_code == 200:
                resp.success()
            elif resp.status_code == 409:
                resp.success()  # Expected: someone else holds it
            else:
                resp.failure(f"Unexpected: {resp.status_code}")

    @tag("concurrency")
    @task
    def let_go(self):
        """Occasionally release a seat so the fight continues."""
        if not CONTESTED_EVENT_ID:
            return

        seat_id = self._first_seat_id() + random.choice(CONTESTED_SEATS) - 1
        with self.client.patch("/api/seats/release",
            json={"seat_id": seat_id},
            catch_response=True
        ) as resp:
            if resp.status_code in [200, 409]:
                resp.success()
            else:
                resp.failure(f"Unexpected: {resp.status_code}")

    def _first_seat_id(self):
        resp = self.client.get(
            f"/api/seats?event_id={CONTESTED_EVENT_ID}&page=1&pageSize=1",
            name="/api/seats [first]",
        )
        if resp.status_code == 200 and resp.json():
            return resp.json()[0]["id"]
        return 1


class ThroughputUser(HttpUser):
    """
    TEST 2: Throughput - read paths under load

    Run: locust -f locustfile.py --tags throughput -u 100 -r 20 --run-time 60s

    Compare:
      - Avg response time
      - Requests/sec
      - P95/P99 latency
    """
    wait_time = between(0.1, 0.5)

    @tag("throughput", "read")
    @task(10)
    def list_events(self):
        """Page through events."""
        page = random.randint(1, 5)
        self.client.get(f"/api/events?page={page}&pageSize=20",
            name="/api/events [paged]")

    @tag("throughput", "read")
    @task(5)
    def list_seats(self):
        """Page through an event's seat map."""
        if EVENT_IDS:
            event_id = random.choice(EVENT_IDS)
            self.client.get(f"/api/seats?event_id={event_id}&page={random.randint(1, 50)}&pageSize=20",
                name="/api/seats")

    @tag("throughput")
    @task(1)
    def health_check(self):
        """Monitor system health."""
        self.client.get("/health")


class EdgeCaseUser(HttpUser):
    """
    TEST 3: Edge cases - Bad input handling

    Run: locust -f locustfile.py --tags edge -u 20 -r 5 --run-time 30s

    System should NOT crash, return proper error codes.
    """
    wait_time = between(0.5, 1.5)

    def _expect(self, resp, codes):
        if resp.status_code in codes:
            resp.success()
        else:
            resp.failure(f"Expected {codes}, got {resp.status_code}")

    @tag("edge")
    @task
    def invalid_event_id(self):
        """Book a non-existent event."""
        with self.client.post("/api/bookings",
            json={"event_id": 999999},
            catch_response=True
        ) as resp:
            self._expect(resp, [404])

    @tag("edge")
    @task
    def unknown_seat(self):
        """Select a seat that does not exist."""
        with self.client.patch("/api/seats/select",
            json={"booking_id": 1, "seat_id": 999999999},
            catch_response=True
        ) as resp:
            self._expect(resp, [404])

    @tag("edge")
    @task
    def oversized_page(self):
        """Ask for more seats per page than allowed."""
        with self.client.get("/api/seats?event_id=1&page=1&pageSize=500",
            catch_response=True
        ) as resp:
            self._expect(resp, [400, 404])

    @tag("edge")
    @task
    def wrong_types(self):
        """Send a string where an id is expected."""
        with self.client.post("/api/bookings",
            json={"event_id": "one"},
            catch_response=True
        ) as resp:
            self._expect(resp, [422])

    @tag("edge")
    @task
    def malformed_json(self):
        """Send garbage data."""
        with self.client.post("/api/events",
            data="not json at all",
            catch_response=True
        ) as resp:
            self._expect(resp, [400, 422])

    @tag("edge")
    @task
    def unknown_payment_order(self):
        """Payment callbacks for unknown orders are acknowledged."""
        with self.client.get("/api/payments/success?orderId=999999",
            catch_response=True
        ) as resp:
            self._expect(resp, [200])


class RealisticUser(HttpUser):
    """
    TEST 4: Realistic mixed workload

    Run: locust -f locustfile.py -u 200 -r 20 --run-time 120s

    Simulates real traffic:
      - Mostly browsing
      - Some full purchases (book, select, pay)
      - Rare event creation
    """
    wait_time = between(1, 3)

    @task(50)
    def browse_events(self):
        """Most common: browsing."""
        resp = self.client.get("/api/events?page=1&pageSize=20")
        if resp.status_code == 200:
            for event in resp.json():
                if event["id"] not in EVENT_IDS:
                    EVENT_IDS.append(event["id"])

    @task(10)
    def buy_ticket(self):
        """Book, pick a free seat, pay, and report the payment outcome."""
        if not EVENT_IDS:
            return
        event_id = random.choice(EVENT_IDS)

        resp = self.client.post("/api/bookings", json={"event_id": event_id})
        if resp.status_code != 201:
            return
        booking_id = resp.json()["id"]

        resp = self.client.get(f"/api/seats?event_id={event_id}&page={random.randint(1, 50)}&pageSize=20",
            name="/api/seats")
        seats = resp.json() if resp.status_code == 200 else []
        free = [s["id"] for s in seats if s["status"] == "FREE"]
        if not free:
            return

        with self.client.patch("/api/seats/select",
            json={"booking_id": booking_id, "seat_id": random.choice(free)},
            catch_response=True
        ) as resp:
            if resp.status_code == 409:
                resp.success()  # Lost the seat to another buyer
                return

        self.client.patch("/api/bookings/initiatePayment",
            json={"booking_id": booking_id},
            allow_redirects=False)

        outcome = "success" if random.random() < 0.8 else "fail"
        self.client.get(f"/api/payments/{outcome}?orderId={booking_id}",
            name=f"/api/payments/{outcome}")

    @task(3)
    def create_event(self):
        """Rare: create new event."""
        resp = self.client.post("/api/events", json={
            "title": random_title(),
            "external": random.random() < 0.1,
        })
        if resp.status_code == 201:
            EVENT_IDS.append(resp.json()["id"])
