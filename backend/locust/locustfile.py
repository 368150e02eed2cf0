"""
Locust Load Test Suite

Run scenarios:
  locust -f locustfile.py --tags concurrency  # Test overselling
  locust -f locustfile.py --tags throughput   # Test summary cache
  locust -f locustfile.py --tags edge         # Test bad input
  locust -f locustfile.py                     # All tests
"""

import random
import threading

from locust import HttpUser, between, events, tag, task

# Shared state
LIMITED_STOCK = 10
SETUP_LOCK = threading.Lock()
SHARED = {
    "headers": None,
    "tour_id": None,
    "show_id": None,
    "poster_id": None,
    "closed_show_id": None,
}


def random_email():
    return f"load_{random.randint(100000, 999999)}@test.com"


def register(client) -> dict:
    """Create an account and return bearer headers, or {} on failure."""
    resp = client.post("/api/users", json={
        "name": "Load Tester",
        "email": random_email(),
        "password": "test1234",
    })
    if resp.status_code != 201:
        return {}
    return {"Authorization": f"Bearer {resp.json()['token']}"}


def ensure_fixture(client):
    """
    One shared tour with a show, a poster with LIMITED_STOCK units and a
    closed show for summary reads. Every simulated seller uses the same
    account so they all fight over the same stock row.
    """
    with SETUP_LOCK:
        if SHARED["poster_id"]:
            return

        headers = register(client)
        if not headers:
            return

        tour = client.post("/api/tours", json={
            "name": "Load Test Tour",
            "band_name": "The Benchmarks",
        }, headers=headers).json()

        show = client.post("/api/shows", json={
            "tour_id": tour["id"],
            "date": "2026-11-01",
            "venue": "Load Hall",
            "city": "Austin",
            "state": "TX",
        }, headers=headers).json()["show"]

        closed = client.post("/api/shows", json={
            "tour_id": tour["id"],
            "date": "2026-10-01",
            "venue": "Closed Hall",
            "city": "Austin",
            "state": "TX",
        }, headers=headers).json()["show"]
        client.post(f"/api/shows/{closed['id']}/close", headers=headers)

        poster = client.post("/api/inventory", json={
            "name": "Load Poster",
            "type": "hard",
            "price": "20.00",
            "quantity": LIMITED_STOCK,
            "tour_id": tour["id"],
        }, headers=headers).json()["inventory"]

        SHARED.update(
            headers=headers,
            tour_id=tour["id"],
            show_id=show["id"],
            poster_id=poster["id"],
            closed_show_id=closed["id"],
        )
        print(f"\n✓ Created poster {poster['id']} with {LIMITED_STOCK} units\n")


@events.test_start.add_listener
def on_test_start(environment, **kwargs):
    print("\n" + "=" * 60)
    print("SETUP: shared tour, show and limited-stock poster")
    print("=" * 60)


@events.test_stop.add_listener
def on_test_stop(environment, **kwargs):
    if SHARED["show_id"]:
        print(
            "\nVerify no oversell:\n"
            f"  SELECT SUM(quantity_sold) FROM sales WHERE show_id = {SHARED['show_id']};\n"
            f"Should be <= {LIMITED_STOCK}, and inventory.quantity should be >= 0\n"
        )


class ConcurrencyUser(HttpUser):
    """
    TEST 1: Concurrency - 100 sellers → 10 posters

    Run: locust -f locustfile.py --tags concurrency -u 100 -r 50 --run-time 30s
    """
    wait_time = between(0, 0.1)

    def on_start(self):
        ensure_fixture(self.client)

    @tag("concurrency")
    @task
    def sell_limited_stock(self):
        """All sellers ring up the same posters."""
        if not SHARED["poster_id"]:
            return

        with self.client.post("/api/sales",
            json={
                "inventory_id": SHARED["poster_id"],
                "show_id": SHARED["show_id"],
                "quantity_sold": 1,
                "total_amount": "20.00",
                "payment_method": random.choice(["cash", "card"]),
            },
            headers=SHARED["headers"],
            name="/api/sales [limited]",
            catch_response=True
        ) as resp:
            if resp.status_code == 201:
                resp.success()
            elif resp.status_code == 400:
                resp.success()  # Expected: sold out
            else:
                resp.failure(f"Unexpected: {resp.status_code}")


class ThroughputUser(HttpUser):
    """
    TEST 2: Throughput - summary cache effectiveness

    Run twice, with REDIS_ENABLED=true and false:
      locust -f locustfile.py --tags throughput -u 100 -r 20 --run-time 60s
    """
    wait_time = between(0.1, 0.5)

    def on_start(self):
        ensure_fixture(self.client)

    @tag("throughput", "read")
    @task(10)
    def read_summary(self):
        if SHARED["closed_show_id"]:
            self.client.get(f"/api/shows/{SHARED['closed_show_id']}/summary",
                headers=SHARED["headers"],
                name="/api/shows/{id}/summary [cached]")

    @tag("throughput", "read")
    @task(3)
    def list_inventory(self):
        if SHARED["tour_id"]:
            self.client.get(f"/api/inventory?tour_id={SHARED['tour_id']}",
                headers=SHARED["headers"],
                name="/api/inventory")

    @tag("throughput")
    @task(1)
    def health_check(self):
        self.client.get("/health")


class EdgeCaseUser(HttpUser):
    """
    TEST 3: Edge cases - bad input handling

    Run: locust -f locustfile.py --tags edge -u 20 -r 5 --run-time 30s
    """
    wait_time = between(0.5, 1.5)

    def on_start(self):
        self.headers = register(self.client)

    def _expect(self, resp, codes):
        if resp.status_code in codes:
            resp.success()
        else:
            resp.failure(f"Expected {codes}, got {resp.status_code}")

    @tag("edge")
    @task
    def invalid_item(self):
        with self.client.post("/api/sales",
            json={"inventory_id": 999999, "show_id": 999999, "quantity_sold": 1,
                  "total_amount": "1.00", "payment_method": "cash"},
            headers=self.headers,
            catch_response=True
        ) as resp:
            self._expect(resp, [400, 404])

    @tag("edge")
    @task
    def zero_quantity(self):
        with self.client.post("/api/sales",
            json={"inventory_id": 1, "show_id": 1, "quantity_sold": 0,
                  "total_amount": "0", "payment_method": "cash"},
            headers=self.headers,
            catch_response=True
        ) as resp:
            self._expect(resp, [400, 422])

    @tag("edge")
    @task
    def bad_payment_method(self):
        with self.client.post("/api/sales",
            json={"inventory_id": 1, "show_id": 1, "quantity_sold": 1,
                  "total_amount": "1.00", "payment_method": "iou"},
            headers=self.headers,
            catch_response=True
        ) as resp:
            self._expect(resp, [422])

    @tag("edge")
    @task
    def malformed_json(self):
        with self.client.post("/api/sales",
            data="not json at all",
            headers=self.headers,
            catch_response=True
        ) as resp:
            self._expect(resp, [400, 422])

    @tag("edge")
    @task
    def missing_auth(self):
        with self.client.get("/api/tours", catch_response=True) as resp:
            self._expect(resp, [401])


class RealisticUser(HttpUser):
    """
    TEST 4: Realistic merch-table workload

    Run: locust -f locustfile.py -u 200 -r 20 --run-time 120s

    Each seller runs their own tour: mostly sales and stock checks,
    occasional restocks.
    """
    wait_time = between(1, 3)

    def on_start(self):
        self.headers = register(self.client)
        self.show_id = None
        self.items = []
        if not self.headers:
            return

        tour = self.client.post("/api/tours", json={
            "name": "My Tour", "band_name": "Local Band",
        }, headers=self.headers).json()
        self.tour_id = tour["id"]
        self.show_id = self.client.post("/api/shows", json={
            "tour_id": self.tour_id,
            "date": "2026-11-15",
            "venue": "Club",
            "city": "Denver",
            "state": "CO",
        }, headers=self.headers).json()["show"]["id"]

        poster = self.client.post("/api/inventory", json={
            "name": "Poster", "type": "hard", "price": "20.00",
            "quantity": 200, "tour_id": self.tour_id,
        }, headers=self.headers).json()["inventory"]
        shirt = self.client.post("/api/inventory", json={
            "name": "Shirt", "type": "soft", "price": "30.00", "tour_id": self.tour_id,
            "sizes": [{"size": s, "quantity": 100} for s in ("S", "M", "L")],
        }, headers=self.headers).json()["inventory"]
        self.items = [(poster["id"], None), (shirt["id"], "S"), (shirt["id"], "M"), (shirt["id"], "L")]

    @task(50)
    def sell(self):
        if not self.items:
            return
        item_id, size = random.choice(self.items)
        self.client.post("/api/sales", json={
            "inventory_id": item_id,
            "show_id": self.show_id,
            "quantity_sold": random.randint(1, 2),
            "total_amount": "25.00",
            "payment_method": random.choice(["cash", "card", "free"]),
            "size": size,
        }, headers=self.headers, name="/api/sales")

    @task(20)
    def check_stock(self):
        if self.show_id:
            self.client.get(f"/api/inventory?tour_id={self.tour_id}",
                headers=self.headers, name="/api/inventory")

    @task(10)
    def list_sales(self):
        if self.show_id:
            self.client.get(f"/api/sales?show_id={self.show_id}",
                headers=self.headers, name="/api/sales [list]")

    @task(3)
    def restock(self):
        if self.items:
            self.client.post("/api/inventory/update", json={
                "inventory_id": self.items[0][0],
                "new_quantity": 200,
            }, headers=self.headers)
