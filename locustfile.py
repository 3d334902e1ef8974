import random
from datetime import datetime, timedelta, timezone

from locust import HttpUser, between, task


class BookingUser(HttpUser):
    # Wait between 1 and 3 seconds between tasks
    wait_time = between(1, 3)

    def on_start(self):
        self.user_id = random.randint(1, 10_000)

    def _payload(self) -> dict:
        # Spread windows so most requests do not collide on the same car.
        start = datetime.now(timezone.utc) + timedelta(days=random.randint(1, 365))
        return {
            "user_id": self.user_id,
            "car_id": random.randint(1, 3),
            "start_date": start.isoformat(),
            "end_date": (start + timedelta(days=random.randint(1, 5))).isoformat(),
            "delivery_type": "pickup",
        }

    @task(3)
    def create_booking(self):
        with self.client.post(
            "/api/v1/bookings",
            json=self._payload(),
            name="/api/v1/bookings",
            catch_response=True,
        ) as response:
            # 409 is the expected answer when two users race for the same car.
            if response.status_code in (201, 409):
                response.success()

    @task(1)
    def check_availability(self):
        payload = self._payload()
        self.client.post(
            "/api/v1/availability",
            json={
                "car_id": payload["car_id"],
                "start_date": payload["start_date"],
                "end_date": payload["end_date"],
            },
            name="/api/v1/availability",
        )
