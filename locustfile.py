from locust import HttpUser, task, between, events
import random
import os
import requests
from datetime import datetime, timezone

ROSTER_SIZE = int(os.getenv("LOCUST_ROSTER_SIZE", "200"))
BADGE_IDS = []


@events.test_start.add_listener
def on_test_start(environment, **kwargs):
    from dotenv import load_dotenv
    load_dotenv()

    base_url = environment.host or os.getenv("LOCUST_HOST")

    print(f"Seeding a roster of {ROSTER_SIZE} badges...")
    response = requests.post(
        f"{base_url}/api/v1/attendees/bulk",
        json=[
            {"name": f"Load Test {i}", "title": "Delegate", "district": "North", "region": "R1"}
            for i in range(ROSTER_SIZE)
        ],
    )
    if response.status_code != 201:
        raise RuntimeError(f"Failed to seed roster: {response.status_code} {response.text}")

    BADGE_IDS.extend(row["id"] for row in response.json())


class ScannerDevice(HttpUser):
    """A door scanner. Several devices see the same badges, so duplicates are common."""

    wait_time = between(0.2, 1)

    def on_start(self):
        self.device_id = f"scanner-{random.randint(1000, 9999)}"

    @task(5)
    def scan_badge(self):
        if not BADGE_IDS:
            return

        with self.client.post(
            "/api/v1/checkin",
            json={
                "id": random.choice(BADGE_IDS),
                "scanTime": datetime.now(timezone.utc).isoformat(),
            },
            headers={"X-Scanner-ID": self.device_id},
            name="POST /api/v1/checkin",
            catch_response=True
        ) as checkin_response:
            # 409 is the expected answer for a badge that was already scanned
            if checkin_response.status_code not in (200, 409):
                checkin_response.failure(
                    f"Check-in failed: {checkin_response.status_code} {checkin_response.text}"
                )
            else:
                checkin_response.success()

    @task(1)
    def scan_unknown_badge(self):
        with self.client.post(
            "/api/v1/checkin",
            json={"id": f"unregistered-{random.randint(1, 10**6)}"},
            name="POST /api/v1/checkin (unknown)",
            catch_response=True
        ) as checkin_response:
            if checkin_response.status_code != 404:
                checkin_response.failure(f"Expected 404, got {checkin_response.status_code}")
            else:
                checkin_response.success()

    @task(1)
    def view_summary(self):
        self.client.get("/api/v1/attendees/summary", name="GET /api/v1/attendees/summary")
