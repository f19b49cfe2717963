"""
Load Testing Scripts

Locust load tests for ManoSetu session endpoints.
Concentrates bookings on a few therapists to exercise conflict
detection under concurrency.

USAGE:
    MANOSETU_LOAD_CLIENT_TOKENS=tok1,tok2 \
    MANOSETU_LOAD_THERAPIST_IDS=uuid1,uuid2 \
    locust -f tests/load/locustfile.py --host=http://localhost:8000
"""

import os
import random
from datetime import datetime, timedelta, timezone

from locust import between, events, task
from locust.contrib.fasthttp import FastHttpUser

CLIENT_TOKENS = [t for t in os.environ.get("MANOSETU_LOAD_CLIENT_TOKENS", "").split(",") if t]
THERAPIST_IDS = [t for t in os.environ.get("MANOSETU_LOAD_THERAPIST_IDS", "").split(",") if t]


class ManoSetuClientUser(FastHttpUser):
    """
    Simulated client booking and attending sessions.
    
    Conflicts (400) are an expected outcome, not a failure.
    """
    
    wait_time = between(1, 5)  # Wait 1-5 seconds between tasks
    
    def on_start(self):
        """Setup for each simulated user."""
        self.headers = {"Authorization": f"Bearer {random.choice(CLIENT_TOKENS)}"} if CLIENT_TOKENS else {}
        self.session_ids: list[str] = []
    
    @task(5)
    def health_check(self):
        """Liveness check."""
        with self.client.get("/api/v1/health/live", catch_response=True) as response:
            if response.status_code == 200:
                response.success()
            else:
                response.failure(f"Health check failed: {response.status_code}")
    
    @task(10)
    def schedule_session(self):
        """Book an hour in a narrow window so requests collide."""
        if not THERAPIST_IDS:
            return
        
        start = datetime(2030, 1, 7, 9, tzinfo=timezone.utc) + timedelta(minutes=30 * random.randint(0, 16))
        payload = {
            "therapistId": random.choice(THERAPIST_IDS),
            "startTime": start.isoformat(),
            "endTime": (start + timedelta(hours=1)).isoformat(),
            "durationMinutes": 60,
        }
        
        with self.client.post(
            "/api/v1/session/schedule",
            json=payload,
            headers=self.headers,
            name="/api/v1/session/schedule",
            catch_response=True,
        ) as response:
            if response.status_code == 201:
                self.session_ids.append(response.json()["session"]["id"])
                response.success()
            elif response.status_code == 400:
                response.success()
            elif response.status_code == 429:
                response.failure("Rate limited")
            else:
                response.failure(f"Failed: {response.status_code}")
    
    @task(4)
    def my_sessions(self):
        self.client.get("/api/v1/session/my-sessions", headers=self.headers)
    
    @task(2)
    def attend_session(self):
        """Start a booked session and fetch a video credential."""
        if not self.session_ids:
            return
        
        session_id = self.session_ids.pop()
        self.client.post(
            f"/api/v1/session/{session_id}/start",
            headers=self.headers,
            name="/api/v1/session/[id]/start",
        )
        self.client.get(
            f"/api/v1/session/{session_id}/token",
            headers=self.headers,
            name="/api/v1/session/[id]/token",
        )


@events.test_start.add_listener
def on_test_start(environment, **kwargs):
    """Log test start."""
    print("Load test starting...")
    if not CLIENT_TOKENS or not THERAPIST_IDS:
        print("No tokens/therapists configured, only health checks will run")


@events.test_stop.add_listener  
def on_test_stop(environment, **kwargs):
    """Log test completion."""
    print("Load test complete.")
    print(f"Total requests: {environment.stats.total.num_requests}")
    print(f"Failures: {environment.stats.total.num_failures}")
    print(f"Avg response time: {environment.stats.total.avg_response_time:.2f}ms")
