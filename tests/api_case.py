"""
Shared fixture for the HTTP tests: the app wired to an in-memory mongomock
database through the get_db dependency.
"""
import unittest

import mongomock
from fastapi.testclient import TestClient

from database import ensure_indexes, get_db
from main import app


class ApiTestCase(unittest.TestCase):
    def setUp(self):
        self.db = mongomock.MongoClient()["travel_journal_test"]
        ensure_indexes(self.db)
        app.dependency_overrides[get_db] = lambda: self.db
        self.client = TestClient(app)

    def tearDown(self):
        app.dependency_overrides.pop(get_db, None)

    # ---------------------- helpers ----------------------
    def signup(self, username, password="secret123"):
        res = self.client.post("/auth/signup", json={
            "username": username,
            "email": f"{username}@example.com",
            "password": password,
        })
        self.assertEqual(res.status_code, 201, res.text)
        body = res.json()
        return body["user_id"], {"Authorization": f"Bearer {body['token']}"}

    def create_trip(self, headers, **overrides):
        payload = {
            "title": "Coastal Portugal",
            "description": "Two weeks along the Atlantic",
            "destination": "Lisbon, Portugal",
            "start_date": "2024-05-01T00:00:00",
            "end_date": "2024-05-14T00:00:00",
            "privacy": "public",
            "tags": ["beach", "food"],
        }
        payload.update(overrides)
        res = self.client.post("/trips", json=payload, headers=headers)
        self.assertEqual(res.status_code, 201, res.text)
        return res.json()

    def create_entry(self, headers, trip_id, **overrides):
        payload = {
            "trip_id": trip_id,
            "title": "Day one",
            "content": "Pasteis de nata at Belem.",
            "location": "Belem",
            "mood": "happy",
            "personal_tags": ["food"],
        }
        payload.update(overrides)
        res = self.client.post("/entries", json=payload, headers=headers)
        self.assertEqual(res.status_code, 201, res.text)
        return res.json()

    def add_comment(self, headers, entry_id, content="Looks great!", reply_to=None):
        payload = {"content": content}
        if reply_to:
            payload["reply_to"] = reply_to
        return self.client.post(f"/entries/{entry_id}/comment", json=payload, headers=headers)
