from unittest import mock

from django.db import DatabaseError
from django.test import TestCase
from rest_framework.test import APIClient

from visitors.models import Visitor


class TrackVisitorAPITests(TestCase):
    def setUp(self) -> None:
        self.client = APIClient()

    def test_first_visit_creates_visitor(self) -> None:
        resp = self.client.get("/api/visitor/", HTTP_USER_AGENT="Firefox", REMOTE_ADDR="10.0.0.1")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json(), {"totalVisits": 1, "uniqueVisitors": 1})
        self.assertTrue(Visitor.objects.filter(ip="10.0.0.1", user_agent="Firefox").exists())

    def test_repeat_visit_increments_counter(self) -> None:
        for _ in range(3):
            resp = self.client.get("/api/visitor/", HTTP_USER_AGENT="Firefox", REMOTE_ADDR="10.0.0.1")
        self.assertEqual(resp.json(), {"totalVisits": 3, "uniqueVisitors": 1})
        self.assertEqual(Visitor.objects.get().visits, 3)

    def test_forwarded_for_first_hop_wins(self) -> None:
        self.client.get(
            "/api/visitor/",
            HTTP_X_FORWARDED_FOR="203.0.113.5, 10.0.0.2",
            HTTP_USER_AGENT="Safari",
            REMOTE_ADDR="10.0.0.2",
        )
        resp = self.client.get("/api/visitor/", HTTP_USER_AGENT="Chrome", REMOTE_ADDR="10.0.0.9")
        self.assertEqual(resp.json(), {"totalVisits": 2, "uniqueVisitors": 2})
        self.assertTrue(Visitor.objects.filter(ip="203.0.113.5", user_agent="Safari").exists())

    def test_database_failure_returns_500(self) -> None:
        with mock.patch("visitors.api.track_visit", side_effect=DatabaseError("down")):
            resp = self.client.get("/api/visitor/")
        self.assertEqual(resp.status_code, 500)
        self.assertEqual(resp.json(), {"message": "Visitor tracking failed"})
