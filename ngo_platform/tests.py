from datetime import datetime, timezone
from io import StringIO

from django.core.management import call_command
from django.http import QueryDict
from django.test import SimpleTestCase, TestCase

from ngo_platform.pagination import MAX_PAGE_SIZE, one_month_ago, ordering, page_window


class PageWindowTests(SimpleTestCase):
    def test_defaults(self) -> None:
        self.assertEqual(page_window(QueryDict("")), (0, 9))

    def test_explicit_window(self) -> None:
        self.assertEqual(page_window(QueryDict("startIndex=9&limit=3")), (9, 12))

    def test_garbage_and_caps(self) -> None:
        self.assertEqual(page_window(QueryDict("startIndex=-4&limit=abc")), (0, 9))
        self.assertEqual(page_window(QueryDict("limit=100000")), (0, MAX_PAGE_SIZE))


class OrderingTests(SimpleTestCase):
    def test_direction(self) -> None:
        self.assertEqual(ordering(QueryDict("sort=asc"), "created_at"), "created_at")
        self.assertEqual(ordering(QueryDict(""), "created_at"), "-created_at")
        self.assertEqual(ordering(QueryDict("order=asc"), "updated_at", param="order"), "updated_at")


class OneMonthAgoTests(SimpleTestCase):
    def test_clamps_to_month_length(self) -> None:
        now = datetime(2026, 3, 31, 12, 0, tzinfo=timezone.utc)
        self.assertEqual(one_month_ago(now), datetime(2026, 2, 28, 12, 0, tzinfo=timezone.utc))

    def test_january_wraps_year(self) -> None:
        now = datetime(2026, 1, 15, tzinfo=timezone.utc)
        self.assertEqual(one_month_ago(now), datetime(2025, 12, 15, tzinfo=timezone.utc))


class MigrationsInSyncTests(TestCase):
    def test_models_match_migrations(self) -> None:
        out = StringIO()
        try:
            call_command("makemigrations", "--check", "--dry-run", stdout=out, stderr=out)
        except SystemExit:
            self.fail(f"Models have changes without migrations:\n{out.getvalue()}")
