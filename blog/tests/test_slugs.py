from __future__ import annotations

import re
from unittest import mock

from django.contrib.auth import get_user_model
from django.test import SimpleTestCase, TestCase

from blog.models import Post
from blog.services import slugs
from blog.services.slugs import base_slug, generate_slug, normalize_title, save_with_unique_slug
from ngo_platform.exceptions import Conflict


class NormalizeTitleTests(SimpleTestCase):
    def test_latin_title(self) -> None:
        self.assertEqual(normalize_title("Hello World"), "hello-world")

    def test_punctuation_and_runs_collapse(self) -> None:
        self.assertEqual(normalize_title("  Relief -- Camp / 2024?! "), "relief-camp-2024")

    def test_bangla_script_is_kept(self) -> None:
        self.assertEqual(normalize_title("বন্যা ত্রাণ"), "বন্যা-ত্রাণ")

    def test_compatibility_forms_fold(self) -> None:
        self.assertEqual(normalize_title("Ｆｏｏ Ｂａｒ"), "foo-bar")


class BaseSlugTests(SimpleTestCase):
    def test_symbols_only_fall_back_to_raw_title(self) -> None:
        self.assertEqual(base_slug("!!! ***"), "!!!-***")

    def test_empty_title_gets_time_token(self) -> None:
        for title in ("", "   ", "???"):
            with self.subTest(title=title):
                self.assertRegex(base_slug(title), r"^post-\d+$")

    def test_non_empty_title_never_yields_empty_slug(self) -> None:
        for title in ("a", "Hello", "…", "%%%", "১২৩"):
            with self.subTest(title=title):
                self.assertTrue(base_slug(title))

    def test_expanding_characters_stay_within_column(self) -> None:
        slug = base_slug("\ufdfa" * 200)
        self.assertLessEqual(len(slug), 240)
        self.assertFalse(slug.endswith("-"))


class GenerateSlugTests(SimpleTestCase):
    def test_free_base_is_used(self) -> None:
        self.assertEqual(generate_slug("Hello World", lambda slug: False), "hello-world")

    def test_suffix_counts_up_until_free(self) -> None:
        taken = {"hello-world", "hello-world-1"}
        self.assertEqual(generate_slug("Hello World", taken.__contains__), "hello-world-2")

    def test_time_token_shape(self) -> None:
        self.assertTrue(re.fullmatch(r"post-\d{13,}", generate_slug("", lambda slug: False)))


class SaveWithUniqueSlugTests(TestCase):
    def setUp(self) -> None:
        self.author = get_user_model().objects.create_user(
            username="adminuser", email="admin@example.com", password="secret1", is_admin=True
        )

    def _post(self, title: str) -> Post:
        return Post(author=self.author, title=title, content="Body")

    def test_same_title_twice(self) -> None:
        first = save_with_unique_slug(self._post("Hello World"))
        second = save_with_unique_slug(self._post("Hello World"))
        self.assertEqual(first.slug, "hello-world")
        self.assertEqual(second.slug, "hello-world-1")

    def test_resave_keeps_own_slug(self) -> None:
        post = save_with_unique_slug(self._post("Hello World"))
        save_with_unique_slug(post)
        self.assertEqual(post.slug, "hello-world")

    def test_lost_race_is_retried(self) -> None:
        save_with_unique_slug(self._post("Hello World"))
        real = slugs.slug_taken_for
        calls = []

        def stale_then_real(post=None):
            calls.append(post)
            if len(calls) == 1:
                return lambda candidate: False
            return real(post)

        with mock.patch("blog.services.slugs.slug_taken_for", side_effect=stale_then_real):
            post = save_with_unique_slug(self._post("Hello World"))

        self.assertEqual(post.slug, "hello-world-1")
        self.assertEqual(len(calls), 2)

    def test_long_expanded_title_fits_slug_column(self) -> None:
        first = save_with_unique_slug(self._post("\ufdfa" * 200))
        second = save_with_unique_slug(self._post("\ufdfa" * 200))
        max_length = Post._meta.get_field("slug").max_length
        self.assertLessEqual(len(first.slug), max_length)
        self.assertLessEqual(len(second.slug), max_length)
        self.assertEqual(second.slug, f"{first.slug}-1")

    def test_gives_up_with_conflict(self) -> None:
        save_with_unique_slug(self._post("Hello World"))
        with mock.patch("blog.services.slugs.slug_taken_for", return_value=lambda candidate: False):
            with self.assertRaises(Conflict):
                save_with_unique_slug(self._post("Hello World"), attempts=2)
        self.assertEqual(Post.objects.count(), 1)
