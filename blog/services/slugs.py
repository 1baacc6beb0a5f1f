"""Slug generation for posts.

Slugs keep non-Latin scripts (Bangla titles stay readable) and fall back to
progressively blunter forms so a slug is never empty. Uniqueness is probed
against the store, but the unique constraint on ``Post.slug`` is what
actually decides: :func:`save_with_unique_slug` re-runs the probe when an
insert loses a race.
"""

from __future__ import annotations

import logging
import re
import time
import unicodedata
from typing import Callable, Optional

from django.conf import settings
from django.db import IntegrityError, transaction

from ngo_platform.exceptions import Conflict

from ..models import Post

logger = logging.getLogger(__name__)

SlugCheck = Callable[[str], bool]

_SEPARATORS = re.compile(r"[\s\-]+")
_WHITESPACE = re.compile(r"\s+")
_UNSAFE_PATH_CHARS = re.compile(r"[/\\?#%]")
# Letters, combining marks and digits of any script.
_KEPT_CATEGORIES = ("L", "M", "N")
# Leaves room for a "-<n>" suffix inside Post.slug max_length.
MAX_BASE_LENGTH = 240


def normalize_title(title: str) -> str:
    """Lowercase, script-preserving slug body; empty if nothing usable remains."""

    text = unicodedata.normalize("NFKC", title or "").lower()
    kept = "".join(
        ch for ch in text
        if ch in "-_" or ch.isspace() or unicodedata.category(ch)[0] in _KEPT_CATEGORIES
    )
    return _SEPARATORS.sub("-", kept).strip("-_")


def _raw_fallback(title: str) -> str:
    text = _WHITESPACE.sub("-", (title or "").strip())
    return _UNSAFE_PATH_CHARS.sub("", text)


def _time_token() -> str:
    return f"post-{time.time_ns() // 1_000_000}"


def _clip(slug: str) -> str:
    if len(slug) <= MAX_BASE_LENGTH:
        return slug
    return slug[:MAX_BASE_LENGTH].rstrip("-_")


def base_slug(title: str) -> str:
    # NFKC can expand one character into many, so a valid title may still overflow.
    return _clip(normalize_title(title)) or _clip(_raw_fallback(title)) or _time_token()


def generate_slug(title: str, is_taken: SlugCheck) -> str:
    """First free candidate out of ``base``, ``base-1``, ``base-2``, ..."""

    base = base_slug(title)
    candidate = base
    suffix = 1
    while is_taken(candidate):
        candidate = f"{base}-{suffix}"
        suffix += 1
    return candidate


def slug_taken_for(post: Optional[Post] = None) -> SlugCheck:
    """Store-backed check; a saved post never collides with itself."""

    def is_taken(candidate: str) -> bool:
        qs = Post.objects.filter(slug=candidate)
        if post is not None and post.pk:
            qs = qs.exclude(pk=post.pk)
        return qs.exists()

    return is_taken


def save_with_unique_slug(post: Post, *, attempts: Optional[int] = None) -> Post:
    """
    Assign a fresh slug from ``post.title`` and save. A unique-constraint
    violation on the slug means another writer took it between the probe and
    the insert, so the probe runs again.
    """
    attempts = attempts or settings.SLUG_SAVE_ATTEMPTS
    for attempt in range(1, attempts + 1):
        post.slug = generate_slug(post.title, slug_taken_for(post))
        try:
            with transaction.atomic():
                post.save()
            return post
        except IntegrityError:
            if not Post.objects.filter(slug=post.slug).exclude(pk=post.pk).exists():
                raise
            logger.warning("Slug %r was taken concurrently (attempt %d/%d)", post.slug, attempt, attempts)
    raise Conflict("Title or slug already exists")
