"""Query-string helpers for the paginated list endpoints."""

from __future__ import annotations

import calendar
from datetime import datetime
from typing import Optional, Tuple

from django.utils import timezone

MAX_PAGE_SIZE = 100


def _int_or_default(value: Optional[str], default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def page_window(query_params, *, default_limit: int = 9) -> Tuple[int, int]:
    """Return ``(start, stop)`` slice bounds from ``startIndex`` and ``limit``."""

    start = max(0, _int_or_default(query_params.get("startIndex"), 0))
    limit = _int_or_default(query_params.get("limit"), default_limit)
    if limit <= 0:
        limit = default_limit
    limit = min(limit, MAX_PAGE_SIZE)
    return start, start + limit


def ordering(query_params, field: str, *, param: str = "sort") -> str:
    """Descending unless the caller asked for ``asc``."""

    return field if query_params.get(param) == "asc" else f"-{field}"


def one_month_ago(now: Optional[datetime] = None) -> datetime:
    """Same day in the previous calendar month, clamped to that month's length."""

    now = now or timezone.now()
    year, month = (now.year, now.month - 1) if now.month > 1 else (now.year - 1, 12)
    day = min(now.day, calendar.monthrange(year, month)[1])
    return now.replace(year=year, month=month, day=day)
