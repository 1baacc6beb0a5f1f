import logging
from typing import Dict

from django.db import IntegrityError, transaction
from django.db.models import F, Sum

from .models import Visitor

logger = logging.getLogger(__name__)

MAX_USER_AGENT_LENGTH = 512


def client_ip(request) -> str:
    """First hop of ``X-Forwarded-For``, else the socket address."""
    forwarded = request.META.get("HTTP_X_FORWARDED_FOR", "")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    return request.META.get("REMOTE_ADDR", "") or "unknown"


def track_visit(ip: str, user_agent: str) -> Dict[str, int]:
    user_agent = (user_agent or "")[:MAX_USER_AGENT_LENGTH]
    try:
        with transaction.atomic():
            _, created = Visitor.objects.get_or_create(ip=ip, user_agent=user_agent)
    except IntegrityError:
        # Another request inserted the same visitor first.
        created = False
    if not created:
        Visitor.objects.filter(ip=ip, user_agent=user_agent).update(visits=F("visits") + 1)

    totals = Visitor.objects.aggregate(total=Sum("visits"))
    return {
        "totalVisits": totals["total"] or 0,
        "uniqueVisitors": Visitor.objects.count(),
    }
