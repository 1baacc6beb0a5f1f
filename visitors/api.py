import logging

from django.db import DatabaseError
from rest_framework import status, views
from rest_framework.response import Response

from .services import client_ip, track_visit

logger = logging.getLogger(__name__)


class TrackVisitorAPI(views.APIView):
    authentication_classes = []

    def get(self, request, *args, **kwargs):
        try:
            stats = track_visit(client_ip(request), request.META.get("HTTP_USER_AGENT", ""))
        except DatabaseError:
            logger.exception("Visitor tracking failed")
            return Response(
                {"message": "Visitor tracking failed"},
                status=status.HTTP_500_INTERNAL_SERVER_ERROR,
            )
        return Response(stats)
