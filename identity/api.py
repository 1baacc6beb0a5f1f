from __future__ import annotations

from rest_framework import exceptions, status, views
from rest_framework.response import Response

from accounts.permissions import IsAdminAuthor
from ngo_platform.exceptions import NotFound

from .models import NgoApplication
from .serializers import ApplicationSerializer, ApplySerializer
from .services import apply_for_id, delete_application, get_application, set_status


def _first_message(detail) -> str:
    if isinstance(detail, dict):
        detail = next(iter(detail.values()), "")
    if isinstance(detail, list):
        detail = detail[0] if detail else ""
    return str(detail)


class IdentityAPIView(views.APIView):
    """Responses carry ``success`` and errors a single ``message``."""

    def handle_exception(self, exc):
        response = super().handle_exception(exc)
        if isinstance(exc, exceptions.APIException):
            response.data = {"success": False, "message": _first_message(exc.detail)}
        return response


class ApplyAPI(IdentityAPIView):
    authentication_classes = []

    def post(self, request, *args, **kwargs):
        ser = ApplySerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        application, created = apply_for_id(ser.validated_data)
        return Response(
            {
                "success": True,
                "message": "Application submitted successfully" if created else "Application already exists",
                "ngoId": application.ngo_id,
                "imageUrl": application.image_url,
                "application": ApplicationSerializer(application).data,
                "alreadyExists": not created,
            },
            status=status.HTTP_201_CREATED if created else status.HTTP_200_OK,
        )


class CheckApplicationAPI(IdentityAPIView):
    authentication_classes = []

    def get(self, request, email: str, *args, **kwargs):
        application = NgoApplication.objects.filter(email=email.strip().lower()).first()
        if application is None:
            raise NotFound("No application found for this email")
        return Response({"success": True, "application": ApplicationSerializer(application).data})


class DownloadCardAPI(IdentityAPIView):
    authentication_classes = []

    def get(self, request, pk: int, *args, **kwargs):
        application = get_application(pk)
        if not application.image_url:
            raise NotFound("ID card image not available for this application")
        return Response(
            {
                "success": True,
                "imageUrl": application.image_url,
                "ngoId": application.ngo_id,
                "name": application.name,
            }
        )


# ---------------------- Admin ----------------------

class ApplicationListAPI(IdentityAPIView):
    permission_classes = [IsAdminAuthor]

    def get(self, request, *args, **kwargs):
        applications = NgoApplication.objects.order_by("-created_at")
        return Response(
            {
                "success": True,
                "count": applications.count(),
                "applications": ApplicationSerializer(applications, many=True).data,
            }
        )


class ApplicationDetailAPI(IdentityAPIView):
    permission_classes = [IsAdminAuthor]

    def get(self, request, pk: int, *args, **kwargs):
        application = get_application(pk)
        return Response(
            {
                "success": True,
                "application": {
                    "imageUrl": application.image_url,
                    "name": application.name,
                    "ngoId": application.ngo_id,
                },
            }
        )

    def delete(self, request, pk: int, *args, **kwargs):
        outcomes = delete_application(pk)
        return Response(
            {
                "success": True,
                "message": "Application deleted successfully",
                "assets": [outcome.as_dict() for outcome in outcomes],
            }
        )


class ApplicationStatusAPI(IdentityAPIView):
    permission_classes = [IsAdminAuthor]
    target_status: str
    message: str

    def put(self, request, pk: int, *args, **kwargs):
        application = set_status(pk, self.target_status)
        return Response(
            {
                "success": True,
                "message": self.message,
                "application": ApplicationSerializer(application).data,
            }
        )


class VerifyApplicationAPI(ApplicationStatusAPI):
    target_status = NgoApplication.Status.APPROVED
    message = "Application verified"


class RejectApplicationAPI(ApplicationStatusAPI):
    target_status = NgoApplication.Status.REJECTED
    message = "Application rejected"
