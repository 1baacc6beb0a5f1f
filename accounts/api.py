from __future__ import annotations

from django.contrib.auth import login, logout
from rest_framework import permissions, status, views
from rest_framework.response import Response

from assets import hosting
from blog.services import delete_author
from ngo_platform.exceptions import Forbidden, NotFound, ValidationError
from ngo_platform.pagination import one_month_ago, ordering, page_window

from .models import User
from .permissions import IsAdminAuthor
from .serializers import (
    GoogleAuthSerializer,
    SigninSerializer,
    SignupSerializer,
    UserSerializer,
    UserUpdateSerializer,
)
from .services import (
    create_local_user,
    google_sign_in,
    issue_token,
    replace_profile_picture,
    revoke_tokens,
    update_user,
)


def _session_payload(request, user: User) -> dict:
    login(request, user, backend="django.contrib.auth.backends.ModelBackend")
    return {**UserSerializer(user).data, "token": issue_token(user)}


# ---------------------- Auth ----------------------

class SignupAPI(views.APIView):
    authentication_classes = []

    def post(self, request, *args, **kwargs):
        ser = SignupSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        create_local_user(**ser.validated_data)
        return Response("Signup successful", status=status.HTTP_201_CREATED)


class SigninAPI(views.APIView):
    authentication_classes = []

    def post(self, request, *args, **kwargs):
        ser = SigninSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        data = ser.validated_data

        user = User.objects.filter(email=data["email"]).first()
        if user is None:
            raise NotFound("User not found")
        if not user.check_password(data["password"]):
            raise ValidationError("Invalid password")
        return Response(_session_payload(request, user))


class GoogleAuthAPI(views.APIView):
    authentication_classes = []

    def post(self, request, *args, **kwargs):
        ser = GoogleAuthSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        user, created = google_sign_in(**ser.validated_data)
        return Response(
            _session_payload(request, user),
            status=status.HTTP_201_CREATED if created else status.HTTP_200_OK,
        )


class SignoutAPI(views.APIView):
    def post(self, request, *args, **kwargs):
        if request.user.is_authenticated:
            revoke_tokens(request.user)
        logout(request)
        return Response("User has been signed out")


# ---------------------- Users ----------------------

class HealthAPI(views.APIView):
    def get(self, request, *args, **kwargs):
        return Response({"message": "API is working!"})


class UserListAPI(views.APIView):
    permission_classes = [IsAdminAuthor]

    def get(self, request, *args, **kwargs):
        params = request.query_params
        start, stop = page_window(params)
        users = User.objects.order_by(ordering(params, "created_at"))[start:stop]
        return Response(
            {
                "users": UserSerializer(users, many=True).data,
                "totalUsers": User.objects.count(),
                "lastMonthUsers": User.objects.filter(created_at__gte=one_month_ago()).count(),
            }
        )


class UserDetailAPI(views.APIView):
    def get(self, request, user_id: int, *args, **kwargs):
        user = User.objects.filter(pk=user_id).first()
        if user is None:
            raise NotFound("User not found")
        return Response(UserSerializer(user).data)


class UserUpdateAPI(views.APIView):
    permission_classes = [permissions.IsAuthenticated]

    def put(self, request, user_id: int, *args, **kwargs):
        if request.user.pk != user_id:
            raise Forbidden("You are not allowed to update this user")
        ser = UserUpdateSerializer(data=request.data, partial=True)
        ser.is_valid(raise_exception=True)
        user = update_user(request.user, dict(ser.validated_data))
        return Response(UserSerializer(user).data)


class UserDeleteAPI(views.APIView):
    permission_classes = [permissions.IsAuthenticated]

    def delete(self, request, user_id: int, *args, **kwargs):
        report = delete_author(request.user, user_id)
        return Response({"message": "User has been deleted", **report.as_dict()})


class ProfilePictureUploadAPI(views.APIView):
    permission_classes = [permissions.IsAuthenticated]

    def post(self, request, *args, **kwargs):
        data = hosting.read_image_upload(request.FILES.get("image"))
        url = replace_profile_picture(request.user, data)
        return Response({"url": url, "message": "Profile picture updated successfully"})
