from django.urls import path

from . import api

auth_urlpatterns = [
    path("signup/", api.SignupAPI.as_view(), name="signup"),
    path("signin/", api.SigninAPI.as_view(), name="signin"),
    path("google/", api.GoogleAuthAPI.as_view(), name="google_auth"),
]

user_urlpatterns = [
    path("test/", api.HealthAPI.as_view(), name="api_health"),
    path("getusers/", api.UserListAPI.as_view(), name="user_list"),
    path("update/<int:user_id>/", api.UserUpdateAPI.as_view(), name="user_update"),
    path("delete/<int:user_id>/", api.UserDeleteAPI.as_view(), name="user_delete"),
    path("signout/", api.SignoutAPI.as_view(), name="signout"),
    path("upload/profile-picture/", api.ProfilePictureUploadAPI.as_view(), name="profile_picture_upload"),
    path("<int:user_id>/", api.UserDetailAPI.as_view(), name="user_detail"),
]
