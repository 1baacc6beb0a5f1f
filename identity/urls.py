from django.urls import path

from . import api

urlpatterns = [
    path("apply/", api.ApplyAPI.as_view(), name="identity_apply"),
    path("check/<str:email>/", api.CheckApplicationAPI.as_view(), name="identity_check"),
    path("download/<int:pk>/", api.DownloadCardAPI.as_view(), name="identity_download"),
    path("admin/applications/", api.ApplicationListAPI.as_view(), name="identity_applications"),
    path("admin/application/<int:pk>/", api.ApplicationDetailAPI.as_view(), name="identity_application"),
    path("admin/application/<int:pk>/verify/", api.VerifyApplicationAPI.as_view(), name="identity_verify"),
    path("admin/application/<int:pk>/reject/", api.RejectApplicationAPI.as_view(), name="identity_reject"),
]
