from django.urls import path

from .api import TrackVisitorAPI

urlpatterns = [
    path("", TrackVisitorAPI.as_view(), name="track_visitor"),
]
