from django.contrib.auth.models import AbstractUser
from django.db import models

DEFAULT_PROFILE_PICTURE = (
    "https://cdn.pixabay.com/photo/2015/10/05/22/37/blank-profile-picture-973460_960_720.png"
)


class User(AbstractUser):
    class AuthProvider(models.TextChoices):
        LOCAL = "local", "Local"
        GOOGLE = "google", "Google"

    email = models.EmailField(unique=True)
    profile_picture = models.URLField(max_length=500, default=DEFAULT_PROFILE_PICTURE)
    is_admin = models.BooleanField(default=False, db_index=True)
    auth_provider = models.CharField(
        max_length=10,
        choices=AuthProvider.choices,
        default=AuthProvider.LOCAL,
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta(AbstractUser.Meta):
        ordering = ["-created_at"]

    @property
    def is_google_account(self):
        return self.auth_provider == self.AuthProvider.GOOGLE

    def __str__(self):
        return self.username
