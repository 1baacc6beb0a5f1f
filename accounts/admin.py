from django.contrib import admin
from django.contrib.auth.admin import UserAdmin

from .models import User


@admin.register(User)
class PlatformUserAdmin(UserAdmin):
    list_display = ("username", "email", "is_admin", "auth_provider", "created_at")
    list_filter = ("is_admin", "auth_provider", "is_staff")
    fieldsets = UserAdmin.fieldsets + (
        ("Platform", {"fields": ("is_admin", "auth_provider", "profile_picture")}),
    )
