from django.contrib import admin

from .models import NgoApplication


@admin.register(NgoApplication)
class NgoApplicationAdmin(admin.ModelAdmin):
    list_display = ("ngo_id", "name", "email", "status", "created_at")
    list_filter = ("status",)
    search_fields = ("ngo_id", "name", "email", "phone")
    readonly_fields = ("ngo_id",)
