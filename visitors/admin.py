from django.contrib import admin

from .models import Visitor


@admin.register(Visitor)
class VisitorAdmin(admin.ModelAdmin):
    list_display = ("ip", "user_agent", "visits", "updated_at")
    search_fields = ("ip", "user_agent")
