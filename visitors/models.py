from django.db import models


class Visitor(models.Model):
    ip = models.CharField(max_length=64)
    user_agent = models.CharField(max_length=512, blank=True, default="")
    visits = models.PositiveIntegerField(default=1)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["ip", "user_agent"], name="unique_visitor_ip_agent"),
        ]

    def __str__(self):
        return f"{self.ip} ({self.visits})"
