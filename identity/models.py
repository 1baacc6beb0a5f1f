from django.db import models


class NgoApplication(models.Model):
    class Status(models.TextChoices):
        PENDING = "pending", "Pending"
        APPROVED = "approved", "Approved"
        REJECTED = "rejected", "Rejected"

    name = models.CharField(max_length=120)
    address = models.CharField(max_length=255)
    phone = models.CharField(max_length=32)
    email = models.EmailField(unique=True)
    blood_group = models.CharField(max_length=8)
    joining_date = models.CharField(max_length=32)

    photo_url = models.URLField(max_length=500)
    ngo_id = models.CharField(max_length=20, unique=True)
    image_url = models.URLField(max_length=500, blank=True, default="")  # rendered ID card
    status = models.CharField(max_length=10, choices=Status.choices, default=Status.APPROVED)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]

    def save(self, *args, **kwargs):
        self.email = (self.email or "").strip().lower()
        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.ngo_id} - {self.name}"
