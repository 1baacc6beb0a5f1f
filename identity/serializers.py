from rest_framework import serializers

from accounts.serializers import normalize_email

from .models import NgoApplication

REQUIRED = {"required": "All fields are required", "blank": "All fields are required"}


class ApplySerializer(serializers.Serializer):
    name = serializers.CharField(max_length=120, error_messages=REQUIRED)
    address = serializers.CharField(max_length=255, error_messages=REQUIRED)
    phone = serializers.CharField(max_length=32, error_messages=REQUIRED)
    email = serializers.CharField(error_messages=REQUIRED)
    bloodGroup = serializers.CharField(source="blood_group", max_length=8, error_messages=REQUIRED)
    joiningDate = serializers.CharField(source="joining_date", max_length=32, error_messages=REQUIRED)
    photoBase64 = serializers.CharField(source="photo_base64", error_messages=REQUIRED)

    def validate_email(self, value):
        try:
            return normalize_email(value)
        except serializers.ValidationError:
            raise serializers.ValidationError("Invalid email format")


class ApplicationSerializer(serializers.ModelSerializer):
    bloodGroup = serializers.CharField(source="blood_group")
    joiningDate = serializers.CharField(source="joining_date")
    photoUrl = serializers.CharField(source="photo_url")
    ngoId = serializers.CharField(source="ngo_id")
    imageUrl = serializers.CharField(source="image_url")
    createdAt = serializers.DateTimeField(source="created_at")
    updatedAt = serializers.DateTimeField(source="updated_at")

    class Meta:
        model = NgoApplication
        fields = [
            "id",
            "name",
            "address",
            "phone",
            "email",
            "bloodGroup",
            "joiningDate",
            "photoUrl",
            "ngoId",
            "imageUrl",
            "status",
            "createdAt",
            "updatedAt",
        ]
        read_only_fields = fields
