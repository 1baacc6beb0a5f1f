from __future__ import annotations

import re

from rest_framework import serializers

from .models import User

_USERNAME_CHARS = re.compile(r"^[a-z0-9]+$")
_EMAIL = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def validate_username_rules(value: str) -> str:
    if len(value) < 7 or len(value) > 20:
        raise serializers.ValidationError("Username must be between 7 and 20 characters")
    if " " in value:
        raise serializers.ValidationError("Username cannot contain spaces")
    if value != value.lower():
        raise serializers.ValidationError("Username must be lowercase")
    if not _USERNAME_CHARS.match(value):
        raise serializers.ValidationError("Username can only contain lowercase letters and numbers")
    return value


def normalize_email(value: str) -> str:
    value = (value or "").strip().lower()
    if not _EMAIL.match(value):
        raise serializers.ValidationError("Please provide a valid email")
    return value


def validate_password_length(value: str) -> str:
    if len(value) < 6:
        raise serializers.ValidationError("Password must be at least 6 characters")
    return value


class UserSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = [
            "id",
            "username",
            "email",
            "profile_picture",
            "is_admin",
            "auth_provider",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class SignupSerializer(serializers.Serializer):
    username = serializers.CharField(trim_whitespace=False)
    email = serializers.CharField()
    password = serializers.CharField(trim_whitespace=False, write_only=True)

    def validate_username(self, value: str) -> str:
        return validate_username_rules(value)

    def validate_email(self, value: str) -> str:
        return normalize_email(value)

    def validate_password(self, value: str) -> str:
        return validate_password_length(value)


class SigninSerializer(serializers.Serializer):
    email = serializers.CharField()
    password = serializers.CharField(trim_whitespace=False, write_only=True)

    def validate_email(self, value: str) -> str:
        return value.strip().lower()


class GoogleAuthSerializer(serializers.Serializer):
    email = serializers.CharField()
    name = serializers.CharField()
    googlePhotoUrl = serializers.URLField(
        source="photo_url", required=False, allow_blank=True, max_length=500
    )

    def validate_email(self, value: str) -> str:
        return normalize_email(value)


class UserUpdateSerializer(serializers.Serializer):
    username = serializers.CharField(required=False, trim_whitespace=False)
    email = serializers.CharField(required=False)
    password = serializers.CharField(required=False, trim_whitespace=False, write_only=True)
    profilePicture = serializers.URLField(source="profile_picture", required=False, max_length=500)

    def validate_username(self, value: str) -> str:
        return validate_username_rules(value)

    def validate_email(self, value: str) -> str:
        return normalize_email(value)

    def validate_password(self, value: str) -> str:
        return validate_password_length(value)
