"""Account workflows: local sign-up, Google sign-in and profile updates."""

from __future__ import annotations

import logging
import random
import string
from typing import Any, Dict, Tuple

from django.db import IntegrityError, transaction
from rest_framework.authtoken.models import Token

from assets import hosting
from ngo_platform.exceptions import ValidationError

from .models import DEFAULT_PROFILE_PICTURE, User

logger = logging.getLogger(__name__)

PROFILE_PICTURE_FOLDER = "profile-pictures"


def issue_token(user: User) -> str:
    token, _ = Token.objects.get_or_create(user=user)
    return token.key


def revoke_tokens(user: User) -> None:
    Token.objects.filter(user=user).delete()


def create_local_user(*, username: str, email: str, password: str) -> User:
    try:
        with transaction.atomic():
            return User.objects.create_user(
                username=username,
                email=email,
                password=password,
                auth_provider=User.AuthProvider.LOCAL,
            )
    except IntegrityError as exc:
        raise ValidationError("Username or email already exists") from exc


def _google_username(name: str) -> str:
    base = "".join(name.lower().split())
    suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=8))
    return f"{base}{suffix}"


def google_sign_in(*, email: str, name: str, photo_url: str = "") -> Tuple[User, bool]:
    """Find or create the account behind a Google login. Returns ``(user, created)``."""

    user = User.objects.filter(email=email).first()
    if user:
        update_fields = []
        # A picture the user uploaded to us wins over the Google avatar.
        if photo_url and not hosting.is_hosted(user.profile_picture):
            user.profile_picture = photo_url
            update_fields.append("profile_picture")
        if user.auth_provider != User.AuthProvider.GOOGLE:
            user.auth_provider = User.AuthProvider.GOOGLE
            update_fields.append("auth_provider")
        if update_fields:
            user.save(update_fields=update_fields + ["updated_at"])
        return user, False

    try:
        with transaction.atomic():
            user = User(
                username=_google_username(name),
                email=email,
                profile_picture=photo_url or DEFAULT_PROFILE_PICTURE,
                auth_provider=User.AuthProvider.GOOGLE,
            )
            user.set_unusable_password()
            user.save()
    except IntegrityError as exc:
        logger.warning("Google account creation collided for %s: %s", email, exc)
        raise ValidationError("Account creation failed. Please try again.") from exc
    logger.info("Created Google account %s", user.username)
    return user, True


def _taken_field(user: User, changes: Dict[str, Any]) -> str:
    others = User.objects.exclude(pk=user.pk)
    if "username" in changes and others.filter(username=changes["username"]).exists():
        return "username"
    return "email"


def update_user(user: User, changes: Dict[str, Any]) -> User:
    """
    Apply validated profile changes. A replaced profile picture that we host
    is deleted once the new reference has been saved.
    """
    password = changes.pop("password", None)
    if password:
        if user.is_google_account:
            raise ValidationError("Cannot update password for Google accounts")
        user.set_password(password)

    old_picture = user.profile_picture
    for field, value in changes.items():
        setattr(user, field, value)

    try:
        with transaction.atomic():
            user.save()
    except IntegrityError as exc:
        raise ValidationError(f"This {_taken_field(user, changes)} is already taken") from exc

    new_picture = changes.get("profile_picture")
    if new_picture and new_picture != old_picture and hosting.is_owned(old_picture):
        hosting.delete(old_picture)
    return user


def replace_profile_picture(user: User, data: bytes) -> str:
    """Upload a new picture keyed by user id and release the old one if it differs."""

    upload = hosting.upload(data, PROFILE_PICTURE_FOLDER, public_id=str(user.pk))
    old_picture = user.profile_picture
    user.profile_picture = upload.url
    user.save(update_fields=["profile_picture", "updated_at"])

    # Same key means Cloudinary overwrote the object in place.
    if (
        old_picture != upload.url
        and hosting.is_owned(old_picture)
        and hosting.extract_public_id(old_picture) != hosting.extract_public_id(upload.url)
    ):
        hosting.delete(old_picture)
    return upload.url
