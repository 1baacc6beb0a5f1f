"""NGO identity applications: id allocation, photo intake and admin actions."""

from __future__ import annotations

import base64
import binascii
import logging
import random
from typing import Any, Dict, List, Tuple

from django.conf import settings
from django.db import IntegrityError, transaction
from django.utils import timezone

from assets import hosting
from assets.hosting import AssetOutcome
from ngo_platform.exceptions import Conflict, NotFound, ValidationError

from .models import NgoApplication

logger = logging.getLogger(__name__)

PHOTO_FOLDER = "ngo-id-photos"
NGO_ID_ATTEMPTS = 20


def generate_ngo_id() -> str:
    """Return ``NGO-<6 digits>-<yy>`` that no stored application uses yet."""
    year = timezone.now().strftime("%y")
    for _ in range(NGO_ID_ATTEMPTS):
        ngo_id = f"NGO-{random.randint(100000, 999999)}-{year}"
        if not NgoApplication.objects.filter(ngo_id=ngo_id).exists():
            return ngo_id
    raise Conflict("Could not allocate an NGO ID")


def decode_photo(data_url: str) -> bytes:
    """Bytes of a ``data:image/...;base64,`` URL (a bare base64 string works too)."""
    header, _, payload = (data_url or "").partition(",")
    if not payload:
        header, payload = "", header
    if header and not header.startswith("data:image/"):
        raise ValidationError("Only image files allowed")
    try:
        data = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ValidationError("Invalid photo data") from exc
    if not data:
        raise ValidationError("Invalid photo data")
    if len(data) > settings.ASSET_MAX_UPLOAD_BYTES:
        raise ValidationError("Image must be 5MB or smaller")
    return data


def apply_for_id(data: Dict[str, Any]) -> Tuple[NgoApplication, bool]:
    """
    Register an application. Returns ``(application, created)``; an email that
    already applied gets its existing record back.
    """
    existing = NgoApplication.objects.filter(email=data["email"]).first()
    if existing:
        return existing, False

    photo = decode_photo(data["photo_base64"])
    ngo_id = generate_ngo_id()
    upload = hosting.upload(photo, PHOTO_FOLDER, public_id=ngo_id)

    fields = {k: v for k, v in data.items() if k != "photo_base64"}
    try:
        with transaction.atomic():
            application = NgoApplication.objects.create(
                **fields,
                photo_url=upload.url,
                ngo_id=ngo_id,
                status=NgoApplication.Status.APPROVED,
            )
    except IntegrityError as exc:
        hosting.delete(upload.url)
        raise ValidationError("Email or NGO ID already exists") from exc

    logger.info("Application created: %s", ngo_id)
    return application, True


def get_application(pk: int) -> NgoApplication:
    application = NgoApplication.objects.filter(pk=pk).first()
    if application is None:
        raise NotFound("Application not found")
    return application


def delete_application(pk: int) -> List[AssetOutcome]:
    """Release the photo and card image, then drop the record."""
    application = get_application(pk)
    outcomes = hosting.delete_many([application.photo_url, application.image_url])
    application.delete()
    logger.info("Deleted application %s (%d assets)", application.ngo_id, len(outcomes))
    return outcomes


def set_status(pk: int, status: str) -> NgoApplication:
    application = get_application(pk)
    application.status = status
    application.save(update_fields=["status", "updated_at"])
    logger.info("Application %s marked %s", application.ngo_id, status)
    return application
