# assets/hosting.py
"""Cloudinary-backed storage for every image the platform references by URL."""

from __future__ import annotations

import io
import logging
import re
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional
from urllib.parse import urlsplit

import cloudinary
import cloudinary.uploader
from django.conf import settings

from ngo_platform.exceptions import UpstreamError, ValidationError

logger = logging.getLogger(__name__)

HOST_MARKER = "cloudinary.com"
ALLOWED_FORMATS = ("jpg", "jpeg", "png", "gif", "webp")

_VERSION_PREFIX = re.compile(r"^v\d+/")
_EXTENSION = re.compile(r"\.[^/.]+$")


class AssetStatus(str, Enum):
    DELETED = "deleted"
    NOT_FOUND = "not_found"
    SKIPPED = "skipped"
    ERROR = "error"


@dataclass(frozen=True)
class AssetOutcome:
    url: str
    status: AssetStatus
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status is not AssetStatus.ERROR

    def as_dict(self) -> dict:
        payload = {"url": self.url, "status": self.status.value}
        if self.error:
            payload["error"] = self.error
        return payload


@dataclass(frozen=True)
class HostedUpload:
    url: str
    public_id: str


def configure() -> None:
    """Push credentials from settings into the Cloudinary SDK."""
    if not (settings.CLOUDINARY_CLOUD_NAME and settings.CLOUDINARY_API_KEY and settings.CLOUDINARY_API_SECRET):
        logger.warning("Cloudinary credentials missing; uploads and deletions will fail.")
    cloudinary.config(
        cloud_name=settings.CLOUDINARY_CLOUD_NAME,
        api_key=settings.CLOUDINARY_API_KEY,
        api_secret=settings.CLOUDINARY_API_SECRET,
        secure=True,
    )


# ---------- URL helpers ----------

def is_hosted(url: Optional[str]) -> bool:
    return bool(url) and HOST_MARKER in url


def is_owned(url: Optional[str]) -> bool:
    """Hosted by us and not an OAuth avatar or stock default image."""
    if not is_hosted(url):
        return False
    return not any(host in url for host in settings.ASSET_FOREIGN_HOSTS)


def extract_public_id(url: Optional[str]) -> Optional[str]:
    """
    Object key from a delivery URL:
    ``https://res.cloudinary.com/<cloud>/image/upload/v123/folder/name.jpg`` -> ``folder/name``.
    """
    if not is_hosted(url):
        return None
    segments = urlsplit(url).path.split("/")
    try:
        marker = segments.index("upload")
    except ValueError:
        logger.error("Hosted URL has no upload segment: %s", url)
        return None
    path = "/".join(segments[marker + 1:])
    path = _VERSION_PREFIX.sub("", path, count=1)
    public_id = _EXTENSION.sub("", path)
    return public_id or None


def resource_type_for(url: str) -> str:
    return "raw" if "/raw/upload/" in url else "image"


# ---------- upload ----------

def read_image_upload(uploaded_file) -> bytes:
    """Validate a multipart image and return its bytes."""
    if uploaded_file is None:
        raise ValidationError("No image file provided")
    content_type = getattr(uploaded_file, "content_type", "") or ""
    if not content_type.startswith("image/"):
        raise ValidationError("Only image files allowed")
    if uploaded_file.size > settings.ASSET_MAX_UPLOAD_BYTES:
        raise ValidationError("Image must be 5MB or smaller")
    return uploaded_file.read()


def upload(
    data: bytes,
    folder: str,
    *,
    public_id: Optional[str] = None,
    resource_type: str = "image",
) -> HostedUpload:
    """Upload a buffer; a fixed ``public_id`` overwrites the previous object."""
    options = {
        "folder": folder,
        "resource_type": resource_type,
        "type": "upload",
        "access_mode": "public",
    }
    if resource_type != "raw":
        options["allowed_formats"] = list(ALLOWED_FORMATS)
        options["transformation"] = [{"quality": "auto:good"}, {"fetch_format": "auto"}]
    if public_id:
        options["public_id"] = public_id
        options["overwrite"] = True
        options["invalidate"] = True

    try:
        result = cloudinary.uploader.upload(io.BytesIO(data), **options)
    except Exception as exc:
        logger.exception("Upload to folder %s failed: %s", folder, exc)
        raise UpstreamError("Image upload failed") from exc

    url = result.get("secure_url") or result.get("url")
    if not url:
        logger.error("Upload to folder %s returned no URL: %r", folder, result)
        raise UpstreamError("Image upload failed")
    logger.info("Uploaded asset %s", url)
    return HostedUpload(url=url, public_id=result.get("public_id") or "")


# ---------- delete ----------

def delete(url: str) -> AssetOutcome:
    """
    Best-effort delete by URL. Never raises: exceptions are retried with a
    fixed backoff and the final failure is reported as ``AssetStatus.ERROR``.
    """
    if not is_hosted(url):
        logger.info("Not a hosted asset, skipping deletion: %s", url)
        return AssetOutcome(url, AssetStatus.SKIPPED)

    public_id = extract_public_id(url)
    if not public_id:
        return AssetOutcome(url, AssetStatus.ERROR, "Invalid URL format")

    attempts = max(1, settings.ASSET_DELETE_ATTEMPTS)
    backoff = settings.ASSET_DELETE_BACKOFF_SECONDS
    last_err: Optional[Exception] = None

    for attempt in range(1, attempts + 1):
        try:
            result = cloudinary.uploader.destroy(
                public_id,
                resource_type=resource_type_for(url),
                invalidate=True,
            )
        except Exception as e:
            last_err = e
            if attempt < attempts:
                logger.warning("Asset delete failed for %s (attempt %d/%d). Sleeping %.2fs. Error: %s",
                               public_id, attempt, attempts, backoff, e)
                time.sleep(backoff)
            continue

        status = (result or {}).get("result")
        if status == "ok":
            logger.info("Deleted asset %s", public_id)
            return AssetOutcome(url, AssetStatus.DELETED)
        if status == "not found":
            logger.info("Asset %s already gone", public_id)
            return AssetOutcome(url, AssetStatus.NOT_FOUND)
        logger.warning("Unexpected delete result %r for %s", status, public_id)
        return AssetOutcome(url, AssetStatus.ERROR, f"Unexpected result: {status}")

    logger.error("Asset delete gave up for %s after %d attempts: %s", public_id, attempts, last_err)
    return AssetOutcome(url, AssetStatus.ERROR, str(last_err))


def delete_many(urls: Iterable[str]) -> List[AssetOutcome]:
    """Independent deletions fanned out over a small thread pool, in input order."""
    targets = [url for url in urls if url]
    if not targets:
        return []
    workers = min(settings.ASSET_DELETE_MAX_THREADS, len(targets))
    with ThreadPoolExecutor(max_workers=max(1, workers)) as ex:
        outcomes = list(ex.map(delete, targets))
    failed = sum(1 for outcome in outcomes if not outcome.ok)
    logger.info("Deleted %d/%d assets", len(outcomes) - failed, len(outcomes))
    return outcomes
