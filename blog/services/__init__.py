"""Service helpers for the blog application."""

from .cleanup import DeletionReport, delete_author, delete_post
from .slugs import generate_slug, save_with_unique_slug

__all__ = [
    "DeletionReport",
    "delete_author",
    "delete_post",
    "generate_slug",
    "save_with_unique_slug",
]
