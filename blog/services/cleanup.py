"""Cascading deletes for posts and authors.

Dependents and hosted images are always removed before the owning record,
and nothing wraps the whole cascade in one transaction. A crash part-way
leaves "dependents gone, owner still there", never orphaned dependents.
Image deletions are best-effort: their outcomes land in the report and never
block the record deletion.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List

from django.contrib.auth import get_user_model
from django.db.models import QuerySet

from assets import hosting
from assets.hosting import AssetOutcome, AssetStatus
from ngo_platform.exceptions import Forbidden, NotFound

from ..models import Comment, Post
from .posts import get_manageable_post, is_admin

logger = logging.getLogger(__name__)

User = get_user_model()


@dataclass
class DeletionReport:
    posts_deleted: int = 0
    comments_deleted: int = 0
    user_deleted: bool = False
    assets: List[AssetOutcome] = field(default_factory=list)

    @property
    def asset_errors(self) -> List[AssetOutcome]:
        return [outcome for outcome in self.assets if outcome.status is AssetStatus.ERROR]

    def as_dict(self) -> dict:
        return {
            "deletedPosts": self.posts_deleted,
            "deletedComments": self.comments_deleted,
            "assets": [outcome.as_dict() for outcome in self.assets],
        }


def _delete_rows(qs: QuerySet) -> int:
    """Bulk delete and count only rows of the queryset's own model."""
    _, per_model = qs.delete()
    return per_model.get(qs.model._meta.label, 0)


def delete_post(actor, post_id: int, owner_id=None) -> DeletionReport:
    post = get_manageable_post(actor, post_id, owner_id, action="delete")
    report = DeletionReport()

    report.comments_deleted = _delete_rows(Comment.objects.filter(post=post))

    if hosting.is_hosted(post.image):
        report.assets.append(hosting.delete(post.image))

    post.delete()
    report.posts_deleted = 1

    logger.info(
        "Deleted post %s with %d comments (asset errors: %d)",
        post_id, report.comments_deleted, len(report.asset_errors),
    )
    return report


def delete_author(actor, user_id: int) -> DeletionReport:
    if not is_admin(actor) and actor.pk != user_id:
        raise Forbidden("You are not allowed to delete this user")

    user = User.objects.filter(pk=user_id).first()
    if user is None:
        raise NotFound("User not found")

    logger.info("Deleting user %s and all their content", user.username)
    report = DeletionReport()

    posts = list(Post.objects.filter(author=user).only("pk", "image"))
    post_ids = [post.pk for post in posts]

    report.assets.extend(
        hosting.delete_many(post.image for post in posts if hosting.is_hosted(post.image))
    )

    report.comments_deleted += _delete_rows(Comment.objects.filter(post_id__in=post_ids))
    report.posts_deleted = _delete_rows(Post.objects.filter(pk__in=post_ids))
    logger.info("Deleted %d posts", report.posts_deleted)

    report.comments_deleted += _delete_rows(Comment.objects.filter(author=user))
    logger.info("Deleted %d comments", report.comments_deleted)

    if hosting.is_owned(user.profile_picture):
        report.assets.append(hosting.delete(user.profile_picture))

    user.delete()
    report.user_deleted = True
    logger.info("Deleted user account %s", user_id)
    return report
