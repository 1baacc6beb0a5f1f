"""Post and comment workflows shared by the API views and the cleanup service."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from django.db import transaction

from assets import hosting
from ngo_platform.exceptions import Forbidden, NotFound

from ..models import Comment, Post
from .slugs import save_with_unique_slug

logger = logging.getLogger(__name__)


def is_admin(user) -> bool:
    return bool(getattr(user, "is_admin", False))


def get_manageable_post(actor, post_id: int, owner_id: Optional[int] = None, *, action: str = "update") -> Post:
    """
    Load a post the actor may change. Non-admins must own it, and when the
    route names an owner it has to be the actor too.
    """
    message = f"You are not allowed to {action} this post"
    if not is_admin(actor) and owner_id is not None and actor.pk != owner_id:
        raise Forbidden(message)

    post = Post.objects.filter(pk=post_id).first()
    if post is None:
        raise NotFound("Post not found")

    if not is_admin(actor) and post.author_id != actor.pk:
        raise Forbidden(message)
    return post


def create_post(author, data: Dict[str, Any]) -> Post:
    if not is_admin(author):
        raise Forbidden("You are not allowed to create a post")
    post = Post(
        author=author,
        title=data["title"],
        content=data["content"],
        image=data.get("image") or "",
        category=data.get("category") or "",
    )
    save_with_unique_slug(post)
    logger.info("Post %s created by %s", post.slug, author.pk)
    return post


def update_post(actor, post_id: int, owner_id: Optional[int], changes: Dict[str, Any]) -> Post:
    """Apply changes; the slug follows a title change and a replaced image is released."""

    post = get_manageable_post(actor, post_id, owner_id, action="update")
    old_image = post.image

    title = changes.get("title")
    if changes.get("content"):
        post.content = changes["content"]
    if changes.get("category"):
        post.category = changes["category"]
    if changes.get("image"):
        post.image = changes["image"]

    if title and title.strip() != post.title:
        post.title = title
        save_with_unique_slug(post)
    else:
        post.save()

    new_image = changes.get("image")
    if new_image and old_image and old_image != new_image and hosting.is_hosted(old_image):
        hosting.delete(old_image)
    return post


def toggle_comment_like(comment: Comment, user) -> Comment:
    with transaction.atomic():
        if comment.likes.filter(pk=user.pk).exists():
            comment.likes.remove(user)
        else:
            comment.likes.add(user)
        comment.number_of_likes = comment.likes.count()
        comment.save(update_fields=["number_of_likes", "updated_at"])
    return comment


def get_manageable_comment(actor, comment_id: int, *, action: str) -> Comment:
    comment = Comment.objects.filter(pk=comment_id).first()
    if comment is None:
        raise NotFound("Comment not found")
    if comment.author_id != actor.pk and not is_admin(actor):
        raise Forbidden(f"You are not allowed to {action} this comment")
    return comment
