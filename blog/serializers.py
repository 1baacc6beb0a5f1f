"""Serializers for the blog REST endpoints."""

from __future__ import annotations

from rest_framework import serializers

from .models import Comment, Post

MAX_CONTENT_LENGTH = 100_000
MAX_COMMENT_LENGTH = 200


class PostSerializer(serializers.ModelSerializer):
    class Meta:
        model = Post
        fields = [
            "id",
            "author",
            "title",
            "slug",
            "content",
            "image",
            "category",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class PostSummarySerializer(serializers.ModelSerializer):
    """List payload; leaves out the (potentially huge) content."""

    class Meta:
        model = Post
        fields = ["id", "title", "slug", "image", "category", "created_at"]
        read_only_fields = fields


class PostWriteSerializer(serializers.Serializer):
    title = serializers.CharField(min_length=3, max_length=200)
    content = serializers.CharField(
        max_length=MAX_CONTENT_LENGTH,
        error_messages={"max_length": "Content is too long. Maximum 100,000 characters allowed"},
    )
    image = serializers.URLField(required=False, allow_blank=True, max_length=500)
    category = serializers.CharField(required=False, allow_blank=True, max_length=50)


class CommentSerializer(serializers.ModelSerializer):
    likes = serializers.PrimaryKeyRelatedField(many=True, read_only=True)

    class Meta:
        model = Comment
        fields = [
            "id",
            "content",
            "post",
            "author",
            "likes",
            "number_of_likes",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class CommentContentSerializer(serializers.Serializer):
    content = serializers.CharField(
        max_length=MAX_COMMENT_LENGTH,
        error_messages={
            "blank": "Comment content is required",
            "required": "Comment content is required",
            "max_length": "Comment must be less than 200 characters",
        },
    )


class CommentCreateSerializer(CommentContentSerializer):
    postId = serializers.IntegerField(
        source="post_id",
        error_messages={"required": "Post ID is required"},
    )
    userId = serializers.IntegerField(source="user_id")


class PostFilterSerializer(serializers.Serializer):
    """Query-string filters of the post listing."""

    userId = serializers.IntegerField(source="author_id", required=False, min_value=1)
    postId = serializers.IntegerField(source="pk", required=False, min_value=1)
    category = serializers.CharField(required=False, allow_blank=True)
    slug = serializers.CharField(required=False, allow_blank=True)
    searchTerm = serializers.CharField(source="search_term", required=False, allow_blank=True)
