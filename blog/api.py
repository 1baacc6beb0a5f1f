from __future__ import annotations

from django.db.models import Q
from rest_framework import permissions, status, views
from rest_framework.response import Response

from accounts.permissions import IsAdminAuthor
from assets import hosting
from ngo_platform.exceptions import Forbidden, NotFound
from ngo_platform.pagination import one_month_ago, ordering, page_window

from .models import Comment, Post
from .serializers import (
    CommentContentSerializer,
    CommentCreateSerializer,
    CommentSerializer,
    PostFilterSerializer,
    PostSerializer,
    PostSummarySerializer,
    PostWriteSerializer,
)
from .services import delete_post
from .services.posts import (
    create_post,
    get_manageable_comment,
    toggle_comment_like,
    update_post,
)

BLOG_IMAGE_FOLDER = "blog-images"
HOME_POST_COUNT = 6


# ---------------------- Posts ----------------------

class PostCreateAPI(views.APIView):
    permission_classes = [permissions.IsAuthenticated]

    def post(self, request, *args, **kwargs):
        ser = PostWriteSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        post = create_post(request.user, ser.validated_data)
        return Response(PostSerializer(post).data, status=status.HTTP_201_CREATED)


class PostListAPI(views.APIView):
    def get(self, request, *args, **kwargs):
        params = request.query_params
        ser = PostFilterSerializer(data=params)
        ser.is_valid(raise_exception=True)
        filters = ser.validated_data
        qs = Post.objects.all()

        if "author_id" in filters:
            qs = qs.filter(author_id=filters["author_id"])
        if filters.get("category"):
            qs = qs.filter(category=filters["category"].lower())
        if filters.get("slug"):
            qs = qs.filter(slug=filters["slug"])
        if "pk" in filters:
            qs = qs.filter(pk=filters["pk"])
        if filters.get("search_term"):
            term = filters["search_term"]
            qs = qs.filter(Q(title__icontains=term) | Q(content__icontains=term))

        start, stop = page_window(params)
        posts = qs.order_by(ordering(params, "updated_at", param="order")).defer("content")[start:stop]

        return Response(
            {
                "posts": PostSummarySerializer(posts, many=True).data,
                "totalPosts": qs.count(),
                "lastMonthPosts": Post.objects.filter(created_at__gte=one_month_ago()).count(),
            }
        )


class PostUpdateAPI(views.APIView):
    permission_classes = [permissions.IsAuthenticated]

    def put(self, request, post_id: int, user_id: int, *args, **kwargs):
        ser = PostWriteSerializer(data=request.data, partial=True)
        ser.is_valid(raise_exception=True)
        post = update_post(request.user, post_id, user_id, ser.validated_data)
        return Response(PostSerializer(post).data)


class PostDeleteAPI(views.APIView):
    permission_classes = [permissions.IsAuthenticated]

    def delete(self, request, post_id: int, user_id: int, *args, **kwargs):
        report = delete_post(request.user, post_id, user_id)
        return Response({"message": "The post has been deleted", **report.as_dict()})


class HomePostsAPI(views.APIView):
    def get(self, request, *args, **kwargs):
        posts = Post.objects.order_by("-created_at").defer("content")[:HOME_POST_COUNT]
        return Response(PostSummarySerializer(posts, many=True).data)


class PostBySlugAPI(views.APIView):
    def get(self, request, slug: str, *args, **kwargs):
        post = Post.objects.filter(slug=slug).first()
        if post is None:
            raise NotFound("Post not found")
        return Response(PostSerializer(post).data)


# ---------------------- Comments ----------------------

class CommentCreateAPI(views.APIView):
    permission_classes = [permissions.IsAuthenticated]

    def post(self, request, *args, **kwargs):
        ser = CommentCreateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        data = ser.validated_data

        if data["user_id"] != request.user.pk:
            raise Forbidden("You are not allowed to create this comment")
        post = Post.objects.filter(pk=data["post_id"]).first()
        if post is None:
            raise NotFound("Post not found")

        comment = Comment.objects.create(post=post, author=request.user, content=data["content"])
        return Response(CommentSerializer(comment).data, status=status.HTTP_201_CREATED)


class PostCommentsAPI(views.APIView):
    def get(self, request, post_id: int, *args, **kwargs):
        comments = Comment.objects.filter(post_id=post_id).prefetch_related("likes").order_by("-created_at")
        return Response(CommentSerializer(comments, many=True).data)


class CommentLikeAPI(views.APIView):
    permission_classes = [permissions.IsAuthenticated]

    def put(self, request, comment_id: int, *args, **kwargs):
        comment = Comment.objects.filter(pk=comment_id).first()
        if comment is None:
            raise NotFound("Comment not found")
        comment = toggle_comment_like(comment, request.user)
        return Response(CommentSerializer(comment).data)


class CommentEditAPI(views.APIView):
    permission_classes = [permissions.IsAuthenticated]

    def put(self, request, comment_id: int, *args, **kwargs):
        comment = get_manageable_comment(request.user, comment_id, action="edit")
        ser = CommentContentSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        comment.content = ser.validated_data["content"]
        comment.save(update_fields=["content", "updated_at"])
        return Response(CommentSerializer(comment).data)


class CommentDeleteAPI(views.APIView):
    permission_classes = [permissions.IsAuthenticated]

    def delete(self, request, comment_id: int, *args, **kwargs):
        comment = get_manageable_comment(request.user, comment_id, action="delete")
        comment.delete()
        return Response("Comment has been deleted")


class CommentListAPI(views.APIView):
    permission_classes = [IsAdminAuthor]

    def get(self, request, *args, **kwargs):
        params = request.query_params
        start, stop = page_window(params)
        comments = Comment.objects.order_by(ordering(params, "created_at")).prefetch_related("likes")[start:stop]
        return Response(
            {
                "comments": CommentSerializer(comments, many=True).data,
                "totalComments": Comment.objects.count(),
                "lastMonthComments": Comment.objects.filter(created_at__gte=one_month_ago()).count(),
            }
        )


# ---------------------- Uploads ----------------------

class BlogImageUploadAPI(views.APIView):
    permission_classes = [IsAdminAuthor]

    def post(self, request, *args, **kwargs):
        data = hosting.read_image_upload(request.FILES.get("image"))
        upload = hosting.upload(data, BLOG_IMAGE_FOLDER)
        return Response({"imageUrl": upload.url})
