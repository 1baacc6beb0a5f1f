from __future__ import annotations

from datetime import timedelta
from unittest import mock

from django.contrib.auth import get_user_model
from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import TestCase
from django.utils import timezone
from rest_framework.test import APIClient

from assets.hosting import HostedUpload
from blog.models import Comment, Post


class BlogAPITestCase(TestCase):
    def setUp(self) -> None:
        User = get_user_model()
        self.admin = User.objects.create_user(
            username="adminuser", email="admin@example.com", password="secret1", is_admin=True
        )
        self.reader = User.objects.create_user(
            username="reader01", email="reader@example.com", password="secret1"
        )
        self.client = APIClient()

    def login(self, user) -> None:
        self.client.force_authenticate(user=user)

    def make_post(self, title: str, **extra) -> Post:
        extra.setdefault("slug", title.lower().replace(" ", "-"))
        extra.setdefault("content", f"About {title}")
        extra.setdefault("author", self.admin)
        return Post.objects.create(title=title, **extra)


class PostCreateTests(BlogAPITestCase):
    def test_admin_creates_post_with_slug(self) -> None:
        self.login(self.admin)
        resp = self.client.post(
            "/api/post/create/",
            {"title": "  Flood Relief  ", "content": "Details", "category": "News"},
            format="json",
        )
        self.assertEqual(resp.status_code, 201)
        data = resp.json()
        self.assertEqual(data["title"], "Flood Relief")
        self.assertEqual(data["slug"], "flood-relief")
        self.assertEqual(data["category"], "news")
        self.assertEqual(data["author"], self.admin.pk)

    def test_duplicate_title_gets_suffixed_slug(self) -> None:
        self.login(self.admin)
        self.client.post("/api/post/create/", {"title": "Hello World", "content": "a"}, format="json")
        resp = self.client.post("/api/post/create/", {"title": "Hello World", "content": "b"}, format="json")
        self.assertEqual(resp.json()["slug"], "hello-world-1")

    def test_non_admin_is_forbidden(self) -> None:
        self.login(self.reader)
        resp = self.client.post("/api/post/create/", {"title": "Hello", "content": "x"}, format="json")
        self.assertEqual(resp.status_code, 403)
        self.assertEqual(resp.json()["detail"], "You are not allowed to create a post")

    def test_anonymous_is_rejected(self) -> None:
        resp = self.client.post("/api/post/create/", {"title": "Hello", "content": "x"}, format="json")
        self.assertIn(resp.status_code, (401, 403))
        self.assertFalse(Post.objects.exists())

    def test_title_and_content_validation(self) -> None:
        self.login(self.admin)
        resp = self.client.post("/api/post/create/", {"title": "Hi", "content": "x"}, format="json")
        self.assertEqual(resp.status_code, 400)
        self.assertIn("title", resp.json())

        resp = self.client.post(
            "/api/post/create/", {"title": "Long one", "content": "x" * 100_001}, format="json"
        )
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["content"], ["Content is too long. Maximum 100,000 characters allowed"])


class PostQueryTests(BlogAPITestCase):
    def test_getposts_filters_and_totals(self) -> None:
        self.make_post("Water Drive", category="relief")
        self.make_post("Book Fair", category="events")
        old = self.make_post("Old Story", category="relief")
        Post.objects.filter(pk=old.pk).update(created_at=timezone.now() - timedelta(days=90))

        resp = self.client.get("/api/post/getposts/", {"category": "Relief"})
        data = resp.json()
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(data["totalPosts"], 2)
        self.assertEqual(data["lastMonthPosts"], 2)
        self.assertNotIn("content", data["posts"][0])

        resp = self.client.get("/api/post/getposts/", {"searchTerm": "book"})
        self.assertEqual([p["title"] for p in resp.json()["posts"]], ["Book Fair"])

        resp = self.client.get("/api/post/getposts/", {"slug": "water-drive"})
        self.assertEqual(resp.json()["totalPosts"], 1)

    def test_getposts_rejects_non_numeric_ids(self) -> None:
        self.make_post("Water Drive")
        for param in ("userId", "postId"):
            with self.subTest(param=param):
                resp = self.client.get("/api/post/getposts/", {param: "abc"})
                self.assertEqual(resp.status_code, 400)
                self.assertIn(param, resp.json())

    def test_getposts_numeric_id_filters(self) -> None:
        post = self.make_post("Water Drive")
        self.make_post("Book Fair", author=self.reader)

        resp = self.client.get("/api/post/getposts/", {"userId": self.reader.pk})
        self.assertEqual([p["title"] for p in resp.json()["posts"]], ["Book Fair"])

        resp = self.client.get("/api/post/getposts/", {"postId": post.pk, "userId": ""})
        self.assertEqual(resp.json()["totalPosts"], 1)

    def test_getposts_pagination_and_order(self) -> None:
        base = timezone.now() - timedelta(hours=1)
        for i in range(5):
            post = self.make_post(f"Post {i}")
            Post.objects.filter(pk=post.pk).update(updated_at=base + timedelta(minutes=i))

        resp = self.client.get("/api/post/getposts/", {"startIndex": 1, "limit": 2, "order": "asc"})
        data = resp.json()
        self.assertEqual(len(data["posts"]), 2)
        self.assertEqual([p["title"] for p in data["posts"]], ["Post 1", "Post 2"])
        self.assertEqual(data["totalPosts"], 5)

    def test_home_returns_six_newest(self) -> None:
        for i in range(8):
            self.make_post(f"Post {i}")
        resp = self.client.get("/api/post/home/")
        self.assertEqual(len(resp.json()), 6)

    def test_post_by_slug(self) -> None:
        self.make_post("Water Drive")
        resp = self.client.get("/api/post/post/water-drive/")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["content"], "About Water Drive")

        resp = self.client.get("/api/post/post/missing/")
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.json(), {"detail": "Post not found"})


class PostChangeTests(BlogAPITestCase):
    def test_title_change_regenerates_slug(self) -> None:
        post = self.make_post("Water Drive")
        self.login(self.admin)
        resp = self.client.put(
            f"/api/post/updatepost/{post.pk}/{self.admin.pk}/", {"title": "Clean Water"}, format="json"
        )
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["slug"], "clean-water")

    def test_content_change_keeps_slug(self) -> None:
        post = self.make_post("Water Drive")
        self.login(self.admin)
        resp = self.client.put(
            f"/api/post/updatepost/{post.pk}/{self.admin.pk}/", {"content": "Updated"}, format="json"
        )
        self.assertEqual(resp.json()["slug"], "water-drive")
        self.assertEqual(resp.json()["content"], "Updated")

    @mock.patch("blog.services.posts.hosting.delete")
    def test_replaced_hosted_image_is_deleted(self, mocked_delete) -> None:
        old = "https://res.cloudinary.com/demo/image/upload/v1/blog-images/old.jpg"
        post = self.make_post("Water Drive", image=old)
        self.login(self.admin)
        self.client.put(
            f"/api/post/updatepost/{post.pk}/{self.admin.pk}/",
            {"image": "https://res.cloudinary.com/demo/image/upload/v2/blog-images/new.jpg"},
            format="json",
        )
        mocked_delete.assert_called_once_with(old)

    def test_update_for_someone_else_is_forbidden(self) -> None:
        post = self.make_post("Water Drive")
        self.login(self.reader)
        resp = self.client.put(
            f"/api/post/updatepost/{post.pk}/{self.admin.pk}/", {"content": "Hijack"}, format="json"
        )
        self.assertEqual(resp.status_code, 403)

    def test_delete_post(self) -> None:
        post = self.make_post("Water Drive")
        Comment.objects.create(post=post, author=self.reader, content="Nice")
        self.login(self.admin)

        resp = self.client.delete(f"/api/post/deletepost/{post.pk}/{self.admin.pk}/")
        self.assertEqual(resp.status_code, 200)
        data = resp.json()
        self.assertEqual(data["message"], "The post has been deleted")
        self.assertEqual(data["deletedComments"], 1)

        resp = self.client.delete(f"/api/post/deletepost/{post.pk}/{self.admin.pk}/")
        self.assertEqual(resp.status_code, 404)


class CommentAPITests(BlogAPITestCase):
    def setUp(self) -> None:
        super().setUp()
        self.post = self.make_post("Water Drive")

    def test_create_comment(self) -> None:
        self.login(self.reader)
        resp = self.client.post(
            "/api/comment/create/",
            {"content": " Well done ", "postId": self.post.pk, "userId": self.reader.pk},
            format="json",
        )
        self.assertEqual(resp.status_code, 201)
        self.assertEqual(resp.json()["content"], "Well done")

    def test_create_comment_as_someone_else(self) -> None:
        self.login(self.reader)
        resp = self.client.post(
            "/api/comment/create/",
            {"content": "Hi", "postId": self.post.pk, "userId": self.admin.pk},
            format="json",
        )
        self.assertEqual(resp.status_code, 403)

    def test_comment_length_limit(self) -> None:
        self.login(self.reader)
        resp = self.client.post(
            "/api/comment/create/",
            {"content": "x" * 201, "postId": self.post.pk, "userId": self.reader.pk},
            format="json",
        )
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["content"], ["Comment must be less than 200 characters"])

    def test_like_toggles(self) -> None:
        comment = Comment.objects.create(post=self.post, author=self.admin, content="Hi")
        self.login(self.reader)

        resp = self.client.put(f"/api/comment/likeComment/{comment.pk}/")
        self.assertEqual(resp.json()["number_of_likes"], 1)
        self.assertEqual(resp.json()["likes"], [self.reader.pk])

        resp = self.client.put(f"/api/comment/likeComment/{comment.pk}/")
        self.assertEqual(resp.json()["number_of_likes"], 0)

    def test_edit_by_owner_only(self) -> None:
        comment = Comment.objects.create(post=self.post, author=self.admin, content="Hi")
        self.login(self.reader)
        resp = self.client.put(f"/api/comment/editComment/{comment.pk}/", {"content": "Edited"}, format="json")
        self.assertEqual(resp.status_code, 403)

        self.login(self.admin)
        resp = self.client.put(f"/api/comment/editComment/{comment.pk}/", {"content": "Edited"}, format="json")
        self.assertEqual(resp.json()["content"], "Edited")

    def test_delete_comment(self) -> None:
        comment = Comment.objects.create(post=self.post, author=self.reader, content="Hi")
        self.login(self.reader)
        resp = self.client.delete(f"/api/comment/deleteComment/{comment.pk}/")
        self.assertEqual(resp.json(), "Comment has been deleted")
        self.assertFalse(Comment.objects.exists())

    def test_post_comments_and_admin_listing(self) -> None:
        first = Comment.objects.create(post=self.post, author=self.reader, content="One")
        Comment.objects.create(post=self.post, author=self.admin, content="Two")
        Comment.objects.filter(pk=first.pk).update(created_at=timezone.now() - timedelta(hours=1))

        resp = self.client.get(f"/api/comment/getPostComments/{self.post.pk}/")
        self.assertEqual([c["content"] for c in resp.json()], ["Two", "One"])

        self.login(self.reader)
        self.assertEqual(self.client.get("/api/comment/getcomments/").status_code, 403)

        self.login(self.admin)
        data = self.client.get("/api/comment/getcomments/").json()
        self.assertEqual(data["totalComments"], 2)
        self.assertEqual(data["lastMonthComments"], 2)


class BlogImageUploadTests(BlogAPITestCase):
    @mock.patch("blog.api.hosting.upload")
    def test_admin_upload(self, mocked_upload) -> None:
        url = "https://res.cloudinary.com/demo/image/upload/v1/blog-images/abc.png"
        mocked_upload.return_value = HostedUpload(url=url, public_id="blog-images/abc")
        self.login(self.admin)

        image = SimpleUploadedFile("photo.png", b"\x89PNG data", content_type="image/png")
        resp = self.client.post("/api/upload/blog-image/", {"image": image}, format="multipart")

        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json(), {"imageUrl": url})
        mocked_upload.assert_called_once_with(b"\x89PNG data", "blog-images")

    def test_rejects_non_images(self) -> None:
        self.login(self.admin)
        doc = SimpleUploadedFile("notes.txt", b"text", content_type="text/plain")
        resp = self.client.post("/api/upload/blog-image/", {"image": doc}, format="multipart")
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json(), {"detail": "Only image files allowed"})
