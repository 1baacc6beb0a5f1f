from __future__ import annotations

from unittest import mock

from django.contrib.auth import get_user_model
from django.test import TestCase

from assets.hosting import AssetStatus
from blog.models import Comment, Post
from blog.services import delete_author, delete_post
from ngo_platform.exceptions import Forbidden, NotFound

HOSTED = "https://res.cloudinary.com/demo/image/upload/v1712/blog-images/{}.jpg"


class CleanupTestMixin:
    def setUp(self) -> None:
        User = get_user_model()
        self.admin = User.objects.create_user(
            username="adminuser", email="admin@example.com", password="secret1", is_admin=True
        )
        self.author = User.objects.create_user(
            username="writer01", email="writer@example.com", password="secret1"
        )
        self.reader = User.objects.create_user(
            username="reader01", email="reader@example.com", password="secret1"
        )
        destroy = mock.patch("assets.hosting.cloudinary.uploader.destroy", return_value={"result": "ok"})
        sleep = mock.patch("assets.hosting.time.sleep")
        self.destroy = destroy.start()
        self.sleep = sleep.start()
        self.addCleanup(destroy.stop)
        self.addCleanup(sleep.stop)

    def make_post(self, author, slug: str, image: str = "") -> Post:
        return Post.objects.create(author=author, title=slug.title(), slug=slug, content="Body", image=image)


class DeletePostTests(CleanupTestMixin, TestCase):
    def test_removes_comments_image_and_post(self) -> None:
        post = self.make_post(self.author, "flood-relief", HOSTED.format("flood"))
        Comment.objects.create(post=post, author=self.reader, content="Great")
        Comment.objects.create(post=post, author=self.author, content="Thanks")

        report = delete_post(self.author, post.pk, self.author.pk)

        self.assertEqual(report.comments_deleted, 2)
        self.assertEqual(report.posts_deleted, 1)
        self.assertEqual([o.status for o in report.assets], [AssetStatus.DELETED])
        self.destroy.assert_called_once_with("blog-images/flood", resource_type="image", invalidate=True)
        self.assertFalse(Post.objects.exists())
        self.assertFalse(Comment.objects.exists())

    def test_second_delete_is_not_found(self) -> None:
        post = self.make_post(self.author, "flood-relief")
        delete_post(self.author, post.pk, self.author.pk)
        with self.assertRaises(NotFound):
            delete_post(self.author, post.pk, self.author.pk)

    def test_other_user_is_forbidden(self) -> None:
        post = self.make_post(self.author, "flood-relief")
        with self.assertRaises(Forbidden):
            delete_post(self.reader, post.pk, self.author.pk)
        with self.assertRaises(Forbidden):
            delete_post(self.reader, post.pk, self.reader.pk)
        self.assertTrue(Post.objects.filter(pk=post.pk).exists())

    def test_admin_may_delete_any_post(self) -> None:
        post = self.make_post(self.author, "flood-relief")
        report = delete_post(self.admin, post.pk, self.author.pk)
        self.assertEqual(report.posts_deleted, 1)
        self.assertEqual(report.assets, [])

    def test_unhosted_image_is_left_alone(self) -> None:
        post = self.make_post(self.author, "flood-relief", "https://example.com/photo.jpg")
        report = delete_post(self.author, post.pk)
        self.assertEqual(report.assets, [])
        self.destroy.assert_not_called()

    def test_asset_failure_does_not_block_delete(self) -> None:
        self.destroy.side_effect = RuntimeError("network down")
        post = self.make_post(self.author, "flood-relief", HOSTED.format("flood"))

        report = delete_post(self.author, post.pk)

        self.assertFalse(Post.objects.filter(pk=post.pk).exists())
        self.assertEqual(len(report.asset_errors), 1)
        self.assertEqual(report.assets[0].error, "network down")
        self.assertEqual(self.destroy.call_count, 3)
        self.assertEqual(self.sleep.call_count, 2)


class DeleteAuthorTests(CleanupTestMixin, TestCase):
    def test_removes_posts_comments_and_account(self) -> None:
        first = self.make_post(self.author, "first-post")
        second = self.make_post(self.author, "second-post")
        other = self.make_post(self.admin, "admin-post")
        Comment.objects.create(post=first, author=self.reader, content="On first")
        Comment.objects.create(post=second, author=self.author, content="Own reply")
        Comment.objects.create(post=other, author=self.author, content="Elsewhere")
        survivor = Comment.objects.create(post=other, author=self.reader, content="Stays")

        report = delete_author(self.author, self.author.pk)

        self.assertEqual(report.posts_deleted, 2)
        self.assertEqual(report.comments_deleted, 3)
        self.assertTrue(report.user_deleted)
        self.assertFalse(get_user_model().objects.filter(pk=self.author.pk).exists())
        self.assertEqual(list(Post.objects.all()), [other])
        self.assertEqual(list(Comment.objects.all()), [survivor])

    def test_hosted_picture_and_post_images_are_all_attempted(self) -> None:
        self.author.profile_picture = "https://res.cloudinary.com/demo/image/upload/v1/profile-pictures/7.png"
        self.author.save()
        self.make_post(self.author, "first-post", HOSTED.format("one"))
        self.make_post(self.author, "second-post", HOSTED.format("two"))

        report = delete_author(self.admin, self.author.pk)

        self.assertEqual(len(report.assets), 3)
        self.assertEqual(self.destroy.call_count, 3)
        public_ids = sorted(call.args[0] for call in self.destroy.call_args_list)
        self.assertEqual(public_ids, ["blog-images/one", "blog-images/two", "profile-pictures/7"])

    def test_default_picture_is_not_deleted(self) -> None:
        report = delete_author(self.author, self.author.pk)
        self.assertEqual(report.assets, [])
        self.destroy.assert_not_called()

    def test_asset_failures_are_reported_not_raised(self) -> None:
        self.destroy.side_effect = RuntimeError("boom")
        self.make_post(self.author, "first-post", HOSTED.format("one"))

        report = delete_author(self.author, self.author.pk)

        self.assertTrue(report.user_deleted)
        self.assertEqual([o.status for o in report.assets], [AssetStatus.ERROR])
        self.assertEqual(report.as_dict()["assets"][0]["status"], "error")

    def test_other_user_is_forbidden(self) -> None:
        with self.assertRaises(Forbidden):
            delete_author(self.reader, self.author.pk)
        self.assertTrue(get_user_model().objects.filter(pk=self.author.pk).exists())

    def test_missing_user_is_not_found(self) -> None:
        with self.assertRaises(NotFound):
            delete_author(self.admin, 999999)
