from __future__ import annotations

from unittest import mock

from django.test import SimpleTestCase, override_settings

from assets import hosting
from assets.hosting import AssetStatus
from ngo_platform.exceptions import UpstreamError

IMAGE_URL = "https://res.cloudinary.com/demo/image/upload/v1712345678/blog-images/flood-relief.jpg"


class PublicIdTests(SimpleTestCase):
    def test_versioned_url(self) -> None:
        self.assertEqual(hosting.extract_public_id(IMAGE_URL), "blog-images/flood-relief")

    def test_unversioned_nested_folder(self) -> None:
        url = "https://res.cloudinary.com/demo/image/upload/ngo-id-photos/NGO-123456-26.png"
        self.assertEqual(hosting.extract_public_id(url), "ngo-id-photos/NGO-123456-26")

    def test_not_hosted(self) -> None:
        self.assertIsNone(hosting.extract_public_id("https://example.com/upload/a.jpg"))
        self.assertIsNone(hosting.extract_public_id(""))

    def test_missing_upload_segment(self) -> None:
        self.assertIsNone(hosting.extract_public_id("https://res.cloudinary.com/demo/image/a.jpg"))

    def test_resource_type(self) -> None:
        self.assertEqual(hosting.resource_type_for(IMAGE_URL), "image")
        self.assertEqual(
            hosting.resource_type_for("https://res.cloudinary.com/demo/raw/upload/v1/cards/a.pdf"), "raw"
        )

    def test_ownership(self) -> None:
        self.assertTrue(hosting.is_owned(IMAGE_URL))
        self.assertFalse(hosting.is_owned("https://lh3.googleusercontent.com/a/photo"))
        self.assertFalse(hosting.is_owned("https://cdn.pixabay.com/photo/blank.png"))


@override_settings(ASSET_DELETE_ATTEMPTS=3, ASSET_DELETE_BACKOFF_SECONDS=1.0)
@mock.patch("assets.hosting.time.sleep")
@mock.patch("assets.hosting.cloudinary.uploader.destroy")
class DeleteTests(SimpleTestCase):
    def test_deleted(self, destroy, sleep) -> None:
        destroy.return_value = {"result": "ok"}
        outcome = hosting.delete(IMAGE_URL)
        self.assertEqual(outcome.status, AssetStatus.DELETED)
        destroy.assert_called_once_with("blog-images/flood-relief", resource_type="image", invalidate=True)
        sleep.assert_not_called()

    def test_not_found_is_ok(self, destroy, sleep) -> None:
        destroy.return_value = {"result": "not found"}
        outcome = hosting.delete(IMAGE_URL)
        self.assertEqual(outcome.status, AssetStatus.NOT_FOUND)
        self.assertTrue(outcome.ok)

    def test_retries_then_succeeds(self, destroy, sleep) -> None:
        destroy.side_effect = [RuntimeError("timeout"), {"result": "ok"}]
        outcome = hosting.delete(IMAGE_URL)
        self.assertEqual(outcome.status, AssetStatus.DELETED)
        self.assertEqual(destroy.call_count, 2)
        sleep.assert_called_once_with(1.0)

    def test_gives_up_after_three_attempts(self, destroy, sleep) -> None:
        destroy.side_effect = RuntimeError("timeout")
        with self.assertLogs("assets.hosting", level="ERROR"):
            outcome = hosting.delete(IMAGE_URL)
        self.assertEqual(outcome.status, AssetStatus.ERROR)
        self.assertEqual(outcome.error, "timeout")
        self.assertEqual(destroy.call_count, 3)
        self.assertEqual(sleep.call_count, 2)

    def test_unexpected_result_is_error(self, destroy, sleep) -> None:
        destroy.return_value = {"result": "denied"}
        outcome = hosting.delete(IMAGE_URL)
        self.assertEqual(outcome.status, AssetStatus.ERROR)
        self.assertFalse(outcome.ok)

    def test_unhosted_is_skipped(self, destroy, sleep) -> None:
        outcome = hosting.delete("https://example.com/a.jpg")
        self.assertEqual(outcome.status, AssetStatus.SKIPPED)
        destroy.assert_not_called()

    def test_delete_many_keeps_input_order(self, destroy, sleep) -> None:
        destroy.side_effect = lambda public_id, **kw: {"result": "not found" if public_id.endswith("b") else "ok"}
        urls = [IMAGE_URL.replace("flood-relief", name) for name in ("a", "b", "c")]
        outcomes = hosting.delete_many(urls + [""])
        self.assertEqual([o.url for o in outcomes], urls)
        self.assertEqual(
            [o.status for o in outcomes],
            [AssetStatus.DELETED, AssetStatus.NOT_FOUND, AssetStatus.DELETED],
        )


class UploadTests(SimpleTestCase):
    @mock.patch("assets.hosting.cloudinary.uploader.upload")
    def test_upload_with_fixed_key_overwrites(self, mocked_upload) -> None:
        mocked_upload.return_value = {"secure_url": IMAGE_URL, "public_id": "profile-pictures/7"}
        result = hosting.upload(b"bytes", "profile-pictures", public_id="7")
        self.assertEqual(result.url, IMAGE_URL)
        _, kwargs = mocked_upload.call_args
        self.assertEqual(kwargs["folder"], "profile-pictures")
        self.assertEqual(kwargs["public_id"], "7")
        self.assertTrue(kwargs["overwrite"])

    @mock.patch("assets.hosting.cloudinary.uploader.upload", side_effect=RuntimeError("bad credentials"))
    def test_upload_failure_is_upstream_error(self, mocked_upload) -> None:
        with self.assertRaises(UpstreamError):
            hosting.upload(b"bytes", "blog-images")
