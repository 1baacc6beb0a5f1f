from __future__ import annotations

import base64
from unittest import mock

from django.test import SimpleTestCase, TestCase
from django.utils import timezone
from rest_framework.test import APIClient

from accounts.models import User
from assets.hosting import AssetOutcome, AssetStatus, HostedUpload
from identity.models import NgoApplication
from identity.services import decode_photo, generate_ngo_id
from ngo_platform.exceptions import ValidationError

PHOTO_URL = "https://res.cloudinary.com/demo/image/upload/v1/ngo-id-photos/NGO-111111-26.jpg"
PHOTO_DATA = "data:image/png;base64," + base64.b64encode(b"png bytes").decode()


def application_payload(**overrides):
    payload = {
        "name": "Rina Das",
        "address": "Narayanpur",
        "phone": "9876543210",
        "email": "Rina@Example.com",
        "bloodGroup": "O+",
        "joiningDate": "2024-05-01",
        "photoBase64": PHOTO_DATA,
    }
    payload.update(overrides)
    return payload


def make_application(**extra) -> NgoApplication:
    fields = {
        "name": "Rina Das",
        "address": "Narayanpur",
        "phone": "9876543210",
        "email": "rina@example.com",
        "blood_group": "O+",
        "joining_date": "2024-05-01",
        "photo_url": PHOTO_URL,
        "ngo_id": "NGO-111111-26",
    }
    fields.update(extra)
    return NgoApplication.objects.create(**fields)


class DecodePhotoTests(SimpleTestCase):
    def test_data_url(self) -> None:
        self.assertEqual(decode_photo(PHOTO_DATA), b"png bytes")

    def test_bare_base64(self) -> None:
        self.assertEqual(decode_photo(base64.b64encode(b"raw").decode()), b"raw")

    def test_invalid_payloads(self) -> None:
        for value in ("", "data:image/png;base64,@@@", "data:text/plain;base64,aGk="):
            with self.subTest(value=value):
                with self.assertRaises(ValidationError):
                    decode_photo(value)


class NgoIdTests(TestCase):
    def test_format(self) -> None:
        self.assertRegex(generate_ngo_id(), r"^NGO-\d{6}-\d{2}$")

    @mock.patch("identity.services.random.randint", side_effect=[222222, 111111])
    def test_skips_taken_ids(self, mocked_randint) -> None:
        year = timezone.now().strftime("%y")
        make_application(ngo_id=f"NGO-222222-{year}")
        self.assertEqual(generate_ngo_id(), f"NGO-111111-{year}")
        self.assertEqual(mocked_randint.call_count, 2)


class ApplyAPITests(TestCase):
    def setUp(self) -> None:
        self.client = APIClient()

    @mock.patch("identity.services.hosting.upload")
    def test_apply_creates_application(self, mocked_upload) -> None:
        mocked_upload.return_value = HostedUpload(url=PHOTO_URL, public_id="ngo-id-photos/x")

        resp = self.client.post("/api/identity/apply/", application_payload(), format="json")

        self.assertEqual(resp.status_code, 201)
        data = resp.json()
        self.assertTrue(data["success"])
        self.assertFalse(data["alreadyExists"])
        self.assertRegex(data["ngoId"], r"^NGO-\d{6}-\d{2}$")
        self.assertEqual(data["application"]["email"], "rina@example.com")
        self.assertEqual(data["application"]["status"], "approved")
        args, kwargs = mocked_upload.call_args
        self.assertEqual(args, (b"png bytes", "ngo-id-photos"))
        self.assertEqual(kwargs, {"public_id": data["ngoId"]})

    @mock.patch("identity.services.hosting.upload")
    def test_existing_email_returns_existing(self, mocked_upload) -> None:
        application = make_application()
        resp = self.client.post("/api/identity/apply/", application_payload(), format="json")
        self.assertEqual(resp.status_code, 200)
        self.assertTrue(resp.json()["alreadyExists"])
        self.assertEqual(resp.json()["ngoId"], application.ngo_id)
        mocked_upload.assert_not_called()

    def test_missing_field(self) -> None:
        resp = self.client.post("/api/identity/apply/", application_payload(phone=""), format="json")
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json(), {"success": False, "message": "All fields are required"})

    def test_bad_email(self) -> None:
        resp = self.client.post("/api/identity/apply/", application_payload(email="nope"), format="json")
        self.assertEqual(resp.json(), {"success": False, "message": "Invalid email format"})

    def test_check_and_download(self) -> None:
        application = make_application()
        resp = self.client.get("/api/identity/check/RINA@example.com/")
        self.assertEqual(resp.json()["application"]["ngoId"], "NGO-111111-26")
        self.assertEqual(self.client.get("/api/identity/check/none@example.com/").status_code, 404)

        resp = self.client.get(f"/api/identity/download/{application.pk}/")
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.json()["message"], "ID card image not available for this application")

        application.image_url = "https://res.cloudinary.com/demo/image/upload/v1/ngo-id-cards/card.png"
        application.save()
        resp = self.client.get(f"/api/identity/download/{application.pk}/")
        self.assertEqual(resp.json()["imageUrl"], application.image_url)


class AdminAPITests(TestCase):
    def setUp(self) -> None:
        self.admin = User.objects.create_user(
            username="adminuser", email="admin@example.com", password="secret1", is_admin=True
        )
        self.application = make_application()
        self.client = APIClient()
        self.client.force_authenticate(user=self.admin)

    def test_non_admin_is_rejected(self) -> None:
        member = User.objects.create_user(username="member01", email="m@example.com", password="secret1")
        self.client.force_authenticate(user=member)
        resp = self.client.get("/api/identity/admin/applications/")
        self.assertEqual(resp.status_code, 403)
        self.assertFalse(resp.json()["success"])

    def test_list_and_get(self) -> None:
        data = self.client.get("/api/identity/admin/applications/").json()
        self.assertEqual(data["count"], 1)

        data = self.client.get(f"/api/identity/admin/application/{self.application.pk}/").json()
        self.assertEqual(data["application"], {"imageUrl": "", "name": "Rina Das", "ngoId": "NGO-111111-26"})

    @mock.patch("identity.services.hosting.delete_many")
    def test_delete_releases_assets(self, mocked_delete_many) -> None:
        mocked_delete_many.return_value = [AssetOutcome(PHOTO_URL, AssetStatus.DELETED)]

        resp = self.client.delete(f"/api/identity/admin/application/{self.application.pk}/")

        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["assets"], [{"url": PHOTO_URL, "status": "deleted"}])
        mocked_delete_many.assert_called_once_with([PHOTO_URL, ""])
        self.assertFalse(NgoApplication.objects.exists())

        resp = self.client.delete(f"/api/identity/admin/application/{self.application.pk}/")
        self.assertEqual(resp.status_code, 404)

    def test_verify_and_reject(self) -> None:
        resp = self.client.put(f"/api/identity/admin/application/{self.application.pk}/reject/")
        self.assertEqual(resp.json()["application"]["status"], "rejected")

        resp = self.client.put(f"/api/identity/admin/application/{self.application.pk}/verify/")
        self.assertEqual(resp.json()["application"]["status"], "approved")
