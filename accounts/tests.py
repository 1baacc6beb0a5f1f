from __future__ import annotations

from unittest import mock

from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import TestCase
from rest_framework.authtoken.models import Token
from rest_framework.test import APIClient

from accounts.models import DEFAULT_PROFILE_PICTURE, User
from assets.hosting import HostedUpload
from blog.models import Post

HOSTED_PICTURE = "https://res.cloudinary.com/demo/image/upload/v1/profile-pictures/{}.jpg"


class SignupTests(TestCase):
    def setUp(self) -> None:
        self.client = APIClient()

    def test_signup_creates_local_user(self) -> None:
        resp = self.client.post(
            "/api/auth/signup/",
            {"username": "volunteer1", "email": " Vol@Example.com ", "password": "secret1"},
            format="json",
        )
        self.assertEqual(resp.status_code, 201)
        self.assertEqual(resp.json(), "Signup successful")
        user = User.objects.get(username="volunteer1")
        self.assertEqual(user.email, "vol@example.com")
        self.assertTrue(user.check_password("secret1"))
        self.assertEqual(user.profile_picture, DEFAULT_PROFILE_PICTURE)

    def test_username_rules(self) -> None:
        cases = {
            "short": "Username must be between 7 and 20 characters",
            "has space1": "Username cannot contain spaces",
            "Uppercase1": "Username must be lowercase",
            "under_score": "Username can only contain lowercase letters and numbers",
        }
        for username, message in cases.items():
            with self.subTest(username=username):
                resp = self.client.post(
                    "/api/auth/signup/",
                    {"username": username, "email": "a@example.com", "password": "secret1"},
                    format="json",
                )
                self.assertEqual(resp.status_code, 400)
                self.assertEqual(resp.json()["username"], [message])

    def test_short_password_and_bad_email(self) -> None:
        resp = self.client.post(
            "/api/auth/signup/",
            {"username": "volunteer1", "email": "not-an-email", "password": "123"},
            format="json",
        )
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["email"], ["Please provide a valid email"])
        self.assertEqual(resp.json()["password"], ["Password must be at least 6 characters"])

    def test_duplicate_email(self) -> None:
        User.objects.create_user(username="existing1", email="vol@example.com", password="secret1")
        resp = self.client.post(
            "/api/auth/signup/",
            {"username": "volunteer1", "email": "vol@example.com", "password": "secret1"},
            format="json",
        )
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json(), {"detail": "Username or email already exists"})


class SigninTests(TestCase):
    def setUp(self) -> None:
        self.user = User.objects.create_user(username="volunteer1", email="vol@example.com", password="secret1")
        self.client = APIClient()

    def test_signin_returns_user_and_token(self) -> None:
        resp = self.client.post("/api/auth/signin/", {"email": "VOL@example.com", "password": "secret1"}, format="json")
        self.assertEqual(resp.status_code, 200)
        data = resp.json()
        self.assertEqual(data["username"], "volunteer1")
        self.assertNotIn("password", data)
        self.assertEqual(data["token"], Token.objects.get(user=self.user).key)

    def test_unknown_user_and_wrong_password(self) -> None:
        resp = self.client.post("/api/auth/signin/", {"email": "who@example.com", "password": "secret1"}, format="json")
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.json(), {"detail": "User not found"})

        resp = self.client.post("/api/auth/signin/", {"email": "vol@example.com", "password": "wrong1"}, format="json")
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json(), {"detail": "Invalid password"})

    def test_signout_revokes_token(self) -> None:
        token = Token.objects.create(user=self.user)
        self.client.credentials(HTTP_AUTHORIZATION=f"Token {token.key}")
        resp = self.client.post("/api/user/signout/")
        self.assertEqual(resp.status_code, 200)
        self.assertFalse(Token.objects.filter(user=self.user).exists())


class GoogleAuthTests(TestCase):
    def setUp(self) -> None:
        self.client = APIClient()

    def test_new_google_user(self) -> None:
        resp = self.client.post(
            "/api/auth/google/",
            {"email": "g@example.com", "name": "Rina Das", "googlePhotoUrl": "https://lh3.googleusercontent.com/a"},
            format="json",
        )
        self.assertEqual(resp.status_code, 201)
        user = User.objects.get(email="g@example.com")
        self.assertTrue(user.username.startswith("rinadas"))
        self.assertEqual(len(user.username), len("rinadas") + 8)
        self.assertFalse(user.has_usable_password())
        self.assertTrue(user.is_google_account)
        self.assertEqual(user.profile_picture, "https://lh3.googleusercontent.com/a")

    def test_hosted_picture_is_never_overwritten(self) -> None:
        picture = HOSTED_PICTURE.format("9")
        User.objects.create_user(
            username="rinadas01", email="g@example.com", password="secret1", profile_picture=picture
        )
        resp = self.client.post(
            "/api/auth/google/",
            {"email": "g@example.com", "name": "Rina Das", "googlePhotoUrl": "https://lh3.googleusercontent.com/b"},
            format="json",
        )
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(User.objects.get(email="g@example.com").profile_picture, picture)


class UserAPITests(TestCase):
    def setUp(self) -> None:
        self.admin = User.objects.create_user(
            username="adminuser", email="admin@example.com", password="secret1", is_admin=True
        )
        self.user = User.objects.create_user(username="volunteer1", email="vol@example.com", password="secret1")
        self.client = APIClient()

    def test_health(self) -> None:
        resp = self.client.get("/api/user/test/")
        self.assertEqual(resp.json(), {"message": "API is working!"})

    def test_list_is_admin_only(self) -> None:
        self.client.force_authenticate(user=self.user)
        self.assertEqual(self.client.get("/api/user/getusers/").status_code, 403)

        self.client.force_authenticate(user=self.admin)
        data = self.client.get("/api/user/getusers/").json()
        self.assertEqual(data["totalUsers"], 2)
        self.assertEqual(data["lastMonthUsers"], 2)
        self.assertEqual(len(data["users"]), 2)

    def test_get_user(self) -> None:
        resp = self.client.get(f"/api/user/{self.user.pk}/")
        self.assertEqual(resp.json()["username"], "volunteer1")
        self.assertEqual(self.client.get("/api/user/999999/").status_code, 404)

    def test_update_self_only(self) -> None:
        self.client.force_authenticate(user=self.user)
        resp = self.client.put(f"/api/user/update/{self.admin.pk}/", {"username": "hijacked1"}, format="json")
        self.assertEqual(resp.status_code, 403)
        self.assertEqual(resp.json(), {"detail": "You are not allowed to update this user"})

    def test_update_username_conflict(self) -> None:
        self.client.force_authenticate(user=self.user)
        resp = self.client.put(f"/api/user/update/{self.user.pk}/", {"username": "adminuser"}, format="json")
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json(), {"detail": "This username is already taken"})

    def test_google_account_cannot_change_password(self) -> None:
        self.user.auth_provider = User.AuthProvider.GOOGLE
        self.user.save()
        self.client.force_authenticate(user=self.user)
        resp = self.client.put(f"/api/user/update/{self.user.pk}/", {"password": "newsecret"}, format="json")
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json(), {"detail": "Cannot update password for Google accounts"})

    @mock.patch("accounts.services.hosting.delete")
    def test_replacing_hosted_picture_deletes_old_one(self, mocked_delete) -> None:
        old = HOSTED_PICTURE.format("old")
        self.user.profile_picture = old
        self.user.save()
        self.client.force_authenticate(user=self.user)

        resp = self.client.put(
            f"/api/user/update/{self.user.pk}/",
            {"profilePicture": HOSTED_PICTURE.format("new")},
            format="json",
        )
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["profile_picture"], HOSTED_PICTURE.format("new"))
        mocked_delete.assert_called_once_with(old)

    @mock.patch("assets.hosting.cloudinary.uploader.destroy", return_value={"result": "ok"})
    def test_delete_cascades(self, mocked_destroy) -> None:
        Post.objects.create(author=self.user, title="Mine", slug="mine", content="x")
        self.client.force_authenticate(user=self.user)

        resp = self.client.delete(f"/api/user/delete/{self.user.pk}/")

        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["message"], "User has been deleted")
        self.assertEqual(resp.json()["deletedPosts"], 1)
        self.assertFalse(User.objects.filter(pk=self.user.pk).exists())
        mocked_destroy.assert_not_called()

    def test_delete_someone_else_is_forbidden(self) -> None:
        self.client.force_authenticate(user=self.user)
        resp = self.client.delete(f"/api/user/delete/{self.admin.pk}/")
        self.assertEqual(resp.status_code, 403)


class ProfilePictureUploadTests(TestCase):
    def setUp(self) -> None:
        self.user = User.objects.create_user(username="volunteer1", email="vol@example.com", password="secret1")
        self.client = APIClient()
        self.client.force_authenticate(user=self.user)

    @mock.patch("accounts.services.hosting.delete")
    @mock.patch("accounts.services.hosting.upload")
    def test_upload_keyed_by_user(self, mocked_upload, mocked_delete) -> None:
        url = HOSTED_PICTURE.format(self.user.pk)
        mocked_upload.return_value = HostedUpload(url=url, public_id=f"profile-pictures/{self.user.pk}")
        image = SimpleUploadedFile("me.jpg", b"jpeg bytes", content_type="image/jpeg")

        resp = self.client.post("/api/user/upload/profile-picture/", {"image": image}, format="multipart")

        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json(), {"url": url, "message": "Profile picture updated successfully"})
        mocked_upload.assert_called_once_with(b"jpeg bytes", "profile-pictures", public_id=str(self.user.pk))
        # The default picture lives on a stock host and is never deleted.
        mocked_delete.assert_not_called()
        self.user.refresh_from_db()
        self.assertEqual(self.user.profile_picture, url)

    def test_too_large(self) -> None:
        image = SimpleUploadedFile("big.png", b"0" * (5 * 1024 * 1024 + 1), content_type="image/png")
        resp = self.client.post("/api/user/upload/profile-picture/", {"image": image}, format="multipart")
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json(), {"detail": "Image must be 5MB or smaller"})

    def test_missing_file(self) -> None:
        resp = self.client.post("/api/user/upload/profile-picture/", {}, format="multipart")
        self.assertEqual(resp.json(), {"detail": "No image file provided"})
