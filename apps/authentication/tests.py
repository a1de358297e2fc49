"""
Tests for login, logout and the session check
"""
from django.test import TestCase
from rest_framework import status
from rest_framework_simplejwt.token_blacklist.models import BlacklistedToken

from apps.core.test_utils import AuthenticatedAPIClient, TestDataFactory


class LoginTests(TestCase):
    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.user = TestDataFactory.create_user(email="parent@school.org", password="secret-pass-1", role="editor")

    def test_login_returns_tokens(self):
        response = self.client.post(
            "/api/v1/auth/login/", {"email": "parent@school.org", "password": "secret-pass-1"}, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn("access", response.data)
        self.assertIn("refresh", response.data)
        self.assertEqual(response.data["user"]["role"], "editor")

    def test_wrong_password(self):
        response = self.client.post(
            "/api/v1/auth/login/", {"email": "parent@school.org", "password": "nope"}, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertFalse(response.data["success"])

    def test_missing_credentials(self):
        response = self.client.post("/api/v1/auth/login/", {"email": "parent@school.org"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class SessionTests(TestCase):
    def setUp(self):
        self.client = AuthenticatedAPIClient()

    def test_anonymous(self):
        response = self.client.get("/api/v1/auth/session/")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data, {"authenticated": False, "is_admin": False, "role": None})

    def test_editor_is_admin(self):
        self.client.authenticate_user(TestDataFactory.create_user(role="editor"))

        response = self.client.get("/api/v1/auth/session/")

        self.assertTrue(response.data["authenticated"])
        self.assertTrue(response.data["is_admin"])

    def test_member_is_not_admin(self):
        self.client.authenticate_user(TestDataFactory.create_user(role="member"))

        response = self.client.get("/api/v1/auth/session/")

        self.assertTrue(response.data["authenticated"])
        self.assertFalse(response.data["is_admin"])
        self.assertEqual(response.data["role"], "member")


class LogoutTests(TestCase):
    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.refresh = self.client.authenticate_user(TestDataFactory.create_user())

    def test_logout_blacklists_refresh_token(self):
        response = self.client.post("/api/v1/auth/logout/", {"refresh": str(self.refresh)}, format="json")

        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertEqual(BlacklistedToken.objects.count(), 1)

        refreshed = self.client.post("/api/v1/auth/refresh/", {"refresh": str(self.refresh)}, format="json")
        self.assertEqual(refreshed.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_logout_without_token(self):
        response = self.client.post("/api/v1/auth/logout/", {}, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["field"], "refresh")

    def test_logout_with_garbage_token(self):
        response = self.client.post("/api/v1/auth/logout/", {"refresh": "not-a-token"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class RoleTests(TestCase):
    def test_can_edit_by_role(self):
        self.assertTrue(TestDataFactory.create_user(role="admin").can_edit)
        self.assertTrue(TestDataFactory.create_user(role="editor").can_edit)
        self.assertFalse(TestDataFactory.create_user(role="member").can_edit)
        self.assertTrue(TestDataFactory.create_user(role="member", is_superuser=True).can_edit)

    def test_session_is_admin_follows_can_edit(self):
        client = AuthenticatedAPIClient()
        for role in ("admin", "editor", "member"):
            user = TestDataFactory.create_user(role=role)
            client.authenticate_user(user)

            response = client.get("/api/v1/auth/session/")

            self.assertEqual(response.data["is_admin"], user.can_edit)
