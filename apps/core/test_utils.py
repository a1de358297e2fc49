"""
Test utilities and factories for creating test data
"""
import random
import string
from datetime import datetime, timedelta, timezone as dt_timezone
from decimal import Decimal

from django.contrib.auth import get_user_model
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from apps.prom.models import PromEvent, PromQuote

User = get_user_model()


class TestDataFactory:
    """Factory class for creating test data"""

    @staticmethod
    def random_string(length=10):
        return "".join(random.choices(string.ascii_lowercase + string.digits, k=length))

    @staticmethod
    def create_user(email=None, password="testpass123", role="member", is_superuser=False):
        username = f"user_{TestDataFactory.random_string(6)}"
        return User.objects.create_user(
            username=username,
            email=email or f"{username}@test.com",
            password=password,
            role=role,
            is_superuser=is_superuser,
        )

    @staticmethod
    def create_prom(title="Prom 2026", **kwargs):
        return PromEvent.objects.create(title=title, **kwargs)

    @staticmethod
    def create_quote(prom, category="dj", price_total="1000", rating=None, vendor_name=None, **kwargs):
        return PromQuote.objects.create(
            prom=prom,
            vendor_name=vendor_name or f"Vendor {TestDataFactory.random_string(4)}",
            category=category,
            price_total=Decimal(str(price_total)),
            rating=rating,
            **kwargs,
        )


class AuthenticatedAPIClient(APIClient):
    """APIClient carrying a JWT access token for the given user"""

    def authenticate_user(self, user):
        refresh = RefreshToken.for_user(user)
        self.credentials(HTTP_AUTHORIZATION=f"Bearer {refresh.access_token}")
        return refresh


class FakeClock:
    """Settable clock for expiry tests"""

    def __init__(self, start=None):
        self.now = start or datetime(2026, 1, 1, 12, 0, tzinfo=dt_timezone.utc)

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)
