from django.contrib.auth.models import AbstractUser
from django.db import models


class User(AbstractUser):
    ROLE_CHOICES = [
        ("admin", "Admin"),
        ("editor", "Editor"),
        ("member", "Member"),
    ]
    EDIT_ROLES = ("admin", "editor")

    email = models.EmailField("email address", unique=True)
    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default="member")

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = ["username"]

    class Meta:
        db_table = "users"

    @property
    def can_edit(self):
        """Write access to PTA data and the admin screens"""
        return self.is_superuser or self.role in self.EDIT_ROLES
