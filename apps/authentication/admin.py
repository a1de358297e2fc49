from django.contrib import admin
from django.contrib.auth.admin import UserAdmin

from .models import User


@admin.register(User)
class PTAUserAdmin(UserAdmin):
    list_display = ["email", "username", "role", "is_active", "date_joined"]
    list_filter = ["role", "is_active"]
    search_fields = ["email", "username", "first_name", "last_name"]
    fieldsets = UserAdmin.fieldsets + (("PTA", {"fields": ("role",)}),)
