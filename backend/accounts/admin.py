from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from .models import User


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    list_display = ("username", "email", "first_name", "last_name",
                    "role", "station", "is_active")
    search_fields = ("username", "email", "first_name", "last_name")
    list_filter = ("is_active", "is_staff", "role")
    filter_horizontal = ("groups", "user_permissions", "stations")
    fieldsets = BaseUserAdmin.fieldsets + (
        ("Station Scope", {"fields": ("role", "designation", "station", "stations")}),
    )
    add_fieldsets = BaseUserAdmin.add_fieldsets + (
        ("Station Scope", {"fields": ("email", "first_name", "last_name",
                                      "role", "station")}),
    )
