"""Admin registration for the custom User model.

Uses Django's built-in `UserAdmin`; creator profiles are shown inline.
"""

from creators.models import Creator
from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from .models import User


class CreatorInline(admin.StackedInline):
    model = Creator
    extra = 0
    can_delete = False
    fields = ("store_name", "name", "bio", "profile_image_url", "is_onboarded")


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    """Admin configuration for email-keyed accounts."""

    list_display = (
        "email",
        "email_verified",
        "is_staff",
        "is_active",
        "last_login",
        "date_joined",
    )
    list_filter = ("is_staff", "is_superuser", "is_active", "email_verified", "groups")
    search_fields = ("username", "email", "first_name", "last_name")
    ordering = ("-date_joined",)
    readonly_fields = ("last_login", "date_joined")
    inlines = [CreatorInline]

    fieldsets = (
        (None, {"fields": ("username", "password")}),
        (
            "Personal info",
            {"fields": ("first_name", "last_name", "email", "email_verified")},
        ),
        (
            "Permissions",
            {"fields": ("is_active", "is_staff", "is_superuser", "groups", "user_permissions")},
        ),
        ("Important dates", {"fields": ("last_login", "date_joined")}),
    )

    add_fieldsets = (
        (
            None,
            {
                "classes": ("wide",),
                "fields": ("email", "username", "password1", "password2"),
            },
        ),
    )

    filter_horizontal = ("groups", "user_permissions")
