"""Authentication routes grouped under /api/v1/auth.

Magic-link request and verification, the current creator, JWT refresh,
logout (blacklist) and the store name availability check.
"""

from django.urls import path

from .views import MagicLinkRequestView, MagicLinkVerifyView, RefreshView, SignOutView, check_store_name, current_creator

urlpatterns = [
    path("magic-link/", MagicLinkRequestView.as_view(), name="magic_link"),
    path("verify/", MagicLinkVerifyView.as_view(), name="magic_link_verify"),
    path("me/", current_creator, name="current_creator"),
    path("refresh/", RefreshView.as_view(), name="token_refresh"),
    path("logout/", SignOutView.as_view(), name="logout"),
    path("check-store-name/", check_store_name, name="check_store_name"),
]
