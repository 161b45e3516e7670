"""Mount the auth URLconf under /api/v1/auth/."""

from django.urls import include, path

urlpatterns = [
    path("auth/", include("users.auth_urls")),
]
