"""Creator URL routes (v1)."""

from django.urls import path

from .views import CreatorAnalyticsView, CreatorImagesView, CreatorProfileView, PublicCreatorView

app_name = "creators"

urlpatterns = [
    path("profile/", CreatorProfileView.as_view(), name="creator-profile"),
    path("me/analytics/", CreatorAnalyticsView.as_view(), name="creator-analytics"),
    path("me/images/", CreatorImagesView.as_view(), name="creator-images"),
    path("<str:store_name>/", PublicCreatorView.as_view(), name="creator-public"),
]
