"""Design URL routes (v1)."""

from django.urls import path

from .views import GenerateDesignView, PurchasedDesignsView, RecentDesignsView, RemoveBackgroundView, UserDesignsView

app_name = "designs"

urlpatterns = [
    path("generate/", GenerateDesignView.as_view(), name="design-generate"),
    path("remove-background/", RemoveBackgroundView.as_view(), name="design-remove-background"),
    path("recent/", RecentDesignsView.as_view(), name="design-recent"),
    path("user/<str:user_key>/", UserDesignsView.as_view(), name="design-user"),
    path("purchased/", PurchasedDesignsView.as_view(), name="design-purchased"),
]
