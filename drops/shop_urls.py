"""Public shop routes (v1)."""

from django.urls import path

from .views import CalculatePriceView, PackCheckoutView, ShopDropDetailView, ShopDropListView

app_name = "shop"

urlpatterns = [
    path("drops/", ShopDropListView.as_view(), name="shop-drop-list"),
    path("drops/<str:store_name>/<slug:drop_slug>/", ShopDropDetailView.as_view(), name="shop-drop-detail"),
    path("calculate-price/", CalculatePriceView.as_view(), name="shop-calculate-price"),
    path("checkout/", PackCheckoutView.as_view(), name="shop-checkout"),
]
