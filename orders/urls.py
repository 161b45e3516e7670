"""URL routes for the orders app (v1)."""

from django.urls import path

from .views import OrderBySessionView, OrderCancelView, OrderDetailView, StripeWebhookView

app_name = "orders"

urlpatterns = [
    path("webhooks/stripe/", StripeWebhookView.as_view(), name="order-webhook-stripe"),
    path("session/<str:session_id>/", OrderBySessionView.as_view(), name="order-by-session"),
    path("<uuid:public_id>/", OrderDetailView.as_view(), name="order-detail"),
    path("<uuid:public_id>/cancel/", OrderCancelView.as_view(), name="order-cancel"),
]
