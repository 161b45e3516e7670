from django.urls import path

from .views import FulfillmentStatusView, PrintifyWebhookView

app_name = "fulfillment"

urlpatterns = [
    path("webhooks/printify/", PrintifyWebhookView.as_view(), name="printify-webhook"),
    path("status/", FulfillmentStatusView.as_view(), name="status"),
]
