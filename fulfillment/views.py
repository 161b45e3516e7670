"""Fulfillment endpoints: Printify webhook and a configuration check."""

import logging

from django.conf import settings
from django.utils.crypto import constant_time_compare
from drf_spectacular.utils import OpenApiExample, OpenApiParameter, extend_schema, inline_serializer
from orders.models import Order
from orders.services import OrderError
from rest_framework import serializers as rf_serializers
from rest_framework import status
from rest_framework.permissions import AllowAny, IsAdminUser
from rest_framework.response import Response
from rest_framework.throttling import ScopedRateThrottle
from rest_framework.views import APIView

from .printify import FulfillmentError, PrintifyClient
from .services import mark_shipped

logger = logging.getLogger("chaos.fulfillment")

SHIPMENT_CREATED = "order:shipment:created"
DetailError = inline_serializer(name="FulfillmentError", fields={"detail": rf_serializers.CharField()})


class PrintifyWebhookView(APIView):
    """Printify webhook: marks orders shipped when a shipment is created."""

    permission_classes = [AllowAny]
    authentication_classes = []
    throttle_scope = "webhooks"
    throttle_classes = [ScopedRateThrottle]

    @extend_schema(
        tags=["Fulfillment"],
        summary="Printify webhook",
        description="Handles `order:shipment:created`. Other events are acknowledged and ignored.",
        request=None,
        parameters=[
            OpenApiParameter(
                name="token",
                location=OpenApiParameter.QUERY,
                required=True,
                description="Shared secret configured on the Printify webhook URL",
                type=str,
            )
        ],
        responses={
            200: inline_serializer(name="PrintifyWebhookReceived", fields={"received": rf_serializers.BooleanField()}),
            400: DetailError,
            403: DetailError,
        },
        examples=[OpenApiExample("Received", value={"received": True}, response_only=True)],
    )
    def post(self, request):
        expected = settings.PRINTIFY_WEBHOOK_TOKEN
        token = request.query_params.get("token") or ""
        if not expected or not constant_time_compare(token, expected):
            return Response({"detail": "Invalid token."}, status=status.HTTP_403_FORBIDDEN)
        payload = request.data if isinstance(request.data, dict) else {}
        event_type = payload.get("type")
        if not event_type:
            return Response({"detail": "Invalid payload."}, status=status.HTTP_400_BAD_REQUEST)
        if event_type != SHIPMENT_CREATED:
            return Response({"received": True})

        resource = payload.get("resource") or {}
        printify_order_id = str(resource.get("id") or "")
        order = Order.objects.filter(printify_order_id=printify_order_id).first() if printify_order_id else None
        if order is None:
            logger.warning(
                "fulfillment.webhook_unknown_order",
                extra={"event": "fulfillment.webhook_unknown_order", "printify_order_id": printify_order_id},
            )
            return Response({"received": True})
        try:
            mark_shipped(order)
        except OrderError as exc:
            logger.warning(
                "fulfillment.webhook_ship_rejected",
                extra={"event": "fulfillment.webhook_ship_rejected", "order_id": order.id, "error": str(exc)},
            )
        return Response({"received": True})


class FulfillmentStatusView(APIView):
    permission_classes = [IsAdminUser]
    throttle_scope = "fulfillment"

    @extend_schema(
        tags=["Fulfillment"],
        summary="Printify configuration status",
        description="Lists the Printify shops visible to the configured token.",
        responses={
            200: inline_serializer(
                name="FulfillmentStatus",
                fields={
                    "shopId": rf_serializers.CharField(),
                    "shops": rf_serializers.ListField(child=rf_serializers.DictField()),
                },
            ),
            502: DetailError,
        },
    )
    def get(self, request):
        client = PrintifyClient()
        try:
            shops = client.list_shops()
        except FulfillmentError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_502_BAD_GATEWAY)
        return Response({"shopId": client.shop_id, "shops": shops})
