"""Orders API endpoints.

Order status pages are public and addressed by the unguessable `public_id`
(or the Stripe Checkout Session id after the success redirect). Stripe
notifies payment results through the webhook.
"""

import logging

import stripe
from drf_spectacular.utils import OpenApiExample, OpenApiParameter, extend_schema, inline_serializer
from rest_framework import serializers as rf_serializers
from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.throttling import ScopedRateThrottle
from rest_framework.views import APIView

from .models import Order
from .payments import construct_event, expire_checkout_session
from .selectors import get_order, get_order_by_session
from .serializers import OrderSerializer
from .services import OrderError, cancel_order, compute_request_hash, pay_order, with_idempotency

logger = logging.getLogger("chaos.orders")

ORDER_EXAMPLE = {
    "order": {
        "id": "5d1f0c7e-8a57-4d3e-9b0e-2f4b8f1a9c21",
        "number": "CS-000123",
        "status": "paid",
        "source": "custom",
        "email": "sam@example.com",
        "firstName": "Sam",
        "lastName": "Rivera",
        "phone": "",
        "country": "US",
        "region": "CA",
        "address1": "1 Market St",
        "address2": "",
        "city": "San Francisco",
        "zip": "94105",
        "items": [
            {
                "id": 10,
                "designId": 42,
                "imageUrl": "https://api.example.com/media/designs/a.png",
                "quantity": 5,
                "unitPrice": "10.00",
                "lineTotal": "50.00",
            }
        ],
        "subtotal": "50.00",
        "discount": "10.00",
        "shipping": "0.00",
        "total": "40.00",
        "printifyOrderId": None,
        "stripePaymentId": "pi_123",
        "createdAt": "2025-01-01T12:00:00Z",
        "updatedAt": "2025-01-01T12:01:00Z",
    }
}

OrderEnvelope = inline_serializer(name="OrderEnvelope", fields={"order": OrderSerializer()})
DetailError = inline_serializer(name="OrderError", fields={"detail": rf_serializers.CharField()})


class OrderDetailView(APIView):
    permission_classes = [AllowAny]
    throttle_scope = "orders"

    @extend_schema(
        tags=["Orders"],
        summary="Get order",
        description="Order status page data, addressed by the order's public id.",
        responses={200: OrderEnvelope, 404: DetailError},
        examples=[OpenApiExample("Order", value=ORDER_EXAMPLE, response_only=True)],
    )
    def get(self, request, public_id):
        order = get_order(public_id=public_id)
        if order is None:
            return Response({"detail": "Not found."}, status=status.HTTP_404_NOT_FOUND)
        return Response({"order": OrderSerializer(order).data})


class OrderBySessionView(APIView):
    """Resolve the order after Stripe redirects back with `session_id`."""

    permission_classes = [AllowAny]
    throttle_scope = "orders"

    @extend_schema(
        tags=["Orders"],
        summary="Get order by Checkout Session",
        responses={200: OrderEnvelope, 404: DetailError},
    )
    def get(self, request, session_id: str):
        order = get_order_by_session(stripe_session_id=session_id)
        if order is None:
            return Response({"detail": "Not found."}, status=status.HTTP_404_NOT_FOUND)
        return Response({"order": OrderSerializer(order).data})


class OrderCancelView(APIView):
    """Cancel a pending order.

    Idempotent when `Idempotency-Key` is provided. Returns 409 on key reuse with different payload.
    """

    permission_classes = [AllowAny]
    throttle_scope = "orders_write"

    @extend_schema(
        tags=["Orders"],
        summary="Cancel order",
        description="Cancels a pending order and expires its Checkout Session. Paid orders cannot be cancelled.",
        parameters=[
            OpenApiParameter(
                name="Idempotency-Key",
                location=OpenApiParameter.HEADER,
                required=False,
                description="Makes the request idempotent within scope+path+method",
                type=str,
            )
        ],
        responses={200: OrderEnvelope, 400: DetailError, 404: DetailError},
        examples=[OpenApiExample("Mutation Error", value={"detail": "Only pending orders can be cancelled."})],
    )
    def post(self, request, public_id):
        order = get_order(public_id=public_id)
        if order is None:
            return Response({"detail": "Not found."}, status=status.HTTP_404_NOT_FOUND)

        def _handler():
            was_pending = order.status == Order.STATUS_PENDING
            try:
                updated = cancel_order(order)
            except OrderError as exc:
                return {"detail": str(exc)}, 400
            if was_pending and updated.stripe_session_id:
                expire_checkout_session(updated.stripe_session_id)
            return {"order": OrderSerializer(updated).data}, 200

        idem_key = request.headers.get("Idempotency-Key")
        if idem_key:
            body, code = with_idempotency(
                key=idem_key,
                user=None,
                path=str(request.path),
                method=str(request.method),
                request_hash=compute_request_hash(getattr(request, "data", None)),
                handler=_handler,
                scope=f"order:{order.public_id}",
            )
            return Response(body, status=code)

        body, code = _handler()
        return Response(body, status=code)


def _field(obj, name, default=None):
    try:
        value = obj[name]
    except (KeyError, TypeError):
        return default
    return default if value is None else value


class StripeWebhookView(APIView):
    """Stripe webhook: pays completed checkouts and cancels expired ones.

    The signature is verified against STRIPE_WEBHOOK_SECRET and each event id
    is processed once.
    """

    permission_classes = [AllowAny]
    authentication_classes = []
    throttle_scope = "webhooks"
    throttle_classes = [ScopedRateThrottle]

    @extend_schema(
        tags=["Orders"],
        summary="Stripe webhook",
        description=(
            "Handles `checkout.session.completed` (marks the order paid) and `checkout.session.expired` "
            "(cancels the pending order). Other events are acknowledged and ignored."
        ),
        request=None,
        responses={
            200: inline_serializer(name="WebhookReceived", fields={"received": rf_serializers.BooleanField()}),
            400: DetailError,
        },
        examples=[OpenApiExample("Received", value={"received": True}, response_only=True)],
    )
    def post(self, request):
        signature = request.headers.get("Stripe-Signature")
        if not signature:
            return Response({"detail": "Missing signature."}, status=status.HTTP_400_BAD_REQUEST)
        try:
            event = construct_event(request.body, signature)
        except ValueError:
            return Response({"detail": "Invalid payload."}, status=status.HTTP_400_BAD_REQUEST)
        except stripe.SignatureVerificationError:
            logger.warning("order.webhook_invalid_signature", extra={"event": "order.webhook_invalid_signature"})
            return Response({"detail": "Invalid signature."}, status=status.HTTP_400_BAD_REQUEST)

        event_type = _field(event, "type", "")
        session = _field(_field(event, "data", {}), "object", {})

        def _handler():
            if event_type == "checkout.session.completed":
                return self._completed(session), 200
            if event_type == "checkout.session.expired":
                return self._expired(session), 200
            return {"received": True}, 200

        event_id = _field(event, "id")
        if not event_id:
            body, code = _handler()
            return Response(body, status=code)
        body, code = with_idempotency(
            key=str(event_id),
            user=None,
            path=str(request.path),
            method=str(request.method),
            handler=_handler,
            scope="stripe",
        )
        return Response(body, status=code)

    def _order_for(self, session):
        order_id = _field(_field(session, "metadata", {}), "order_id") or _field(session, "client_reference_id")
        order = get_order(public_id=order_id) if order_id else None
        if order is None:
            order = get_order_by_session(stripe_session_id=_field(session, "id", ""))
        return order

    def _completed(self, session) -> dict:
        order = self._order_for(session)
        if order is None:
            logger.warning(
                "order.webhook_unknown_order",
                extra={"event": "order.webhook_unknown_order", "session_id": _field(session, "id")},
            )
            return {"received": True}
        if _field(session, "payment_status") not in (None, "paid", "no_payment_required"):
            # Delayed payment methods complete later through another event
            return {"received": True}
        try:
            pay_order(order, payment_id=str(_field(session, "payment_intent", "")))
        except OrderError as exc:
            logger.warning(
                "order.webhook_pay_rejected",
                extra={"event": "order.webhook_pay_rejected", "order_id": order.id, "error": str(exc)},
            )
        return {"received": True}

    def _expired(self, session) -> dict:
        order = self._order_for(session)
        if order is not None and order.status == Order.STATUS_PENDING:
            cancel_order(order)
        return {"received": True}
