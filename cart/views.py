"""DRF views for guest cart operations.

Every endpoint is keyed by the `X-Session-Id` header, the anonymous client
id the storefront generates and keeps in local storage.
"""

from drf_spectacular.utils import OpenApiExample, OpenApiParameter, extend_schema, inline_serializer
from orders.payments import PaymentError
from orders.serializers import CheckoutResponseSerializer
from orders.services import compute_request_hash, with_idempotency
from rest_framework import serializers as rf_serializers
from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from .selectors import get_active_cart_for_session
from .serializers import (
    AddItemSerializer,
    CartReadSerializer,
    CheckoutSerializer,
    SyncCartSerializer,
    UpdateItemQuantitySerializer,
)
from .services import (
    CartError,
    add_item,
    checkout_cart,
    clear_cart,
    remove_item,
    sync_cart,
    update_item_quantity,
)

SESSION_HEADER = OpenApiParameter(
    name="X-Session-Id",
    location=OpenApiParameter.HEADER,
    required=True,
    description="Guest session identifier",
    type=str,
)
CartMutationError = inline_serializer(name="CartMutationError", fields={"detail": rf_serializers.CharField()})

CART_EXAMPLE = {
    "id": 1,
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
    "quantity": 5,
    "subtotal": "50.00",
    "discount": "10.00",
    "discountRate": "0.20",
    "shipping": "0.00",
    "total": "40.00",
}


class GuestCartMixin:
    """Resolve the session id from the request header."""

    def session_id(self, request):
        value = (request.headers.get("X-Session-Id") or "").strip()
        return value[:64] or None

    def missing_session(self):
        return Response({"detail": "Missing X-Session-Id."}, status=status.HTTP_400_BAD_REQUEST)

    def cart_response(self, session_id, code=status.HTTP_200_OK):
        cart = get_active_cart_for_session(session_id=session_id)
        return Response(CartReadSerializer.from_cart(cart=cart).data, status=code)


class CartDetailView(GuestCartMixin, APIView):
    """Return the guest session's active cart."""

    permission_classes = [AllowAny]
    throttle_scope = "cart"

    @extend_schema(
        tags=["Cart Endpoints"],
        summary="Get cart",
        description="Returns the active cart with volume-discounted totals.",
        parameters=[SESSION_HEADER],
        responses={200: CartReadSerializer, 400: CartMutationError},
        examples=[OpenApiExample("Cart", value=CART_EXAMPLE, response_only=True)],
    )
    def get(self, request):
        session_id = self.session_id(request)
        if not session_id:
            return self.missing_session()
        return self.cart_response(session_id)


class CartAddItemView(GuestCartMixin, APIView):
    permission_classes = [AllowAny]
    throttle_scope = "cart_write"

    @extend_schema(
        tags=["Cart Endpoints"],
        summary="Add item to cart",
        description="Adds a design. Adding a design already in the cart increments its quantity.",
        request=AddItemSerializer,
        parameters=[SESSION_HEADER],
        responses={201: CartReadSerializer, 400: CartMutationError},
        examples=[
            OpenApiExample(
                "Add",
                value={"id": 42, "imageUrl": "https://api.example.com/media/designs/a.png", "quantity": 1},
                request_only=True,
            )
        ],
    )
    def post(self, request):
        session_id = self.session_id(request)
        if not session_id:
            return self.missing_session()
        serializer = AddItemSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        try:
            add_item(
                session_id=session_id,
                design_id=data["id"],
                quantity=data["quantity"],
                image_url=data["imageUrl"] or None,
            )
        except CartError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)
        return self.cart_response(session_id, code=status.HTTP_201_CREATED)


class CartItemView(GuestCartMixin, APIView):
    """Update or delete a single cart line."""

    permission_classes = [AllowAny]
    throttle_scope = "cart_write"

    @extend_schema(
        tags=["Cart Endpoints"],
        summary="Update cart item quantity",
        request=UpdateItemQuantitySerializer,
        parameters=[SESSION_HEADER],
        responses={200: CartReadSerializer, 400: CartMutationError, 404: CartMutationError},
        examples=[OpenApiExample("Update", value={"quantity": 3}, request_only=True)],
    )
    def patch(self, request, item_id: int):
        session_id = self.session_id(request)
        if not session_id:
            return self.missing_session()
        serializer = UpdateItemQuantitySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            update_item_quantity(
                session_id=session_id, item_id=item_id, quantity=serializer.validated_data["quantity"]
            )
        except CartError:
            return Response({"detail": "Not found."}, status=status.HTTP_404_NOT_FOUND)
        return self.cart_response(session_id)

    @extend_schema(
        tags=["Cart Endpoints"],
        summary="Delete cart item",
        parameters=[SESSION_HEADER],
        responses={200: CartReadSerializer, 404: CartMutationError},
    )
    def delete(self, request, item_id: int):
        session_id = self.session_id(request)
        if not session_id:
            return self.missing_session()
        # 404 if not in this guest cart
        if not remove_item(session_id=session_id, item_id=item_id):
            return Response({"detail": "Not found."}, status=status.HTTP_404_NOT_FOUND)
        return self.cart_response(session_id)


class CartSyncView(GuestCartMixin, APIView):
    permission_classes = [AllowAny]
    throttle_scope = "cart_write"

    @extend_schema(
        tags=["Cart Endpoints"],
        summary="Replace cart from local storage",
        description="Replaces all lines with the given Checkout Items. Invalid entries are dropped.",
        request=SyncCartSerializer,
        parameters=[SESSION_HEADER],
        responses={200: CartReadSerializer, 400: CartMutationError},
        examples=[
            OpenApiExample(
                "Sync",
                value={"items": [{"id": 42, "imageUrl": "https://api.example.com/media/designs/a.png", "quantity": 2}]},
                request_only=True,
            )
        ],
    )
    def put(self, request):
        session_id = self.session_id(request)
        if not session_id:
            return self.missing_session()
        serializer = SyncCartSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        sync_cart(session_id=session_id, raw_items=serializer.validated_data["items"])
        return self.cart_response(session_id)


class CartClearView(GuestCartMixin, APIView):
    """Clear the active cart."""

    permission_classes = [AllowAny]
    throttle_scope = "cart_write"

    @extend_schema(
        tags=["Cart Endpoints"],
        summary="Clear cart",
        parameters=[SESSION_HEADER],
        responses={
            200: inline_serializer(name="CartStatusCleared", fields={"status": rf_serializers.CharField()}),
            400: CartMutationError,
        },
        examples=[OpenApiExample("Cleared", value={"status": "cleared"})],
    )
    def post(self, request):
        session_id = self.session_id(request)
        if not session_id:
            return self.missing_session()
        clear_cart(session_id=session_id)
        return Response({"status": "cleared"}, status=status.HTTP_200_OK)


class CartCheckoutView(GuestCartMixin, APIView):
    """Create an order from the cart and start Stripe Checkout."""

    permission_classes = [AllowAny]
    throttle_scope = "checkout"

    @extend_schema(
        tags=["Cart Endpoints"],
        summary="Checkout cart",
        description=(
            "Validates the shipping form, snapshots the cart into a pending order and returns the Stripe "
            "Checkout URL. Idempotent when the Idempotency-Key header is set."
        ),
        request=CheckoutSerializer,
        parameters=[
            SESSION_HEADER,
            OpenApiParameter(
                name="Idempotency-Key",
                location=OpenApiParameter.HEADER,
                required=False,
                description="When provided, checkout becomes idempotent for this session+path+method",
                type=str,
            ),
        ],
        responses={200: CheckoutResponseSerializer, 400: CartMutationError, 409: CartMutationError, 502: CartMutationError},
        examples=[
            OpenApiExample(
                "Checkout",
                value={
                    "orderId": "5d1f0c7e-8a57-4d3e-9b0e-2f4b8f1a9c21",
                    "url": "https://checkout.stripe.com/c/pay/cs_test_a1",
                    "sessionId": "cs_test_a1",
                },
                response_only=True,
            ),
            OpenApiExample("Empty Cart", value={"detail": "Cart is empty."}, response_only=True),
        ],
    )
    def post(self, request):
        session_id = self.session_id(request)
        if not session_id:
            return self.missing_session()
        serializer = CheckoutSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        shipping = dict(serializer.validated_data["shippingDetails"])

        def _checkout_handler():
            try:
                return checkout_cart(session_id=session_id, shipping=shipping), 200
            except CartError as exc:
                return {"detail": str(exc)}, 400
            except PaymentError as exc:
                return {"detail": str(exc)}, 502

        idem_key = request.headers.get("Idempotency-Key")
        if idem_key:
            body, code = with_idempotency(
                key=idem_key,
                user=None,
                path=str(request.path),
                method=str(request.method),
                request_hash=compute_request_hash(getattr(request, "data", None)),
                handler=_checkout_handler,
                scope=f"session:{session_id}",
            )
            return Response(body, status=code)
        body, code = _checkout_handler()
        return Response(body, status=code)
