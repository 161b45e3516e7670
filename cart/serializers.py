"""Cart serializers for read and write operations."""

from orders.serializers import ShippingDetailsSerializer
from rest_framework import serializers

from .models import CartItem
from .selectors import cart_totals
from .services import MAX_LINE_QUANTITY


class CartItemReadSerializer(serializers.ModelSerializer):
    """Read serializer for a cart item."""

    designId = serializers.IntegerField(source="design_id", read_only=True)
    imageUrl = serializers.URLField(source="image_url", read_only=True)
    unitPrice = serializers.DecimalField(source="unit_price", max_digits=12, decimal_places=2, read_only=True)
    lineTotal = serializers.DecimalField(source="line_total", max_digits=12, decimal_places=2, read_only=True)

    class Meta:
        model = CartItem
        fields = ["id", "designId", "imageUrl", "quantity", "unitPrice", "lineTotal"]


class CartReadSerializer(serializers.Serializer):
    """Read serializer for the cart summary and items."""

    id = serializers.IntegerField()
    items = CartItemReadSerializer(many=True)
    quantity = serializers.IntegerField()
    subtotal = serializers.DecimalField(max_digits=12, decimal_places=2)
    discount = serializers.DecimalField(max_digits=12, decimal_places=2)
    discountRate = serializers.DecimalField(max_digits=5, decimal_places=2)
    shipping = serializers.DecimalField(max_digits=12, decimal_places=2)
    total = serializers.DecimalField(max_digits=12, decimal_places=2)

    @classmethod
    def from_cart(cls, *, cart):
        totals = cart_totals(cart=cart)
        return cls(
            {
                "id": cart.id,
                "items": list(cart.items.all()),
                "quantity": totals.quantity,
                "subtotal": totals.subtotal,
                "discount": totals.discount,
                "discountRate": totals.discount_rate,
                "shipping": totals.shipping,
                "total": totals.total,
            }
        )


class AddItemSerializer(serializers.Serializer):
    """A Checkout Item posted by the storefront; `id` is the design id."""

    id = serializers.IntegerField(min_value=1)
    imageUrl = serializers.CharField(max_length=500, required=False, allow_blank=True, default="")
    quantity = serializers.IntegerField(min_value=1, max_value=MAX_LINE_QUANTITY, required=False, default=1)


class UpdateItemQuantitySerializer(serializers.Serializer):
    quantity = serializers.IntegerField(min_value=1, max_value=MAX_LINE_QUANTITY)


class SyncCartSerializer(serializers.Serializer):
    """Raw local-storage items; entries are filtered, not rejected."""

    items = serializers.ListField(child=serializers.JSONField(), allow_empty=True, max_length=500)


class CheckoutSerializer(serializers.Serializer):
    shippingDetails = ShippingDetailsSerializer()
