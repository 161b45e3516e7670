"""DRF serializers for Orders.

Read serializers expose camelCase keys to the storefront; the shipping
form serializer maps the storefront's camelCase fields onto model field
names so validated data can be passed straight to the order services.
"""

from common.choices import ShippingCountry
from rest_framework import serializers

from .models import Order, OrderItem


class ShippingDetailsSerializer(serializers.Serializer):
    """Checkout shipping form."""

    firstName = serializers.CharField(source="first_name", max_length=100)
    lastName = serializers.CharField(source="last_name", max_length=100)
    email = serializers.EmailField()
    phone = serializers.CharField(max_length=32, required=False, allow_blank=True, default="")
    country = serializers.ChoiceField(choices=ShippingCountry.choices)
    region = serializers.CharField(max_length=100, required=False, allow_blank=True, default="")
    address1 = serializers.CharField(max_length=255)
    address2 = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")
    city = serializers.CharField(max_length=100)
    zip = serializers.CharField(max_length=20)


class OrderItemSerializer(serializers.ModelSerializer):
    designId = serializers.IntegerField(source="design_id", read_only=True, allow_null=True)
    imageUrl = serializers.URLField(source="image_url", read_only=True)
    unitPrice = serializers.DecimalField(source="unit_price", max_digits=12, decimal_places=2, read_only=True)
    lineTotal = serializers.DecimalField(source="line_total", max_digits=12, decimal_places=2, read_only=True)

    class Meta:
        model = OrderItem
        fields = ["id", "designId", "imageUrl", "quantity", "unitPrice", "lineTotal"]


class OrderSerializer(serializers.ModelSerializer):
    """Public order status page payload; addressed by `public_id`."""

    id = serializers.UUIDField(source="public_id", read_only=True)
    items = OrderItemSerializer(many=True, read_only=True)
    firstName = serializers.CharField(source="first_name", read_only=True)
    lastName = serializers.CharField(source="last_name", read_only=True)
    printifyOrderId = serializers.SerializerMethodField()
    stripePaymentId = serializers.SerializerMethodField()
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)
    updatedAt = serializers.DateTimeField(source="updated_at", read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "number",
            "status",
            "source",
            "email",
            "firstName",
            "lastName",
            "phone",
            "country",
            "region",
            "address1",
            "address2",
            "city",
            "zip",
            "items",
            "subtotal",
            "discount",
            "shipping",
            "total",
            "printifyOrderId",
            "stripePaymentId",
            "createdAt",
            "updatedAt",
        ]

    def get_printifyOrderId(self, obj: Order):
        return obj.printify_order_id or None

    def get_stripePaymentId(self, obj: Order):
        return obj.stripe_payment_id or None


class CheckoutResponseSerializer(serializers.Serializer):
    orderId = serializers.UUIDField()
    url = serializers.URLField()
    sessionId = serializers.CharField()
