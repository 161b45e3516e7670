"""Drop, pack and shop serializers (camelCase JSON)."""

from common.choices import PackType, ShippingCountry
from creators.serializers import CreatorPublicSerializer
from orders.serializers import ShippingDetailsSerializer
from rest_framework import serializers

from .models import Drop, DropDesign, Pack
from .selectors import hero_image_url


class DropDesignSerializer(serializers.ModelSerializer):
    designId = serializers.IntegerField(source="design_id", read_only=True)
    imageUrl = serializers.CharField(source="design.effective_image_url", read_only=True)
    prompt = serializers.CharField(source="design.prompt", read_only=True)
    displayOrder = serializers.IntegerField(source="display_order", read_only=True)
    isHero = serializers.BooleanField(source="is_hero", read_only=True)

    class Meta:
        model = DropDesign
        fields = ["id", "designId", "imageUrl", "prompt", "displayOrder", "isHero"]


class PackSerializer(serializers.ModelSerializer):
    designCount = serializers.IntegerField(source="design_count", read_only=True)
    isDefault = serializers.BooleanField(source="is_default", read_only=True)
    isActive = serializers.BooleanField(source="is_active", read_only=True)

    class Meta:
        model = Pack
        fields = ["id", "type", "name", "description", "designCount", "price", "isDefault", "isActive"]


class DropSerializer(serializers.ModelSerializer):
    """Creator dashboard view of a drop."""

    publishedAt = serializers.DateTimeField(source="published_at", read_only=True)
    heroImage = serializers.SerializerMethodField()
    designs = DropDesignSerializer(source="drop_designs", many=True, read_only=True)
    packs = PackSerializer(many=True, read_only=True)
    _count = serializers.SerializerMethodField(method_name="get_counts")
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)
    updatedAt = serializers.DateTimeField(source="updated_at", read_only=True)

    class Meta:
        model = Drop
        fields = [
            "id",
            "title",
            "slug",
            "description",
            "status",
            "publishedAt",
            "heroImage",
            "designs",
            "packs",
            "_count",
            "createdAt",
            "updatedAt",
        ]

    def get_heroImage(self, obj):
        return hero_image_url(obj)

    def get_counts(self, obj):
        design_count = getattr(obj, "design_count", None)
        order_count = getattr(obj, "order_count", None)
        if design_count is None:
            design_count = obj.drop_designs.count()
        return {"designs": design_count, "orders": order_count or 0}


class DropListSerializer(DropSerializer):
    class Meta(DropSerializer.Meta):
        fields = ["id", "title", "slug", "description", "status", "publishedAt", "heroImage", "_count", "createdAt"]


class ShopDropSerializer(serializers.ModelSerializer):
    """Published drop as listed in the shop and on storefronts."""

    creator = CreatorPublicSerializer(read_only=True)
    publishedAt = serializers.DateTimeField(source="published_at", read_only=True)
    designCount = serializers.IntegerField(source="design_count", read_only=True)
    heroImage = serializers.SerializerMethodField()
    startingPrice = serializers.DecimalField(
        source="starting_price", max_digits=10, decimal_places=2, read_only=True, allow_null=True
    )

    class Meta:
        model = Drop
        fields = ["id", "title", "slug", "description", "publishedAt", "creator", "designCount", "heroImage", "startingPrice"]

    def get_heroImage(self, obj):
        return hero_image_url(obj)


class ShopDropDetailSerializer(ShopDropSerializer):
    designs = DropDesignSerializer(source="drop_designs", many=True, read_only=True)
    packs = PackSerializer(source="active_packs", many=True, read_only=True)

    class Meta(ShopDropSerializer.Meta):
        fields = ShopDropSerializer.Meta.fields + ["designs", "packs"]


class DropCreateSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=120)
    description = serializers.CharField(max_length=2000, required=False, allow_blank=True, default="")


class DropUpdateSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=120, required=False)
    description = serializers.CharField(max_length=2000, required=False, allow_blank=True)


class AddDropDesignSerializer(serializers.Serializer):
    imageId = serializers.IntegerField(min_value=1)
    isHero = serializers.BooleanField(required=False, default=False)


class PackCreateSerializer(serializers.Serializer):
    type = serializers.ChoiceField(choices=PackType.choices)
    name = serializers.CharField(max_length=120)
    description = serializers.CharField(max_length=500, required=False, allow_blank=True, default="")
    designCount = serializers.IntegerField(min_value=1)
    price = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0)
    isDefault = serializers.BooleanField(required=False, default=False)


class PackSelectionSerializer(serializers.Serializer):
    packId = serializers.IntegerField(min_value=1)
    selectedDesignIds = serializers.ListField(
        child=serializers.IntegerField(min_value=1), required=False, default=list, max_length=200
    )
    quantity = serializers.IntegerField(min_value=1, max_value=100, required=False, default=1)


class CalculatePriceSerializer(PackSelectionSerializer):
    country = serializers.ChoiceField(choices=ShippingCountry.choices, required=False, default=ShippingCountry.US)


class PackCheckoutSerializer(PackSelectionSerializer):
    shippingDetails = ShippingDetailsSerializer()
