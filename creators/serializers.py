"""Creator serializers for dashboard, onboarding and public storefronts."""

from rest_framework import serializers

from .models import Creator
from .services import STORE_NAME_MAX_LENGTH


class CreatorSerializer(serializers.ModelSerializer):
    """Private view of the signed-in creator."""

    email = serializers.EmailField(source="user.email", read_only=True)
    profileImageUrl = serializers.URLField(source="profile_image_url", read_only=True)
    storeName = serializers.CharField(source="store_name", read_only=True)
    isVerified = serializers.BooleanField(source="is_verified", read_only=True)
    needsOnboarding = serializers.BooleanField(source="needs_onboarding", read_only=True)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)

    class Meta:
        model = Creator
        fields = [
            "id",
            "email",
            "name",
            "bio",
            "profileImageUrl",
            "storeName",
            "isVerified",
            "needsOnboarding",
            "createdAt",
        ]


class CreatorPublicSerializer(serializers.ModelSerializer):
    """Public storefront header; never exposes the email."""

    profileImageUrl = serializers.URLField(source="profile_image_url", read_only=True)
    storeName = serializers.CharField(source="store_name", read_only=True)

    class Meta:
        model = Creator
        fields = ["id", "name", "bio", "profileImageUrl", "storeName"]


class ProfileUpdateSerializer(serializers.Serializer):
    """Write serializer for onboarding and later profile edits."""

    name = serializers.CharField(max_length=120)
    storeName = serializers.CharField(max_length=STORE_NAME_MAX_LENGTH)
    bio = serializers.CharField(max_length=500, required=False, allow_blank=True, default="")


class _DropCountsSerializer(serializers.Serializer):
    total = serializers.IntegerField()
    published = serializers.IntegerField()
    draft = serializers.IntegerField()


class _TotalSerializer(serializers.Serializer):
    total = serializers.IntegerField()


class _EarningsSerializer(serializers.Serializer):
    totalGross = serializers.DecimalField(max_digits=12, decimal_places=2)
    totalPayout = serializers.DecimalField(max_digits=12, decimal_places=2)


class CreatorAnalyticsSerializer(serializers.Serializer):
    drops = _DropCountsSerializer()
    designs = _TotalSerializer()
    orders = _TotalSerializer()
    earnings = _EarningsSerializer()
