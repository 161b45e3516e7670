"""Design serializers: camelCase read shape plus request validators."""

from rest_framework import serializers

from .models import Design
from .services import PROMPT_MAX_LENGTH


class DesignSerializer(serializers.ModelSerializer):
    imageUrl = serializers.URLField(source="image_url", read_only=True)
    noBackgroundUrl = serializers.SerializerMethodField()
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)

    class Meta:
        model = Design
        fields = ["id", "prompt", "imageUrl", "noBackgroundUrl", "createdAt"]

    def get_noBackgroundUrl(self, obj):
        return obj.no_background_url or None


class GenerateDesignSerializer(serializers.Serializer):
    prompt = serializers.CharField(max_length=PROMPT_MAX_LENGTH, trim_whitespace=True)
    userId = serializers.CharField(max_length=64, required=False, allow_blank=True, default="")
    regenerate = serializers.BooleanField(required=False, default=False)
    referenceUrl = serializers.URLField(max_length=500, required=False, allow_blank=True, default="")
    creatorMode = serializers.BooleanField(required=False, default=False)


class RemoveBackgroundSerializer(serializers.Serializer):
    imageId = serializers.IntegerField(min_value=1)
