"""Serializers for the magic-link auth flow.

- MagicLinkRequestSerializer: validates the email a link is sent to.
- MagicLinkVerifySerializer: validates the email/token pair from the link.
"""

from rest_framework import serializers


class MagicLinkRequestSerializer(serializers.Serializer):
    email = serializers.EmailField()

    def validate_email(self, value: str) -> str:
        return value.strip().lower()


class MagicLinkVerifySerializer(serializers.Serializer):
    email = serializers.EmailField()
    token = serializers.CharField(max_length=128)


class SignOutSerializer(serializers.Serializer):
    refresh = serializers.CharField()
