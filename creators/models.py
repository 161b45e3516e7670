"""Creator profiles.

A creator is a user who curates generated designs into drops and sells
them from a storefront addressed by `store_name`.
"""

from django.conf import settings
from django.db import models


class TimeStampedModel(models.Model):
    """Abstract base model adding created/updated timestamps."""

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class Creator(TimeStampedModel):
    """Storefront owner bound one-to-one to a user account.

    New creators get a temporary `creator-xxxx` store name and stay in
    onboarding until they pick their own name.
    """

    user = models.OneToOneField(settings.AUTH_USER_MODEL, related_name="creator", on_delete=models.CASCADE)
    name = models.CharField(max_length=120, blank=True)
    bio = models.TextField(max_length=500, blank=True)
    profile_image_url = models.URLField(max_length=500, blank=True)
    store_name = models.CharField(max_length=30, unique=True)
    is_onboarded = models.BooleanField(default=False)

    class Meta:
        ordering = ["store_name"]

    def __str__(self) -> str:  # pragma: no cover
        return self.store_name

    @property
    def is_verified(self) -> bool:
        return bool(self.user.email_verified)

    @property
    def needs_onboarding(self) -> bool:
        return not self.is_onboarded
