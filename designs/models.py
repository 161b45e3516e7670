"""Designs app models.

A design is one AI-generated sticker image. Shoppers are anonymous and
identified by a client-generated `user_key`; creators also own the
designs they generate in creator mode.
"""

from django.db import models


class TimeStampedModel(models.Model):
    """Abstract base model adding created/updated timestamps."""

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class Design(TimeStampedModel):
    """Generated sticker image and its optional background-free version."""

    user_key = models.CharField(max_length=64, blank=True, db_index=True)
    creator = models.ForeignKey(
        "creators.Creator",
        null=True,
        blank=True,
        related_name="designs",
        on_delete=models.SET_NULL,
    )
    prompt = models.TextField(max_length=1000)
    image_url = models.URLField(max_length=500)
    no_background_url = models.URLField(max_length=500, blank=True)
    reference_url = models.URLField(max_length=500, blank=True)
    is_public = models.BooleanField(default=True, db_index=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["user_key", "created_at"], name="design_user_created_idx"),
            models.Index(fields=["creator", "created_at"], name="design_creator_created_idx"),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return f"Design#{self.id} {self.prompt[:40]}"

    @property
    def effective_image_url(self) -> str:
        """URL that should be printed: background-free when available."""
        return self.no_background_url or self.image_url
