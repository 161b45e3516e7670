"""Design services: generation and background removal.

Provider calls happen outside database transactions; only the final
write is atomic.
"""

import logging

from django.db import transaction

from . import providers
from .models import Design

logger = logging.getLogger("chaos.designs")

PROMPT_MAX_LENGTH = 1000


class DesignError(Exception):
    """Raised for invalid design operations."""


def find_existing_design(*, user_key: str, prompt: str, reference_url: str = "") -> Design | None:
    """Return a previous design by the same client for the same prompt and reference."""

    if not user_key:
        return None
    return (
        Design.objects.filter(user_key=user_key, prompt=prompt, reference_url=reference_url or "")
        .order_by("-created_at", "-id")
        .first()
    )


def generate_design(
    *,
    prompt: str,
    user_key: str = "",
    regenerate: bool = False,
    reference_url: str = "",
    creator=None,
) -> Design:
    """Generate a sticker design, reusing the previous result unless `regenerate` is set."""

    prompt = (prompt or "").strip()
    if not prompt:
        raise DesignError("Prompt is required.")
    if len(prompt) > PROMPT_MAX_LENGTH:
        raise DesignError(f"Prompt must be at most {PROMPT_MAX_LENGTH} characters.")

    if not regenerate:
        existing = find_existing_design(user_key=user_key, prompt=prompt, reference_url=reference_url)
        if existing is not None:
            if creator is not None and existing.creator_id is None:
                existing.creator = creator
                existing.save(update_fields=["creator", "updated_at"])
            logger.info("design.reused", extra={"event": "design.reused", "design_id": existing.id})
            return existing

    content = providers.generate_image(prompt, reference_url=reference_url or None)
    image_url = providers.store_image(content, folder="designs")

    with transaction.atomic():
        design = Design.objects.create(
            user_key=user_key or "",
            creator=creator,
            prompt=prompt,
            image_url=image_url,
            reference_url=reference_url or "",
        )
    logger.info(
        "design.generated",
        extra={
            "event": "design.generated",
            "design_id": design.id,
            "creator_id": getattr(creator, "id", None),
            "regenerate": regenerate,
        },
    )
    return design


def remove_design_background(*, design: Design) -> Design:
    """Store a background-free copy of the design. Safe to call repeatedly."""

    if design.no_background_url:
        return design

    content = providers.remove_background(design.image_url)
    url = providers.store_image(content, folder="designs/no-background")
    design.no_background_url = url
    design.save(update_fields=["no_background_url", "updated_at"])
    logger.info("design.background_removed", extra={"event": "design.background_removed", "design_id": design.id})
    return design
