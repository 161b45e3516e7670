"""Creator services: store name rules, profile bootstrap and onboarding."""

import logging
import re
import secrets

from django.db import IntegrityError, transaction

from .models import Creator

logger = logging.getLogger("chaos.creators")

STORE_NAME_MIN_LENGTH = 3
STORE_NAME_MAX_LENGTH = 30
STORE_NAME_RE = re.compile(r"^[a-z0-9][a-z0-9-]*[a-z0-9]$")
RESERVED_STORE_NAMES = frozenset({"admin", "api", "me", "profile", "shop", "creator", "creators", "drops", "support"})


class CreatorError(Exception):
    """Raised for invalid creator profile changes."""


def validate_store_name(store_name: str) -> str | None:
    """Return an error message for a malformed store name, or None."""

    if not store_name:
        return "Store name is required."
    if not (STORE_NAME_MIN_LENGTH <= len(store_name) <= STORE_NAME_MAX_LENGTH):
        return f"Store name must be {STORE_NAME_MIN_LENGTH}-{STORE_NAME_MAX_LENGTH} characters."
    if not STORE_NAME_RE.match(store_name):
        return "Use lowercase letters, numbers and hyphens; start and end with a letter or number."
    if store_name in RESERVED_STORE_NAMES:
        return "This store name is reserved."
    return None


def is_store_name_available(store_name: str, *, exclude: Creator | None = None) -> tuple[bool, str | None]:
    """Check format and uniqueness. A creator's own name counts as available."""

    error = validate_store_name(store_name)
    if error:
        return False, error
    qs = Creator.objects.filter(store_name=store_name)
    if exclude is not None:
        qs = qs.exclude(pk=exclude.pk)
    if qs.exists():
        return False, "This store name is already taken."
    return True, None


def generate_temporary_store_name() -> str:
    while True:
        candidate = f"creator-{secrets.token_hex(4)}"
        if not Creator.objects.filter(store_name=candidate).exists():
            return candidate


@transaction.atomic
def ensure_creator_profile(user) -> tuple[Creator, bool]:
    """Return the user's creator profile, creating it on first sign in.

    The flag is True while the creator still has to finish onboarding.
    """

    creator = Creator.objects.filter(user=user).first()
    if creator is None:
        creator = Creator.objects.create(user=user, store_name=generate_temporary_store_name())
        logger.info(
            "creator.created",
            extra={"event": "creator.created", "creator_id": creator.id, "user_id": user.id},
        )
    return creator, creator.needs_onboarding


@transaction.atomic
def update_profile(*, creator: Creator, name: str, store_name: str, bio: str = "") -> Creator:
    """Apply onboarding/profile edits and mark the creator onboarded."""

    store_name = (store_name or "").strip().lower()
    available, error = is_store_name_available(store_name, exclude=creator)
    if not available:
        raise CreatorError(error)
    if len(bio or "") > 500:
        raise CreatorError("Bio must be at most 500 characters.")

    creator.name = (name or "").strip()
    creator.store_name = store_name
    creator.bio = bio or ""
    creator.is_onboarded = True
    try:
        with transaction.atomic():
            creator.save(update_fields=["name", "store_name", "bio", "is_onboarded", "updated_at"])
    except IntegrityError:
        raise CreatorError("This store name is already taken.")
    logger.info(
        "creator.profile_updated",
        extra={"event": "creator.profile_updated", "creator_id": creator.id, "store_name": store_name},
    )
    return creator
