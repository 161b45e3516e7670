"""User services for the magic-link sign in flow.

Provides helpers to build frontend links, send the sign-in email, verify
the returned token and mint JWTs for the creator dashboard.
"""

from urllib.parse import urlencode

from django.conf import settings
from django.contrib.auth import get_user_model
from django.contrib.auth.models import update_last_login
from django.core.mail import send_mail
from django.db import transaction
from rest_framework_simplejwt.tokens import RefreshToken

from .tokens import magic_link_token


class MagicLinkError(Exception):
    """Raised when a magic link cannot be verified."""


def build_frontend_url(path: str, query: dict | None = None) -> str:
    """Construct a full frontend URL for the given path and query.

    Reads `FRONTEND_URL` from settings and trims trailing slashes.
    """
    base = (getattr(settings, "FRONTEND_URL", None) or "").rstrip("/")
    url = f"{base}{path}"
    if query:
        url = f"{url}?{urlencode(query)}"
    return url


def send_magic_link_email(user, *, is_new: bool) -> str:
    """Email a single-use sign-in link to the user and return the token."""
    token = magic_link_token.make_token(user)
    link = build_frontend_url("/creator/verify", {"email": user.email, "token": token})
    if is_new:
        subject = "Finish creating your Chaos Stickers creator account"
        intro = "Welcome to Chaos Stickers! Confirm your email to set up your store:"
    else:
        subject = "Your Chaos Stickers sign-in link"
        intro = "Use this link to sign in to your creator dashboard:"
    minutes = settings.MAGIC_LINK_TIMEOUT // 60
    send_mail(
        subject=subject,
        message=f"{intro} {link}\n\nThe link expires in {minutes} minutes and can only be used once.",
        from_email=None,
        recipient_list=[user.email],
    )
    return token


@transaction.atomic
def request_magic_link(*, email: str):
    """Get or create the creator account for `email` and send a sign-in link.

    Returns `(user, is_new_creator)`.
    """
    from creators.services import ensure_creator_profile

    User = get_user_model()
    email = email.strip().lower()
    user, created = User.objects.get_or_create(email=email, defaults={"username": email[:150]})
    if created:
        # Creators never sign in with a password
        user.set_unusable_password()
        user.save(update_fields=["password"])
    _, is_new = ensure_creator_profile(user)
    send_magic_link_email(user, is_new=is_new)
    return user, is_new


def verify_magic_link(*, email: str, token: str):
    """Validate a magic link and mark the user's email verified.

    Updating `last_login` invalidates the token for any later attempt.
    """
    User = get_user_model()
    try:
        user = User.objects.get(email=(email or "").strip().lower(), is_active=True)
    except User.DoesNotExist:
        raise MagicLinkError("Invalid or expired link.")
    if not token or not magic_link_token.check_token(user, token):
        raise MagicLinkError("Invalid or expired link.")
    if not user.email_verified:
        user.email_verified = True
        user.save(update_fields=["email_verified"])
    update_last_login(None, user)
    return user


def issue_session_tokens(user) -> dict:
    """Return a fresh access/refresh pair for the user."""
    refresh = RefreshToken.for_user(user)
    return {"access": str(refresh.access_token), "refresh": str(refresh)}
