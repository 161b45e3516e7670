"""Token generator for creator magic-link sign in.

Extends Django's PasswordResetTokenGenerator. The hash is bound to the
user's last login and verification state, so a link stops working as soon
as it has been used once.
"""

from django.conf import settings
from django.contrib.auth.tokens import PasswordResetTokenGenerator
from django.utils.http import base36_to_int


class MagicLinkTokenGenerator(PasswordResetTokenGenerator):
    """Single-use sign-in token with its own, shorter expiry.

    `settings.MAGIC_LINK_TIMEOUT` bounds the token age on top of the
    password reset timeout enforced by the base class.
    """

    key_salt = "users.tokens.MagicLinkTokenGenerator"

    def _make_hash_value(self, user, timestamp):
        login_timestamp = "" if user.last_login is None else user.last_login.replace(microsecond=0, tzinfo=None)
        return f"{user.pk}{user.email}{user.email_verified}{login_timestamp}{timestamp}"

    def check_token(self, user, token):
        if not super().check_token(user, token):
            return False
        try:
            ts = base36_to_int(token.split("-")[0])
        except ValueError:
            return False
        return (self._num_seconds(self._now()) - ts) <= settings.MAGIC_LINK_TIMEOUT


magic_link_token = MagicLinkTokenGenerator()
