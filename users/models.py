"""User model for authentication.

Creators sign in with magic links, so accounts are keyed by email. The
`username` column is kept (Django admin relies on it) and mirrors the email.
"""

from django.contrib.auth.models import AbstractUser
from django.db import models


class User(AbstractUser):
    """Custom user with unique email and verification state.

    Fields:
    - email: the primary email, unique at the database level (normalized).
    - email_verified: set once a magic link sent to the email was confirmed.
    """

    email = models.EmailField(unique=True)
    email_verified = models.BooleanField(default=False)

    def save(self, *args, **kwargs):
        """Normalize the email and default the username to it."""
        if self.email:
            self.email = self.email.strip().lower()
        if not self.username and self.email:
            self.username = self.email[:150]
        super().save(*args, **kwargs)
