from .base import *  # noqa
from .base import BASE_DIR
from .base import REST_FRAMEWORK as BASE_REST_FRAMEWORK

DEBUG = False

# Use a local SQLite database for reliability and speed in tests
DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": BASE_DIR / "test_db.sqlite3",
    }
}

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

# Outbox-backed email so tests can assert on sent messages
EMAIL_BACKEND = "django.core.mail.backends.locmem.EmailBackend"

# Manifest storage needs collectstatic; generated media stays in memory
STORAGES = {
    "default": {
        "BACKEND": "django.core.files.storage.InMemoryStorage",
    },
    "staticfiles": {
        "BACKEND": "django.contrib.staticfiles.storage.StaticFilesStorage",
    },
}

FRONTEND_URL = "http://frontend.test"
BACKEND_URL = "http://testserver"

STRIPE_SECRET_KEY = "sk_test_dummy"
STRIPE_WEBHOOK_SECRET = "whsec_test_dummy"
PRINTIFY_API_TOKEN = "printify-test-token"
PRINTIFY_SHOP_ID = "12345"
PRINTIFY_WEBHOOK_TOKEN = "printify-hook-token"
# Tests opt in to Printify submission explicitly
FULFILLMENT_AUTO_SUBMIT = False
OPENAI_API_KEY = "sk-openai-test"
REMOVE_BG_API_KEY = "removebg-test"

# Relax throttling for tests to reduce flakiness
REST_FRAMEWORK = {**BASE_REST_FRAMEWORK}
REST_FRAMEWORK["DEFAULT_THROTTLE_RATES"] = {
    scope: "1000/min" for scope in BASE_REST_FRAMEWORK.get("DEFAULT_THROTTLE_RATES", {})
}
