from decimal import Decimal
from pathlib import Path

from decouple import Csv, config

BASE_DIR = Path(__file__).resolve().parent.parent.parent

# Core security
SECRET_KEY = config("SECRET_KEY", default="dev-secret-key-change-me")

# Hosts and CORS
ALLOWED_HOSTS = config("ALLOWED_HOSTS", default="localhost,127.0.0.1", cast=Csv())
CORS_ALLOW_ALL_ORIGINS = config("CORS_ALLOW_ALL_ORIGINS", default=True, cast=bool)
CORS_ALLOWED_ORIGINS = config("CORS_ALLOWED_ORIGINS", default="", cast=Csv())
CSRF_TRUSTED_ORIGINS = config("CSRF_TRUSTED_ORIGINS", default="", cast=Csv())

INSTALLED_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
    # Third-party
    "rest_framework",
    "django_filters",
    "drf_spectacular",
    "corsheaders",
    "rest_framework_simplejwt.token_blacklist",
    # Local
    "users",
    "creators",
    "designs",
    "drops",
    "cart",
    "orders",
    "fulfillment",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "corsheaders.middleware.CorsMiddleware",
    "whitenoise.middleware.WhiteNoiseMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]

ROOT_URLCONF = "config.urls"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [BASE_DIR / "templates"],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.debug",
                "django.template.context_processors.request",
                "django.contrib.auth.context_processors.auth",
                "django.contrib.messages.context_processors.messages",
            ],
        },
    },
]

WSGI_APPLICATION = "config.wsgi.application"
ASGI_APPLICATION = "config.asgi.application"

# Database
DB_ENGINE = config("DATABASE_ENGINE", default="sqlite")
if DB_ENGINE.lower() == "postgres":
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.postgresql",
            "NAME": config("DATABASE_NAME", default="postgres"),
            "USER": config("DATABASE_USER", default="postgres"),
            "PASSWORD": config("DATABASE_PASSWORD", default=""),
            "HOST": config("DATABASE_HOST", default="localhost"),
            "PORT": config("DATABASE_PORT", default="5432"),
        }
    }
else:
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.sqlite3",
            "NAME": BASE_DIR / "db.sqlite3",
        }
    }

AUTH_PASSWORD_VALIDATORS = [
    {"NAME": "django.contrib.auth.password_validation.UserAttributeSimilarityValidator"},
    {"NAME": "django.contrib.auth.password_validation.MinimumLengthValidator"},
    {"NAME": "django.contrib.auth.password_validation.CommonPasswordValidator"},
    {"NAME": "django.contrib.auth.password_validation.NumericPasswordValidator"},
]

LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

# Static and media files
STATIC_URL = "/static/"
STATIC_ROOT = BASE_DIR / "staticfiles"
MEDIA_URL = config("MEDIA_URL", default="/media/")
MEDIA_ROOT = config("MEDIA_ROOT", default=str(BASE_DIR / "media"))

# Django 5 storages: generated stickers live in the default storage
STORAGES = {
    "default": {
        "BACKEND": "django.core.files.storage.FileSystemStorage",
    },
    "staticfiles": {
        "BACKEND": "whitenoise.storage.CompressedManifestStaticFilesStorage",
    },
}

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"
AUTH_USER_MODEL = "users.User"

# Public URLs used in emails, Stripe redirects and absolute media links
FRONTEND_URL = config("FRONTEND_URL", default="http://localhost:3000")
BACKEND_URL = config("BACKEND_URL", default="http://localhost:8000")

# Email (dev defaults to console backend; override via env for SMTP)
EMAIL_BACKEND = config(
    "EMAIL_BACKEND",
    default="django.core.mail.backends.console.EmailBackend",
)
EMAIL_HOST = config("EMAIL_HOST", default="")
EMAIL_PORT = config("EMAIL_PORT", default=587, cast=int)
EMAIL_HOST_USER = config("EMAIL_HOST_USER", default="")
EMAIL_HOST_PASSWORD = config("EMAIL_HOST_PASSWORD", default="")
EMAIL_USE_TLS = config("EMAIL_USE_TLS", default=True, cast=bool)
EMAIL_USE_SSL = config("EMAIL_USE_SSL", default=False, cast=bool)
DEFAULT_FROM_EMAIL = config("DEFAULT_FROM_EMAIL", default="Chaos Stickers <noreply@chaos-stickers.com>")

# Magic links expire after this many seconds
MAGIC_LINK_TIMEOUT = config("MAGIC_LINK_TIMEOUT", default=60 * 30, cast=int)

# Image generation (OpenAI) and background removal (remove.bg)
OPENAI_API_KEY = config("OPENAI_API_KEY", default="")
IMAGE_GENERATION_MODEL = config("IMAGE_GENERATION_MODEL", default="dall-e-3")
IMAGE_GENERATION_SIZE = config("IMAGE_GENERATION_SIZE", default="1024x1024")
IMAGE_DOWNLOAD_TIMEOUT_SECONDS = config("IMAGE_DOWNLOAD_TIMEOUT_SECONDS", default=30.0, cast=float)
REMOVE_BG_API_KEY = config("REMOVE_BG_API_KEY", default="")
REMOVE_BG_URL = config("REMOVE_BG_URL", default="https://api.remove.bg/v1.0/removebg")

# Stripe Checkout
STRIPE_SECRET_KEY = config("STRIPE_SECRET_KEY", default="")
STRIPE_WEBHOOK_SECRET = config("STRIPE_WEBHOOK_SECRET", default="")
STRIPE_CURRENCY = config("STRIPE_CURRENCY", default="usd")

# Printify fulfillment
PRINTIFY_API_TOKEN = config("PRINTIFY_API_TOKEN", default="")
PRINTIFY_SHOP_ID = config("PRINTIFY_SHOP_ID", default="")
PRINTIFY_BASE_URL = config("PRINTIFY_BASE_URL", default="https://api.printify.com/v1")
PRINTIFY_BLUEPRINT_ID = config("PRINTIFY_BLUEPRINT_ID", default=400, cast=int)
PRINTIFY_PRINT_PROVIDER_ID = config("PRINTIFY_PRINT_PROVIDER_ID", default=99, cast=int)
PRINTIFY_VARIANT_ID = config("PRINTIFY_VARIANT_ID", default=45740, cast=int)
PRINTIFY_TIMEOUT_SECONDS = config("PRINTIFY_TIMEOUT_SECONDS", default=30.0, cast=float)
PRINTIFY_WEBHOOK_TOKEN = config("PRINTIFY_WEBHOOK_TOKEN", default="")
# Submit paid orders to Printify right after payment
FULFILLMENT_AUTO_SUBMIT = config("FULFILLMENT_AUTO_SUBMIT", default=True, cast=bool)

# Pricing (USD)
STICKER_UNIT_PRICE = config("STICKER_UNIT_PRICE", default="10.00", cast=Decimal)
# Quantity threshold -> discount rate; the highest threshold reached applies
STICKER_VOLUME_DISCOUNTS = {5: Decimal("0.20")}
PACK_STICKER_PRICE = config("PACK_STICKER_PRICE", default="2.80", cast=Decimal)
FULL_SET_STICKER_PRICE = config("FULL_SET_STICKER_PRICE", default="2.50", cast=Decimal)
CREATOR_PAYOUT_RATE = config("CREATOR_PAYOUT_RATE", default="0.80", cast=Decimal)
SHIPPING_RATES = {
    "US": Decimal("0.00"),
    "CA": Decimal("4.99"),
    "GB": Decimal("4.99"),
    "AU": Decimal("4.99"),
}

# Carts idle longer than this are marked abandoned
CART_ABANDON_TTL_MINUTES = config("CART_ABANDON_TTL_MINUTES", default=60 * 24 * 7, cast=int)

# DRF + Spectacular
REST_FRAMEWORK = {
    "DEFAULT_SCHEMA_CLASS": "drf_spectacular.openapi.AutoSchema",
    "DEFAULT_AUTHENTICATION_CLASSES": [
        "rest_framework_simplejwt.authentication.JWTAuthentication",
        "rest_framework.authentication.SessionAuthentication",
    ],
    "DEFAULT_PERMISSION_CLASSES": [
        "rest_framework.permissions.AllowAny",
    ],
    "DEFAULT_PAGINATION_CLASS": "rest_framework.pagination.PageNumberPagination",
    "PAGE_SIZE": 20,
    "DEFAULT_FILTER_BACKENDS": [
        "django_filters.rest_framework.DjangoFilterBackend",
        "rest_framework.filters.OrderingFilter",
        "rest_framework.filters.SearchFilter",
    ],
    "DEFAULT_THROTTLE_CLASSES": [
        "rest_framework.throttling.ScopedRateThrottle",
        "rest_framework.throttling.UserRateThrottle",
        "rest_framework.throttling.AnonRateThrottle",
    ],
    "DEFAULT_THROTTLE_RATES": {
        # Global throttles
        "user": "200/min",
        "anon": "60/min",
        # Scoped throttles for sensitive flows
        "magic_link": "5/min",
        "magic_link_verify": "20/min",
        "token_refresh": "60/min",
        "signout": "60/min",
        "profile": "120/min",
        "store_name": "60/min",
        "creators": "120/min",
        "designs": "120/min",
        "designs_generate": "10/min",
        "drops": "120/min",
        "drops_write": "60/min",
        "shop": "120/min",
        "cart": "120/min",
        "cart_write": "60/min",
        "checkout": "10/min",
        "orders": "60/min",
        "orders_write": "30/min",
        "webhooks": "600/min",
        "fulfillment": "30/min",
    },
}

SIMPLE_JWT = {
    "ROTATE_REFRESH_TOKENS": True,
    "BLACKLIST_AFTER_ROTATION": True,
}

SPECTACULAR_SETTINGS = {
    "TITLE": "Chaos Stickers API",
    "DESCRIPTION": "Backend API for AI-generated stickers, creator drops and print-on-demand checkout",
    "VERSION": "1.0.0",
    "SERVE_INCLUDE_SCHEMA": False,
}
