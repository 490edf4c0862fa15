"""
Django settings for the course marketplace backend - Production Ready
"""

import os
import dj_database_url
from pathlib import Path
from datetime import timedelta

# .env file for development
from dotenv import load_dotenv

load_dotenv()

# Build paths inside the project like this: BASE_DIR / 'subdir'.
BASE_DIR = Path(__file__).resolve().parent.parent

# SECURITY WARNING: keep the secret key used in production secret!
SECRET_KEY = os.environ.get(
    "SECRET_KEY", "django-insecure-q3v!m0x8c^k2z7d#s1t9w4e6r5y8u0i2o3p4a5s6d7f8g9h0j"
)

# SECURITY WARNING: don't run with debug turned on in production!
DEBUG = os.environ.get("DEBUG", "True").lower() == "true"

# Deployment mode. The payment bypass is only honoured in development.
APP_ENV = os.environ.get(
    "APP_ENV", "development" if DEBUG else "production"
).lower()

# Production-ready ALLOWED_HOSTS
ALLOWED_HOSTS = os.environ.get("ALLOWED_HOSTS", "localhost,127.0.0.1,testserver").split(",")

# Application definition
INSTALLED_APPS = [
    "jazzmin",
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
    # Third Party Apps
    "corsheaders",
    "rest_framework",
    # Local Apps
    "marketplace.apps.MarketplaceConfig",
    "core.stripe_integration.apps.StripeIntegrationConfig",
    "core.clerk_integration.apps.ClerkIntegrationConfig",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "whitenoise.middleware.WhiteNoiseMiddleware",
    "corsheaders.middleware.CorsMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]

# CORS Settings - Production-ready
CORS_ALLOWED_ORIGINS = os.environ.get(
    "CORS_ALLOWED_ORIGINS", "http://localhost:5173,http://localhost:5174"
).split(",")
CORS_ALLOW_CREDENTIALS = True
CORS_ALLOW_METHODS = [
    "DELETE",
    "GET",
    "OPTIONS",
    "PATCH",
    "POST",
    "PUT",
]
CORS_ALLOW_HEADERS = [
    "accept",
    "accept-encoding",
    "authorization",
    "content-type",
    "dnt",
    "origin",
    "user-agent",
    "x-csrftoken",
    "x-requested-with",
    "cache-control",
]
CORS_ALLOWED_ORIGIN_REGEXES = [
    r"^http://localhost:517[0-9]$",
    r"^http://127\.0\.0\.1:517[0-9]$",
]

ROOT_URLCONF = "backend.urls"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [],
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

WSGI_APPLICATION = "backend.wsgi.application"

# Database - Production-ready with PostgreSQL
if os.environ.get("DATABASE_URL"):
    # Production: PostgreSQL
    DATABASES = {"default": dj_database_url.parse(os.environ.get("DATABASE_URL"))}
else:
    # Development: SQLite
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.sqlite3",
            "NAME": BASE_DIR / "db.sqlite3",
        }
    }

# Cache Configuration - Production-ready with Redis
if os.environ.get("REDIS_URL"):
    CACHES = {
        "default": {
            "BACKEND": "django_redis.cache.RedisCache",
            "LOCATION": os.environ.get("REDIS_URL"),
            "OPTIONS": {
                "CLIENT_CLASS": "django_redis.client.DefaultClient",
                "IGNORE_EXCEPTIONS": True,
                "CONNECTION_POOL_KWARGS": {
                    "max_connections": 20,
                    "retry_on_timeout": True,
                },
            },
        }
    }
else:
    # Development: In-Memory Cache
    CACHES = {
        "default": {
            "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
            "LOCATION": "marketplace-cache",
        }
    }

# Password validation (Django admin accounts only; storefront users live in Clerk)
AUTH_PASSWORD_VALIDATORS = [
    {
        "NAME": "django.contrib.auth.password_validation.UserAttributeSimilarityValidator"
    },
    {"NAME": "django.contrib.auth.password_validation.MinimumLengthValidator"},
    {"NAME": "django.contrib.auth.password_validation.CommonPasswordValidator"},
    {"NAME": "django.contrib.auth.password_validation.NumericPasswordValidator"},
]

# Internationalization
LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

# Static files (CSS, JavaScript, Images) - Production-ready
STATIC_URL = "/static/"
STATIC_ROOT = BASE_DIR / "staticfiles"
STORAGES = {
    "default": {"BACKEND": "django.core.files.storage.FileSystemStorage"},
    "staticfiles": {
        "BACKEND": (
            "whitenoise.storage.CompressedManifestStaticFilesStorage"
            if not DEBUG
            else "django.contrib.staticfiles.storage.StaticFilesStorage"
        )
    },
}

# Security Settings for Production
if not DEBUG:
    SECURE_BROWSER_XSS_FILTER = True
    SECURE_CONTENT_TYPE_NOSNIFF = True
    SECURE_HSTS_INCLUDE_SUBDOMAINS = True
    SECURE_HSTS_SECONDS = 31536000
    SECURE_REDIRECT_EXEMPT = [r"^stripe$", r"^clerk$"]
    SECURE_SSL_REDIRECT = os.environ.get("SECURE_SSL_REDIRECT", "True").lower() == "true"
    SESSION_COOKIE_SECURE = True
    CSRF_COOKIE_SECURE = True

# Default primary key field type
DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# Uploaded thumbnails are streamed to media storage; keep them in memory up to 5 MB
FILE_UPLOAD_MAX_MEMORY_SIZE = 5 * 1024 * 1024

# REST Framework Settings
REST_FRAMEWORK = {
    "DEFAULT_AUTHENTICATION_CLASSES": ("backend.custom_auth.ClerkJWTAuthentication",),
    "DEFAULT_PERMISSION_CLASSES": ("rest_framework.permissions.AllowAny",),
    "DEFAULT_RENDERER_CLASSES": ("rest_framework.renderers.JSONRenderer",),
    "EXCEPTION_HANDLER": "marketplace.exceptions.api_exception_handler",
}

# ---- Identity / Clerk ----
# Clerk issues short-lived RS256 session tokens. They are verified locally with
# the instance JWKS; no Clerk round trip happens on a normal request.
CLERK_SECRET_KEY = os.environ.get("CLERK_SECRET_KEY", "")  # sk_test_xxx / sk_live_xxx
CLERK_WEBHOOK_SECRET = os.environ.get("CLERK_WEBHOOK_SECRET", "")  # whsec_xxx (svix)
CLERK_JWKS_URL = os.environ.get("CLERK_JWKS_URL") or None
CLERK_ISSUER = os.environ.get("CLERK_ISSUER") or None
CLERK_API_URL = os.environ.get("CLERK_API_URL", "https://api.clerk.com/v1")
# Dotted path of the role claim inside the session token. Clerk puts custom
# claims wherever the session template says; "metadata.role" matches a template
# of {"metadata": "{{user.public_metadata}}"}.
CLERK_ROLE_CLAIM = os.environ.get("CLERK_ROLE_CLAIM", "metadata.role")
CLERK_SESSION_COOKIE = "__session"

# Simple JWT Settings, configured as a stateless verifier for Clerk session tokens
SIMPLE_JWT = {
    "ALGORITHM": "RS256",
    "SIGNING_KEY": None,
    "VERIFYING_KEY": None,
    "AUDIENCE": None,
    "ISSUER": CLERK_ISSUER,
    "JWK_URL": CLERK_JWKS_URL,
    "LEEWAY": timedelta(seconds=int(os.environ.get("CLERK_JWT_LEEWAY_SECONDS", "5"))),
    "AUTH_HEADER_TYPES": ("Bearer",),
    "AUTH_HEADER_NAME": "HTTP_AUTHORIZATION",
    "USER_ID_FIELD": "id",
    "USER_ID_CLAIM": "sub",
    "AUTH_TOKEN_CLASSES": ("rest_framework_simplejwt.tokens.AccessToken",),
    # Clerk session tokens carry neither a token type nor a jti
    "TOKEN_TYPE_CLAIM": None,
    "JTI_CLAIM": None,
    "TOKEN_USER_CLASS": "backend.custom_auth.ClerkTokenUser",
}

# ---- Payments / Stripe ----
# Secret key (backend only) - used to create Checkout Sessions.
STRIPE_SECRET_KEY = os.environ.get("STRIPE_SECRET_KEY", "")  # sk_test_xxx / sk_live_xxx

# Webhook secret
#    - Signing secret of the /stripe endpoint configured in the Stripe Dashboard.
#    - Required to verify that incoming webhook requests really come from Stripe.
STRIPE_WEBHOOK_SECRET = os.environ.get("STRIPE_WEBHOOK_SECRET", "")

# Charge currency
#    - ISO code used for every Checkout Session, e.g. "usd", "eur", "inr".
CURRENCY = os.environ.get("CURRENCY", "usd").lower()

# Development-only payment bypass.
#    - SKIP_PAYMENT=true enrolls immediately without talking to Stripe.
#    - Ignored unless APP_ENV is "development".
SKIP_PAYMENT = os.environ.get("SKIP_PAYMENT", "False").lower() == "true"
PAYMENT_BYPASS_ENABLED = APP_ENV == "development" and SKIP_PAYMENT

# Frontend URL used for checkout redirects when the request has no Origin header
FRONTEND_URL = os.environ.get("FRONTEND_URL", "http://localhost:5173")

# ---- Media storage (S3 compatible, e.g. Wasabi) ----
MEDIA_STORAGE_BUCKET = os.environ.get("MEDIA_STORAGE_BUCKET", "course-marketplace")
MEDIA_STORAGE_ENDPOINT_URL = os.environ.get("MEDIA_STORAGE_ENDPOINT_URL") or None
MEDIA_STORAGE_REGION = os.environ.get("MEDIA_STORAGE_REGION", "eu-central-2")
MEDIA_STORAGE_ACCESS_KEY_ID = os.environ.get("MEDIA_STORAGE_ACCESS_KEY_ID")
MEDIA_STORAGE_SECRET_ACCESS_KEY = os.environ.get("MEDIA_STORAGE_SECRET_ACCESS_KEY")
# Public base URL of the bucket, e.g. https://cdn.example.com. Derived from the
# endpoint and bucket when empty.
MEDIA_STORAGE_PUBLIC_BASE_URL = os.environ.get("MEDIA_STORAGE_PUBLIC_BASE_URL", "")
MEDIA_STORAGE_THUMBNAIL_PREFIX = "course_thumbnails"

# ---- Logging ----
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "verbose": {
            "format": "{asctime} {levelname} {name} {message}",
            "style": "{",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "verbose",
        },
    },
    "root": {"handlers": ["console"], "level": "WARNING"},
    "loggers": {
        "django": {"handlers": ["console"], "level": "INFO", "propagate": False},
        "marketplace": {"handlers": ["console"], "level": LOG_LEVEL, "propagate": False},
        "core": {"handlers": ["console"], "level": LOG_LEVEL, "propagate": False},
        "backend": {"handlers": ["console"], "level": LOG_LEVEL, "propagate": False},
    },
}

# Jazzmin Settings
JAZZMIN_SETTINGS = {
    "site_title": "Course Marketplace Admin",
    "site_header": "Course Marketplace",
    "site_brand": "Course Marketplace",
    "site_logo": None,
    "login_logo": None,
    "site_logo_classes": "img-circle",
    "site_icon": None,
    "welcome_sign": "Welcome to the Course Marketplace back office",
    "copyright": "Course Marketplace Team",
    "topmenu_links": [
        {"name": "Home", "url": "admin:index", "permissions": ["auth.view_user"]},
        {"name": "Website", "url": "/", "new_window": True},
    ],
    "icons": {
        "auth": "fas fa-users-cog",
        "auth.user": "fas fa-user",
        "auth.Group": "fas fa-users",
        "marketplace": "fas fa-graduation-cap",
        "marketplace.Course": "fas fa-book",
        "marketplace.User": "fas fa-user-graduate",
        "marketplace.Purchase": "fas fa-receipt",
        "marketplace.Enrollment": "fas fa-link",
    },
    "show_ui_builder": False,
    "changeform_format": "horizontal_tabs",
    "order_with_respect_to": [
        "marketplace",
        "auth",
    ],
    "user_avatar": None,
    "custom_css": None,
    "custom_js": None,
}

JAZZMIN_UI_TWEAKS = {
    "navbar": "navbar-dark",
    "navbar_fixed": True,
    "sidebar_fixed": True,
    "sidebar": "sidebar-dark-primary",
    "sidebar_nav_child_indent": True,
    "theme": "default",
    "dark_mode_theme": None,
}
