"""
Django settings for the Tienda example project.

Minimal working project wiring django-tienda into Django. It also serves as
the test settings.
"""

import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent

SECRET_KEY = os.environ.get("DJANGO_SECRET_KEY", "example-secret-key-change-in-production")

DEBUG = True

ALLOWED_HOSTS = ["*"]

INSTALLED_APPS = [
    # Django contrib
    "django.contrib.contenttypes",
    "django.contrib.auth",
    "django.contrib.admin",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
    # Third-party
    "unfold",
    "unfold.contrib.filters",
    "rest_framework",
    # Tienda
    "tienda",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]

ROOT_URLCONF = "example.project.urls"

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

WSGI_APPLICATION = "example.project.wsgi.application"

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": BASE_DIR / "db.sqlite3",
    }
}

CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
        "LOCATION": "tienda-example",
    }
}

AUTH_PASSWORD_VALIDATORS = []

LANGUAGE_CODE = "es-uy"
TIME_ZONE = "America/Montevideo"
USE_I18N = True
USE_TZ = True

STATIC_URL = "static/"

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# Django REST Framework
REST_FRAMEWORK = {
    "DEFAULT_AUTHENTICATION_CLASSES": [
        "tienda.api.authentication.BearerAuthentication",
    ],
    "DEFAULT_PERMISSION_CLASSES": [
        "rest_framework.permissions.AllowAny",
    ],
    "EXCEPTION_HANDLER": "tienda.api.exceptions.exception_handler",
    "DEFAULT_THROTTLE_CLASSES": [],
    "DEFAULT_THROTTLE_RATES": {
        "anon": "100/hour",
        "user": "1000/hour",
    },
}

# Tienda
# Producción: FirestoreDocumentStore, FirebaseIdentityProvider y
# MercadoPagoGateway (ver DESIGN.md). El ejemplo corre sin servicios externos.
TIENDA = {
    "DOCUMENT_STORE": {
        "BACKEND": "tienda.contrib.store.adapters.django.DjangoDocumentStore",
    },
    "IDENTITY_PROVIDER": {
        "BACKEND": "tienda.contrib.identity.adapters.memory.InMemoryIdentityProvider",
    },
    "PAYMENT_GATEWAY": {
        "BACKEND": "tienda.contrib.payment.adapters.mock.MockPaymentGateway",
    },
    "IMAGE_CDN": {
        "BACKEND": "tienda.contrib.cdn.adapters.imagekit.ImageKitCDN",
        "OPTIONS": {
            "public_key": os.environ.get("IMAGEKIT_PUBLIC_KEY", ""),
            "private_key": os.environ.get("IMAGEKIT_PRIVATE_KEY", ""),
        },
    },
    "PAGE_SIZE": 24,
    "PUBLIC_BASE_URL": os.environ.get("PUBLIC_BASE_URL", "http://localhost:5173"),
}

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "handlers": {
        "console": {"class": "logging.StreamHandler"},
    },
    "loggers": {
        "tienda": {"handlers": ["console"], "level": os.environ.get("TIENDA_LOG_LEVEL", "INFO")},
    },
}

# Unfold Admin
UNFOLD = {
    "SITE_TITLE": "Tienda",
    "SITE_HEADER": "Tienda",
    "SIDEBAR": {
        "show_search": True,
        "navigation": "tienda.unfold.get_sidebar_navigation",
    },
}
