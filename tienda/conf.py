from __future__ import annotations

from django.conf import settings


TIENDA_DEFAULTS = {
    "DOCUMENT_STORE": {
        "BACKEND": "tienda.contrib.store.adapters.django.DjangoDocumentStore",
        "OPTIONS": {},
    },
    "IDENTITY_PROVIDER": {
        "BACKEND": "tienda.contrib.identity.adapters.memory.InMemoryIdentityProvider",
        "OPTIONS": {},
    },
    "PAYMENT_GATEWAY": {
        "BACKEND": "tienda.contrib.payment.adapters.mock.MockPaymentGateway",
        "OPTIONS": {},
    },
    "IMAGE_CDN": {
        "BACKEND": "tienda.contrib.cdn.adapters.imagekit.ImageKitCDN",
        "OPTIONS": {"public_key": "", "private_key": ""},
    },
    "PAGE_SIZE": 24,
    "LANGUAGES": ("es", "en"),
    "DEFAULT_LANGUAGE": "es",
    "SHIPPING_SURCHARGE_REGION": "Montevideo",
    "SHIPPING_SURCHARGE": 169,
    "CURRENCY": "UYU",
    "PUBLIC_BASE_URL": "http://localhost:5173",
    "IDENTITY_TIMEOUT": 5.0,
}


def get_tienda_setting(key: str):
    """Retrieve a Tienda setting, falling back to TIENDA_DEFAULTS."""
    user_settings = getattr(settings, "TIENDA", {})
    value = user_settings.get(key, TIENDA_DEFAULTS.get(key))
    if isinstance(value, dict) and "BACKEND" in value:
        merged = dict(TIENDA_DEFAULTS.get(key, {}))
        merged.update(value)
        return merged
    return value
