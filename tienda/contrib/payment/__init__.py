"""
Tienda Payment — Preferencias de pago en pasarelas hospedadas.

Uso:
    from tienda.backends import get_payment_gateway

    preference = get_payment_gateway().create_preference(items=..., payer=..., back_urls=...)
"""

from tienda.protocols import PaymentGateway, Preference, PreferenceItem  # noqa: F401
