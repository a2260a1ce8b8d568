"""
Payment Adapters — Implementaciones de PaymentGateway.

Backends disponibles:
- MockPaymentGateway: Para desarrollo y tests
- MercadoPagoGateway: Checkout Pro de Mercado Pago (REST)
"""

from .mercadopago import MercadoPagoGateway
from .mock import MockPaymentGateway

__all__ = [
    "MercadoPagoGateway",
    "MockPaymentGateway",
]
