"""
Django Tienda — Storefront y back-office para una tienda online pequeña.

Uso básico:
    from tienda.storefront.catalog import CatalogBrowser
    from tienda.storefront.cart import CartSession
    from tienda import backends

Para colaboradores externos (contrib):
    from tienda.contrib.store.adapters.django import DjangoDocumentStore
    from tienda.contrib.identity.adapters.firebase import FirebaseIdentityProvider
    from tienda.contrib.payment.adapters.mercadopago import MercadoPagoGateway
"""

__title__ = "Django Tienda"
__version__ = "0.1.0a1"
__author__ = "Tienda Contributors"
