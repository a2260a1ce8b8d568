"""
Tienda Contrib — Adapters para colaboradores externos.

Cada subpaquete agrupa los adapters de un protocol de tienda.protocols:
- store: DocumentStore
- identity: IdentityProvider / AuthSession
- payment: PaymentGateway
- cdn: ImageCDN
"""
