from __future__ import annotations

from django.test import TestCase
from rest_framework.test import APIClient

from tienda import backends
from tienda.contrib.identity.adapters.memory import InMemoryIdentityProvider
from tienda.contrib.payment.adapters.mock import MockPaymentGateway
from tienda.contrib.store.adapters.django import DjangoDocumentStore
from tienda.documents import claims_for_role


def product_payload(**overrides) -> dict:
    payload = {
        "title": {"es": "Omega 3", "en": "Omega 3"},
        "description": "Aceite de pescado",
        "category": {"id": "cat-1", "name": "Suplementos"},
        "subcategory": {"id": "sub-1", "name": "Vitaminas", "categoryId": "cat-1"},
        "tipo": "Cápsulas",
        "active": True,
        "images": ["a.jpg"],
        "variants": [
            {
                "label": {"es": "Tamaño"},
                "options": [{"value": "60 cápsulas", "priceUSD": 19.99, "stock": 10}],
            }
        ],
    }
    payload.update(overrides)
    return payload


class TiendaApiTestCase(TestCase):
    """Base: store sobre el ORM, identidad en memoria y pasarela mock."""

    def setUp(self) -> None:
        super().setUp()
        backends.clear()
        self.store = DjangoDocumentStore()
        self.identity = InMemoryIdentityProvider()
        self.gateway = MockPaymentGateway()
        backends.set_document_store(self.store)
        backends.set_identity_provider(self.identity)
        backends.set_payment_gateway(self.gateway)
        self.client = APIClient()

    def tearDown(self) -> None:
        backends.clear()
        super().tearDown()

    def make_user(self, email: str, rol: str | None = None) -> str:
        user = self.identity.create_user(email=email, password="secret123")
        if rol:
            self.identity.set_custom_claims(user.uid, claims_for_role(rol))
        return user.uid

    def login(self, uid: str) -> None:
        token = self.identity.issue_token(uid)
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {token}")

    def login_as(self, email: str, rol: str | None = None) -> str:
        uid = self.make_user(email, rol)
        self.login(uid)
        return uid
