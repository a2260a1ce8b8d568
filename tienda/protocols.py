"""
Tienda Core Protocols — Interfaces para colaboradores externos.

Este módulo define los protocols (interfaces) que los backends deben implementar.
Los protocols viven en el core para que puedan usarse sin dependencias circulares.

Implementaciones concretas viven en contrib/:
- contrib/store/adapters/ - Django ORM, en memoria, Firestore
- contrib/identity/adapters/ - En memoria, Firebase Auth
- contrib/payment/adapters/ - Mock, MercadoPago
- contrib/cdn/adapters/ - ImageKit
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from tienda.storefront.identity import IdentityChannel


class _ServerTimestamp:
    """Sentinel: el adapter lo reemplaza por la hora del servidor al escribir."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "SERVER_TIMESTAMP"


SERVER_TIMESTAMP = _ServerTimestamp()


# =============================================================================
# Document Store
# =============================================================================


@dataclass
class Page:
    """
    Página de resultados de una consulta.

    `docs` son dicts con la clave "id" más los datos del documento.
    `cursor` es el id del último documento devuelto (None si vacía).
    """

    docs: list[dict]
    cursor: str | None = None


@runtime_checkable
class DocumentStore(Protocol):
    """
    Protocol para el almacén de documentos (colecciones de documentos JSON).

    Las subcolecciones se direccionan con paths: "categories/<id>/subcategories".

    Implementaciones disponibles:
    - tienda.contrib.store.adapters.django.DjangoDocumentStore
    - tienda.contrib.store.adapters.memory.InMemoryDocumentStore
    - tienda.contrib.store.adapters.firestore.FirestoreDocumentStore
    """

    def get(self, collection: str, doc_id: str) -> dict | None:
        """Devuelve el documento (con "id") o None."""
        ...

    def list(self, collection: str) -> list[dict]:
        """Devuelve todos los documentos de la colección."""
        ...

    def add(self, collection: str, data: dict) -> str:
        """Crea un documento con id generado. Devuelve el id."""
        ...

    def set(self, collection: str, doc_id: str, data: dict, *, merge: bool = False) -> None:
        """Escribe el documento completo, o fusiona campos si merge=True."""
        ...

    def update(self, collection: str, doc_id: str, data: dict) -> None:
        """
        Actualiza campos de un documento existente.

        Raises:
            NotFound: Si el documento no existe
        """
        ...

    def delete(self, collection: str, doc_id: str) -> None:
        """Borra el documento. No falla si no existe."""
        ...

    def query(
        self,
        collection: str,
        *,
        filters: list[tuple[str, Any]] | None = None,
        limit: int | None = None,
        start_after: str | None = None,
    ) -> Page:
        """
        Consulta por igualdad, ordenada por id de documento.

        Args:
            filters: Lista de (path, valor); paths con punto ("category.id")
            limit: Máximo de documentos a devolver
            start_after: Cursor (id) después del cual empezar
        """
        ...


# =============================================================================
# Identity
# =============================================================================


@dataclass
class Identity:
    """Identidad verificada (usuario registrado o anónimo)."""

    uid: str
    email: str | None = None
    anonymous: bool = False
    claims: dict = field(default_factory=dict)

    @property
    def is_admin(self) -> bool:
        return bool(self.claims.get("admin") or self.claims.get("superadmin"))

    @property
    def is_superadmin(self) -> bool:
        return bool(self.claims.get("superadmin"))


@runtime_checkable
class IdentityProvider(Protocol):
    """
    Protocol para el proveedor de identidad (lado servidor).

    Implementaciones disponibles:
    - tienda.contrib.identity.adapters.memory.InMemoryIdentityProvider
    - tienda.contrib.identity.adapters.firebase.FirebaseIdentityProvider
    """

    def verify_token(self, token: str) -> Identity:
        """
        Verifica una credencial bearer.

        Raises:
            Unauthenticated: Token inválido o expirado
        """
        ...

    def set_custom_claims(self, uid: str, claims: dict) -> None:
        """Reemplaza los claims del usuario."""
        ...

    def get_claims(self, uid: str) -> dict:
        """Claims actuales del usuario ({} si no tiene)."""
        ...

    def create_user(self, *, email: str, password: str, display_name: str | None = None) -> Identity:
        """Crea un usuario con email y contraseña."""
        ...

    def delete_user(self, uid: str) -> None:
        """Borra el usuario."""
        ...

    def get_user_by_email(self, email: str) -> Identity:
        """
        Busca un usuario por email.

        Raises:
            NotFound: Si no existe
        """
        ...


@runtime_checkable
class AuthSession(Protocol):
    """
    Protocol para la sesión de identidad del lado del cliente.

    Publica cada cambio de identidad (uid o None) en `events`. El alta
    anónima es asíncrona: el uid resultante llega como evento.
    """

    events: IdentityChannel

    def current_uid(self) -> str | None:
        ...

    def sign_in_anonymously(self) -> None:
        ...

    def sign_out(self) -> None:
        ...


# =============================================================================
# Payment
# =============================================================================


@dataclass
class PreferenceItem:
    """Línea de una preferencia de pago."""

    title: str
    quantity: int
    unit_price: float
    currency_id: str

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "quantity": self.quantity,
            "unit_price": self.unit_price,
            "currency_id": self.currency_id,
        }


@dataclass
class Preference:
    """Preferencia de pago creada en la pasarela."""

    preference_id: str
    init_point: str
    sandbox_init_point: str | None = None


@runtime_checkable
class PaymentGateway(Protocol):
    """
    Protocol para pasarelas de pago hospedadas.

    Implementaciones disponibles:
    - tienda.contrib.payment.adapters.mock.MockPaymentGateway
    - tienda.contrib.payment.adapters.mercadopago.MercadoPagoGateway
    """

    def create_preference(
        self,
        *,
        items: list[PreferenceItem],
        payer: dict,
        back_urls: dict,
        auto_return: str = "approved",
    ) -> Preference:
        """
        Crea una preferencia de pago.

        Raises:
            UpstreamFailure: Con el status y detalles devueltos por la pasarela
        """
        ...


# =============================================================================
# Image CDN
# =============================================================================


@dataclass
class UploadSignature:
    """Firma para uploads directos desde el navegador."""

    token: str
    expire: int
    signature: str
    public_key: str

    def to_dict(self) -> dict:
        return {
            "token": self.token,
            "expire": self.expire,
            "signature": self.signature,
            "publicKey": self.public_key,
        }


@runtime_checkable
class ImageCDN(Protocol):
    """Protocol para el CDN de imágenes (firma de uploads)."""

    def sign_upload(self, *, token: str | None = None, expire: int | None = None) -> UploadSignature:
        ...


# =============================================================================
# Local storage
# =============================================================================


@runtime_checkable
class LocalStorage(Protocol):
    """Almacenamiento clave/valor del lado del cliente (strings JSON)."""

    def get_item(self, key: str) -> str | None:
        ...

    def set_item(self, key: str, value: str) -> None:
        ...

    def remove_item(self, key: str) -> None:
        ...


# =============================================================================
# Results
# =============================================================================


@dataclass
class RemoteResult:
    """
    Resultado de una escritura remota best-effort.

    ok=False significa modo degradado: el estado local sigue siendo válido.
    """

    ok: bool
    reason: str | None = None

    @classmethod
    def success(cls) -> RemoteResult:
        return cls(ok=True)

    @classmethod
    def degraded(cls, reason: str) -> RemoteResult:
        return cls(ok=False, reason=reason)
