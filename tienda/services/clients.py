"""
ClientService — Clientes de la tienda (colección "clients").
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from tienda import backends
from tienda.protocols import SERVER_TIMESTAMP


logger = logging.getLogger(__name__)

COLLECTION = "clients"


def _s(value) -> str:
    return value.strip() if isinstance(value, str) else ""


class ClientService:
    """Servicio de clientes."""

    @staticmethod
    def list_clients(store=None) -> list[dict]:
        store = store or backends.get_document_store()
        return store.list(COLLECTION)

    @staticmethod
    def delete_client(client_id: str, store=None) -> dict:
        store = store or backends.get_document_store()
        store.delete(COLLECTION, client_id)
        logger.info("Cliente borrado", extra={"client_id": client_id})
        return {"id": client_id, "deleted": True}

    @staticmethod
    def upsert_from_checkout(data: Mapping, *, uid: str | None = None, store=None) -> str | None:
        """
        Crea o actualiza el cliente de un checkout.

        La clave es el uid si existe, si no el email en minúsculas. Sin
        ninguno de los dos no se escribe nada. Se preserva `createdAt` y el
        uid previo cuando el documento ya existe.

        Returns:
            Id del documento escrito, o None
        """
        store = store or backends.get_document_store()
        email = _s(data.get("email")).lower()
        client_id = (uid and str(uid)) or email
        if not client_id:
            return None

        previous = store.get(COLLECTION, client_id)
        doc = {
            "name": _s(data.get("name")),
            "email": email,
            "phone": _s(data.get("phone")),
            "address": _s(data.get("address")),
            "address2": _s(data.get("address2")),
            "city": _s(data.get("city")),
            "state": _s(data.get("department") or data.get("departamento") or data.get("state")),
            "postalCode": _s(data.get("postalCode")),
            "country": _s(data.get("country")),
            "source": data.get("source") or "checkout",
            "active": True,
            "updatedAt": SERVER_TIMESTAMP,
            "uid": uid or ((previous or {}).get("uid") or ""),
        }
        if previous is None:
            doc["createdAt"] = SERVER_TIMESTAMP
        store.set(COLLECTION, client_id, doc, merge=True)
        return client_id
