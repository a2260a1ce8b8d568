"""
OrderService — Creación de pedidos y transiciones de estado.

Flujo de estados:
    En proceso -> Confirmado | Cancelado
    Confirmado -> Entregado | Cancelado
    Entregado, Cancelado: terminales
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from django.utils import timezone

from tienda import backends
from tienda.documents import ORDER_TRANSITIONS, Estado, as_number
from tienda.exceptions import Forbidden, InvalidInput, InvalidTransition, NotFound
from tienda.protocols import Identity
from tienda.services.clients import ClientService
from tienda.services.stock import StockService


logger = logging.getLogger(__name__)

COLLECTION = "orders"


def _created_key(doc: dict) -> str:
    value = doc.get("createdAt") or doc.get("date") or ""
    return str(value)


class OrderService:
    """Servicio de pedidos."""

    @staticmethod
    def create_order(payload: Mapping, *, identity: Identity, store=None) -> dict:
        """
        Crea un pedido a nombre de la identidad autenticada.

        Después de crear, descuenta stock y registra el cliente; ambas
        operaciones son best-effort y no afectan la respuesta.

        Returns:
            {"id": order_id}

        Raises:
            Forbidden: uid del payload distinto al de la identidad
            InvalidInput: items vacío o total inválido
        """
        payload = payload if isinstance(payload, Mapping) else {}
        store = store or backends.get_document_store()

        body_uid = payload.get("uid")
        if not body_uid or body_uid != identity.uid:
            raise Forbidden("uid_mismatch", "uid mismatch")

        items = payload.get("items")
        if not isinstance(items, list) or not items:
            raise InvalidInput("missing_field", "items is required")

        total = as_number(payload.get("total"))
        if total is None or total <= 0:
            raise InvalidInput("invalid_total", "invalid total")

        now = timezone.now().isoformat()
        estado = payload.get("estado") or Estado.EN_PROCESO
        if estado not in Estado.values:
            raise InvalidInput("invalid_status", f"estado inválido: {estado}")

        doc = {
            "uid": identity.uid,
            "createdAt": payload.get("createdAt") or now,
            "items": items,
            "shipping": payload.get("shipping") or {},
            "total": total,
            "client": payload.get("client") or {},
            "paymentIntentId": payload.get("paymentIntentId"),
            "paymentStatus": payload.get("paymentStatus") or "pendiente",
            "paymentMethod": payload.get("paymentMethod") or "mercadopago",
            "date": payload.get("date") or now,
            "estado": str(estado),
        }
        order_id = store.add(COLLECTION, doc)
        logger.info("Pedido creado", extra={"order_id": order_id, "uid": identity.uid, "total": total})

        stock = StockService.decrement_for_items(items, store=store)
        if not stock.ok:
            logger.warning("Pedido %s: %s", order_id, stock.reason)

        client = doc["client"] if isinstance(doc["client"], Mapping) else {}
        shipping = doc["shipping"] if isinstance(doc["shipping"], Mapping) else {}
        try:
            ClientService.upsert_from_checkout(
                {**shipping, **client},
                uid=None if identity.anonymous else identity.uid,
                store=store,
            )
        except Exception:
            logger.warning("Pedido %s: no se pudo registrar el cliente", order_id, exc_info=True)

        return {"id": order_id}

    @staticmethod
    def list_orders(store=None) -> list[dict]:
        """Pedidos, más recientes primero."""
        store = store or backends.get_document_store()
        return sorted(store.list(COLLECTION), key=_created_key, reverse=True)

    @staticmethod
    def transition(order_id: str, new_status, store=None) -> dict:
        """
        Cambia el estado de un pedido.

        Raises:
            NotFound: Pedido inexistente
            InvalidTransition: Estado desconocido, terminal o transición no permitida
        """
        store = store or backends.get_document_store()
        doc = store.get(COLLECTION, order_id)
        if doc is None:
            raise NotFound("not_found", "Order not found", {"id": order_id})

        if new_status not in Estado.values:
            raise InvalidTransition("invalid_status", f"estado inválido: {new_status}")

        current = doc.get("estado") or Estado.EN_PROCESO
        allowed = ORDER_TRANSITIONS.get(current, set())
        if not allowed:
            raise InvalidTransition(
                "terminal_status",
                f"El pedido está en estado terminal: {current}",
                {"from": current, "to": new_status},
            )
        if new_status not in allowed:
            raise InvalidTransition(
                "invalid_transition",
                f"Transición no permitida: {current} -> {new_status}",
                {"from": current, "to": new_status},
            )

        store.update(COLLECTION, order_id, {"estado": new_status, "updatedAt": timezone.now().isoformat()})
        logger.info("Pedido %s: %s -> %s", order_id, current, new_status)
        return {"id": order_id, "estado": new_status}
