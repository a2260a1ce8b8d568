"""
CheckoutService — Preferencias de pago a partir del carrito.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping

from tienda import backends
from tienda.conf import get_tienda_setting
from tienda.documents import as_number
from tienda.exceptions import InvalidInput
from tienda.protocols import PreferenceItem


logger = logging.getLogger(__name__)

SHIPPING_TITLE = "Costo de envío"


def _item_title(item: Mapping) -> str:
    title = item.get("title")
    if isinstance(title, str):
        return title
    if isinstance(title, Mapping):
        return title.get("es") or title.get("en") or "Producto"
    return item.get("name") or "Producto"


def _item_quantity(item: Mapping) -> int:
    quantity = as_number(item.get("quantity"))
    if quantity is None and isinstance(item.get("quantity"), str):
        try:
            quantity = float(item["quantity"])
        except ValueError:
            quantity = None
    if quantity is None or not math.isfinite(quantity) or quantity <= 0:
        return 1
    return math.floor(quantity)


def normalize_items(items: list, *, currency: str | None = None) -> list[PreferenceItem]:
    """
    Normaliza las líneas del carrito para la pasarela.

    - cantidad: entero (floor), 1 si falta o es inválida
    - precio unitario: priceUSD, o price
    - título: string, o es/en, o name, o "Producto"
    - se descartan líneas con precio <= 0 o cantidad 0 tras el floor
    """
    currency = currency or get_tienda_setting("CURRENCY")
    normalized = []
    for item in items:
        if not isinstance(item, Mapping):
            continue
        price = item.get("priceUSD")
        if price is None:
            price = item.get("price")
        unit_price = as_number(price)
        quantity = _item_quantity(item)
        if unit_price is None or unit_price <= 0 or quantity <= 0:
            continue
        normalized.append(
            PreferenceItem(
                title=_item_title(item),
                quantity=quantity,
                unit_price=unit_price,
                currency_id=currency,
            )
        )

    return normalized


def shipping_line(shipping_cost, *, currency: str | None = None) -> PreferenceItem | None:
    """Línea "Costo de envío", solo si el costo es positivo."""
    cost = as_number(shipping_cost)
    if cost is None or cost <= 0:
        return None
    currency = currency or get_tienda_setting("CURRENCY")
    return PreferenceItem(title=SHIPPING_TITLE, quantity=1, unit_price=cost, currency_id=currency)


def back_urls(base_url: str | None = None) -> dict:
    base_url = (base_url or get_tienda_setting("PUBLIC_BASE_URL")).rstrip("/")
    return {
        "success": f"{base_url}/success",
        "failure": f"{base_url}/failure",
        "pending": f"{base_url}/pending",
    }


class CheckoutService:

    @staticmethod
    def create_preference(payload: Mapping, *, gateway=None, base_url: str | None = None) -> dict:
        """
        Crea una preferencia de pago.

        Returns:
            {"init_point": ...}

        Raises:
            InvalidInput: items vacío, shippingData ausente o sin líneas válidas
            UpstreamFailure: Error de la pasarela (status propagado)
        """
        payload = payload if isinstance(payload, Mapping) else {}
        items = payload.get("items")
        if not isinstance(items, list) or not items:
            raise InvalidInput("missing_field", "Items array is required and must not be empty")

        shipping = payload.get("shippingData")
        if not isinstance(shipping, Mapping):
            raise InvalidInput("missing_field", "shippingData is required")

        normalized = normalize_items(items)
        if not normalized:
            raise InvalidInput(
                "no_valid_items",
                "No valid items found",
                {"details": "All items must have valid price and quantity > 0"},
            )

        shipping_item = shipping_line(shipping.get("shippingCost"))
        if shipping_item is not None:
            normalized.append(shipping_item)

        payer = {"name": shipping.get("name") or "No especificado"}
        if shipping.get("email"):
            payer["email"] = shipping["email"]

        gateway = gateway or backends.get_payment_gateway()
        preference = gateway.create_preference(
            items=normalized,
            payer=payer,
            back_urls=back_urls(base_url),
            auto_return="approved",
        )

        logger.info(
            "Preferencia creada",
            extra={"preference_id": preference.preference_id, "items": len(normalized)},
        )
        return {"init_point": preference.init_point}
