"""
StockService — Descuento de stock tras un pedido.

Best-effort y no transaccional: una falla al descontar no invalida el pedido
ya creado, solo se registra.
"""

from __future__ import annotations

import logging
from collections import defaultdict

from tienda import backends
from tienda.documents import Variant, as_number
from tienda.protocols import RemoteResult


logger = logging.getLogger(__name__)

COLLECTION = "products"


class StockService:

    @staticmethod
    def decrement_for_items(items: list, store=None) -> RemoteResult:
        """
        Descuenta stock por variantId ("<label>-<value>"), sin bajar de 0.

        Recalcula stockTotal de cada producto tocado. Las líneas sin id,
        variantId o cantidad se ignoran.
        """
        store = store or backends.get_document_store()

        updates: dict[str, dict[str, int]] = defaultdict(lambda: defaultdict(int))
        for item in items or []:
            if not isinstance(item, dict):
                continue
            quantity = as_number(item.get("quantity"))
            if not item.get("id") or not item.get("variantId") or not quantity:
                continue
            updates[str(item["id"])][str(item["variantId"])] += int(quantity)

        failures = []
        for product_id, by_variant in updates.items():
            try:
                StockService._apply(store, product_id, by_variant)
            except Exception as e:
                logger.warning("No se pudo descontar stock de %s: %s", product_id, e)
                failures.append(product_id)

        if failures:
            return RemoteResult.degraded(f"stock no actualizado: {', '.join(failures)}")
        return RemoteResult.success()

    @staticmethod
    def _apply(store, product_id: str, by_variant: dict[str, int]) -> None:
        doc = store.get(COLLECTION, product_id)
        if doc is None:
            logger.debug("Producto %s inexistente; stock no descontado", product_id)
            return

        raw_variants = doc.get("variants") or []
        stock_total = 0
        for raw in raw_variants:
            variant = Variant.from_dict(raw)
            for raw_option, option in zip(raw.get("options") or [], variant.options):
                quantity = by_variant.get(variant.variant_id(option))
                if quantity and "stock" in raw_option:
                    raw_option["stock"] = max(0, option.stock - quantity)
                stock_total += as_number(raw_option.get("stock")) or 0

        store.update(COLLECTION, product_id, {"variants": raw_variants, "stockTotal": stock_total})
