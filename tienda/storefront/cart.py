"""
CartSession — Carrito sincronizado entre almacenamiento local y remoto.

El carrito vive en tres lugares:

- memoria (`items`), fuente de verdad de la sesión
- almacenamiento local (clave "cartItems"), actualizado en cada mutación
- documento remoto "carts/<uid>" con `{"items": [...]}`, por identidad

Reglas de reconciliación:

1. En cada cambio de identidad se lee el carrito remoto.
2. Un remoto vacío nunca reemplaza un local no vacío.
3. En otro caso se enriquece el remoto con el producto vivo y se adopta.
4. Resultados obtenidos para una identidad ya reemplazada se descartan.

remove_item y clear_cart escriben al remoto de inmediato para que una
recarga no resucite líneas borradas. add_to_cart y update_item solo marcan
el carrito como pendiente; `sync()` hace la escritura.

Uso:
    cart = CartSession(auth_session, storage=MemoryStorage())
    cart.start()
    cart.add_to_cart({"id": "p1", "price": 10, "quantity": 1})
    cart.sync()
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Callable

from tienda import backends
from tienda.documents import Bilingual, CartItem, Product
from tienda.protocols import RemoteResult
from tienda.storefront.identity import IdentityTracker
from tienda.storefront.shipping import shipping_quote
from tienda.storefront.storage import MemoryStorage, safe_parse, save_json

logger = logging.getLogger(__name__)

CART_KEY = "cartItems"
SHIPPING_KEY = "shippingData"
DEPARTMENT_KEYS = ("departamento", "state")
COLLECTION = "carts"


def _load_items(raw) -> list[CartItem]:
    if not isinstance(raw, list):
        return []
    return [CartItem.from_dict(item) for item in raw if isinstance(item, Mapping)]


class CartSession:
    """
    Carrito de una sesión de cliente.

    Args:
        auth_session: Sesión de identidad (AuthSession) con su canal de eventos
        store: Document store remoto (default: backend configurado)
        storage: Almacenamiento local (default: MemoryStorage)
        product_lookup: Callable `product_id -> Product | dict | None` para
            enriquecer líneas remotas (default: lectura de "products/<id>")
        timeout: Espera máxima del aprovisionamiento anónimo
    """

    def __init__(
        self,
        auth_session,
        *,
        store=None,
        storage=None,
        product_lookup: Callable[[str], object] | None = None,
        timeout: float | None = None,
    ):
        self.store = store or backends.get_document_store()
        self.storage = storage if storage is not None else MemoryStorage()
        self.product_lookup = product_lookup or self._lookup_product
        self.tracker = IdentityTracker(auth_session, on_change=self._on_identity, timeout=timeout)

        self.items: list[CartItem] = _load_items(safe_parse(self.storage, CART_KEY, []))
        shipping = safe_parse(self.storage, SHIPPING_KEY, {})
        self.shipping_data: dict = dict(shipping) if isinstance(shipping, Mapping) else {}
        self.dirty = False
        self.closed = False

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def uid(self) -> str | None:
        return self.tracker.uid

    def start(self) -> str:
        """
        Resuelve la identidad (aprovisionando una anónima si hace falta).

        Raises:
            IdentityTimeout: Si el uid anónimo no llega a tiempo
        """
        self.closed = False
        return self.tracker.ensure_identity()

    def pump(self) -> None:
        """Procesa eventos de identidad pendientes."""
        if not self.closed:
            self.tracker.pump()

    def close(self) -> None:
        self.closed = True

    # ------------------------------------------------------------------
    # Reconciliation
    # ------------------------------------------------------------------

    def _on_identity(self, uid: str, generation: int) -> None:
        if self.closed:
            return
        self.reconcile(uid, generation)

    def _lookup_product(self, product_id: str):
        return self.store.get("products", product_id)

    def _enrich(self, item: CartItem) -> CartItem:
        try:
            product = self.product_lookup(item.id)
        except Exception:
            logger.warning("No se pudo leer el producto %s", item.id, exc_info=True)
            return item
        if product is None:
            return item
        if isinstance(product, Mapping):
            product = Product.from_dict(product)
        if product.title:
            item.title = Bilingual.coerce(product.title)
        if product.images:
            item.image = product.images[0]
        if product.slug:
            item.slug = product.slug
        return item

    def reconcile(self, uid: str, generation: int) -> bool:
        """
        Lee el carrito remoto de `uid` y lo adopta si corresponde.

        Returns:
            True si el remoto fue adoptado
        """
        try:
            doc = self.store.get(COLLECTION, uid)
        except Exception:
            logger.warning("No se pudo leer el carrito remoto de %s; se conserva el local", uid, exc_info=True)
            return False

        if not self.tracker.is_current(uid, generation):
            logger.debug("Carrito remoto de %s descartado (identidad reemplazada)", uid)
            return False

        remote = _load_items((doc or {}).get("items"))
        local = _load_items(safe_parse(self.storage, CART_KEY, []))
        if not remote and local:
            logger.debug("Carrito remoto vacío; se conserva el local (%s líneas)", len(local))
            return False

        enriched = [self._enrich(item) for item in remote]
        if not self.tracker.is_current(uid, generation):
            return False

        self.items = enriched
        self.dirty = False
        self._persist_local()
        return True

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def _persist_local(self) -> None:
        save_json(self.storage, CART_KEY, [item.to_dict() for item in self.items])

    def _write_remote(self) -> RemoteResult:
        uid = self.tracker.uid
        if not uid:
            return RemoteResult.degraded("sin identidad")
        try:
            self.store.set(COLLECTION, uid, {"items": [item.to_dict() for item in self.items]})
        except Exception as e:
            logger.warning("No se pudo guardar el carrito remoto de %s: %s", uid, e)
            return RemoteResult.degraded(str(e))
        self.dirty = False
        return RemoteResult.success()

    def sync(self) -> RemoteResult:
        """Escribe la lista completa al documento remoto."""
        return self._write_remote()

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def add_to_cart(self, item) -> CartItem | None:
        """
        Agrega una línea; si ya existe una con la misma identidad suma cantidades.

        Una línea sin id de producto se ignora (devuelve None).
        """
        if not item:
            logger.warning("Línea de carrito vacía ignorada")
            return None
        new = item if isinstance(item, CartItem) else CartItem.from_dict(item)
        if not new.id:
            logger.warning("Línea de carrito sin id ignorada: %r", item)
            return None
        for existing in self.items:
            if existing.key == new.key:
                existing.quantity += new.quantity
                self._changed()
                return existing
        self.items = [*self.items, new]
        self._changed()
        return new

    def update_item(self, product_id: str, variant_label: str, **updates) -> None:
        """
        Actualización parcial de las líneas que coinciden.

        Una cantidad resultante <= 0 elimina la línea.
        """
        kept = []
        for item in self.items:
            if item.id == product_id and item.variant_label == variant_label:
                for name, value in updates.items():
                    if hasattr(item, name):
                        setattr(item, name, value)
                if (item.quantity or 0) <= 0:
                    continue
            kept.append(item)
        self.items = kept
        self._changed()

    def remove_item(self, product_id: str, variant_label: str) -> RemoteResult:
        self.items = [
            item for item in self.items if not (item.id == product_id and item.variant_label == variant_label)
        ]
        self._persist_local()
        return self._write_remote()

    def clear_cart(self) -> RemoteResult:
        self.items = []
        self._persist_local()
        return self._write_remote()

    def _changed(self) -> None:
        self._persist_local()
        self.dirty = True

    # ------------------------------------------------------------------
    # Totals & shipping
    # ------------------------------------------------------------------

    @property
    def subtotal(self) -> float:
        return sum(item.line_total for item in self.items)

    @property
    def department(self) -> str:
        """Departamento de envío: `departamento`, o `state` si no viene."""
        for key in DEPARTMENT_KEYS:
            value = self.shipping_data.get(key)
            if isinstance(value, str) and value.strip():
                return value
        return ""

    @property
    def shipping_cost(self) -> float:
        return shipping_quote(self.department).cost

    @property
    def total(self) -> float:
        return self.subtotal + self.shipping_cost

    @property
    def count(self) -> int:
        return sum(item.quantity for item in self.items)

    def set_shipping_data(self, data: Mapping) -> None:
        self.shipping_data = dict(data)
        save_json(self.storage, SHIPPING_KEY, self.shipping_data)
