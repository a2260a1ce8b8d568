"""
CatalogBrowser — Consulta, filtrado, orden y paginación del catálogo.

Dos modos excluyentes:

- Paginado (sin búsqueda): los filtros de igualdad (active, category.id,
  subcategory.id) se envían al store; se piden page_size + 1 documentos y la
  presencia del extra define `has_more`.
- Búsqueda (con término): al pasar de término vacío a no vacío se trae una
  sola vez toda la colección activa a `all_products` y todos los filtros se
  aplican en memoria. Volver a vacío descarta `all_products` y recarga la
  primera página.

El store nunca recibe order-by: todo orden es en memoria (ver sorting).
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from tienda import backends
from tienda.conf import get_tienda_setting
from tienda.documents import Category, Product
from tienda.exceptions import InvalidInput
from tienda.ids import strip_accents
from tienda.services.categories import CategoryService
from tienda.storefront.sorting import (
    MOBILE_ORDERS,
    MOBILE_TO_SORT,
    SORT_OPTIONS,
    SORT_TO_MOBILE,
    sort_products,
    sort_products_mobile,
)

logger = logging.getLogger(__name__)

ALL_TYPES = "Todos"
DEFAULT_SORT = "az"


def _fold(text: str) -> str:
    return strip_accents(text or "").lower()


class CatalogBrowser:
    """
    Estado de navegación del catálogo.

    Uso:
        browser = CatalogBrowser()
        browser.load_first_page()
        browser.set_search_term("omega")
        browser.sorted_products
    """

    collection = "products"

    def __init__(self, store=None, *, page_size: int | None = None, language: str | None = None):
        self.store = store or backends.get_document_store()
        self.page_size = page_size or get_tienda_setting("PAGE_SIZE")
        self.language = language or get_tienda_setting("DEFAULT_LANGUAGE")

        self.paginated_products: list[Product] = []
        self.cursor: str | None = None
        self.has_more = True
        self.is_loading_page = False

        self.all_products: list[Product] = []
        self.search_term = ""

        self.category_id = ""
        self.subcategory_id = ""
        self.product_type = ALL_TYPES
        self.sort_option = DEFAULT_SORT
        self.mobile_order = SORT_TO_MOBILE[DEFAULT_SORT]

        self.categories: list[Category] = []

    # ------------------------------------------------------------------
    # Paginated mode
    # ------------------------------------------------------------------

    def _filters(self) -> list[tuple[str, object]]:
        filters: list[tuple[str, object]] = [("active", True)]
        if self.category_id:
            filters.append(("category.id", self.category_id))
        if self.subcategory_id:
            filters.append(("subcategory.id", self.subcategory_id))
        return filters

    def _fetch_page(self, cursor: str | None) -> tuple[list[Product], str | None, bool]:
        page = self.store.query(
            self.collection,
            filters=self._filters(),
            limit=self.page_size + 1,
            start_after=cursor,
        )
        docs = page.docs
        has_more = len(docs) > self.page_size
        docs = docs[: self.page_size]
        products = [Product.from_dict(doc) for doc in docs]
        return products, (docs[-1]["id"] if docs else None), has_more

    def reset_pagination(self) -> None:
        self.paginated_products = []
        self.cursor = None
        self.has_more = True

    def load_first_page(self) -> bool:
        """
        Carga la primera página con los filtros actuales.

        Returns:
            False si el fetch falló (el estado queda sin cambios)
        """
        self.is_loading_page = True
        try:
            products, cursor, has_more = self._fetch_page(None)
        except Exception:
            logger.exception("Error al cargar primera página")
            return False
        finally:
            self.is_loading_page = False
        self.paginated_products = products
        self.cursor = cursor
        self.has_more = has_more
        logger.debug("Primera página: %s productos, has_more=%s", len(products), has_more)
        return True

    def load_more(self) -> bool:
        """
        Agrega la página siguiente.

        No hace nada si no hay más páginas, ya hay una carga en vuelo o no
        hay cursor.
        """
        if not self.has_more or self.is_loading_page or not self.cursor:
            return False
        self.is_loading_page = True
        try:
            products, cursor, has_more = self._fetch_page(self.cursor)
        except Exception:
            logger.exception("Error al cargar más productos")
            return False
        finally:
            self.is_loading_page = False
        self.paginated_products = [*self.paginated_products, *products]
        self.cursor = cursor
        self.has_more = has_more
        return True

    def _reload(self) -> None:
        if self.search_term:
            return
        self.reset_pagination()
        self.load_first_page()

    # ------------------------------------------------------------------
    # Search mode
    # ------------------------------------------------------------------

    @property
    def is_search_mode(self) -> bool:
        return self.search_term != ""

    def _load_all_products(self) -> None:
        try:
            page = self.store.query(self.collection, filters=[("active", True)])
            self.all_products = [Product.from_dict(doc) for doc in page.docs]
        except Exception:
            logger.exception("Error al cargar productos para búsqueda")
            self.all_products = []

    def set_search_term(self, term: str) -> None:
        """Cambia el término; las transiciones vacío <-> no vacío cambian de modo."""
        previous = self.search_term
        self.search_term = (term or "").strip()
        if previous == "" and self.search_term:
            self._load_all_products()
        elif previous and self.search_term == "":
            self.all_products = []
            self._reload()

    # ------------------------------------------------------------------
    # Filters & sort
    # ------------------------------------------------------------------

    def _owner_of(self, subcategory_id: str) -> str:
        for category in self.categories:
            if any(s.id == subcategory_id for s in category.subcategories):
                return category.id
        return ""

    def select_category(self, category_id: str | None) -> None:
        """Cambiar (o limpiar) la categoría siempre limpia la subcategoría."""
        self.category_id = category_id or ""
        self.subcategory_id = ""
        self._reload()

    def select_subcategory(self, subcategory_id: str | None, category_id: str | None = None) -> None:
        """
        Selecciona una subcategoría junto con su categoría dueña.

        La categoría se toma de `category_id` o de las categorías cargadas.
        """
        if not subcategory_id:
            self.subcategory_id = ""
            self._reload()
            return
        owner = category_id or self._owner_of(subcategory_id) or self.category_id
        if not owner:
            raise InvalidInput("unknown_subcategory", f"Subcategoría sin categoría: {subcategory_id}")
        self.category_id = owner
        self.subcategory_id = subcategory_id
        self._reload()

    def set_product_type(self, product_type: str | None) -> None:
        """Filtro de tipo; solo en memoria, no recarga."""
        self.product_type = product_type or ALL_TYPES

    def set_sort(self, option: str) -> None:
        if option not in SORT_OPTIONS:
            raise InvalidInput("invalid_sort", f"Orden inválido: {option}")
        changed = option != self.sort_option
        self.sort_option = option
        if changed:
            self._reload()

    def set_mobile_order(self, order: str) -> None:
        """Cambia el orden móvil y lo refleja en `sort_option`."""
        if order not in MOBILE_ORDERS:
            raise InvalidInput("invalid_sort", f"Orden inválido: {order}")
        self.mobile_order = order
        self.set_sort(MOBILE_TO_SORT.get(order, ""))

    def set_language(self, language: str) -> None:
        if language not in get_tienda_setting("LANGUAGES"):
            language = get_tienda_setting("DEFAULT_LANGUAGE")
        self.language = language

    # ------------------------------------------------------------------
    # Derived views
    # ------------------------------------------------------------------

    def _type_matches(self, product: Product) -> bool:
        if not self.product_type or self.product_type == ALL_TYPES:
            return True
        wanted = _fold(self.product_type)
        return any(_fold(t) == wanted for t in product.tipos)

    def _title_matches(self, product: Product) -> bool:
        if not self.search_term:
            return True
        title = product.title.get(self.language, fallback=False)
        return self.search_term.lower() in title.lower()

    @property
    def filtered_products(self) -> list[Product]:
        source = self.all_products if self.is_search_mode else self.paginated_products
        result = []
        for product in source:
            if self.is_search_mode:
                if self.category_id and product.category.id != self.category_id:
                    continue
                if self.subcategory_id and product.subcategory.id != self.subcategory_id:
                    continue
            if self._type_matches(product) and self._title_matches(product):
                result.append(product)
        return result

    @property
    def sorted_products(self) -> list[Product]:
        return sort_products(self.filtered_products, self.sort_option, self.language)

    @property
    def sorted_products_mobile(self) -> list[Product]:
        return sort_products_mobile(self.filtered_products, self.mobile_order, self.language)

    @property
    def available_types(self) -> list[str]:
        source = self.all_products if self.is_search_mode else self.paginated_products
        seen: dict[str, None] = {}
        for product in source:
            for tipo in product.tipos:
                seen.setdefault(tipo, None)
        return list(seen)

    # ------------------------------------------------------------------
    # Categories
    # ------------------------------------------------------------------

    def load_categories(self) -> list[dict]:
        """
        Carga categorías con nombres en el idioma activo.

        Una falla deja la lista vacía.
        """
        try:
            self.categories = CategoryService.list_categories(store=self.store)
        except Exception:
            logger.exception("Error al cargar categorías")
            self.categories = []
        lang = self.language
        return [
            {
                "id": c.id,
                "name": c.name.get(lang),
                "subcategories": [
                    {"id": s.id, "name": s.name.get(lang), "categoryId": c.id} for s in c.subcategories
                ],
            }
            for c in self.categories
        ]

    # ------------------------------------------------------------------
    # Query string
    # ------------------------------------------------------------------

    def apply_query_params(self, params: Mapping) -> None:
        """
        Restaura el estado desde q/cat/sub/type/sort (sort por defecto "az").

        Carga la primera página o, si hay término, la colección completa.
        """
        sort = params.get("sort") or DEFAULT_SORT
        if sort not in SORT_OPTIONS:
            sort = DEFAULT_SORT
        self.sort_option = sort
        self.mobile_order = SORT_TO_MOBILE.get(sort, "")
        self.category_id = params.get("cat") or ""
        self.subcategory_id = params.get("sub") or ""
        self.product_type = params.get("type") or ALL_TYPES
        self.search_term = ""
        self.all_products = []
        self.reset_pagination()
        term = (params.get("q") or "").strip()
        if term:
            self.set_search_term(term)
        else:
            self.load_first_page()

    @classmethod
    def from_query_params(cls, params: Mapping, store=None, **kwargs) -> CatalogBrowser:
        browser = cls(store, **kwargs)
        browser.apply_query_params(params)
        return browser

    def to_query_params(self) -> dict[str, str]:
        params = {}
        if self.search_term:
            params["q"] = self.search_term
        if self.category_id:
            params["cat"] = self.category_id
        if self.subcategory_id:
            params["sub"] = self.subcategory_id
        if self.product_type and self.product_type != ALL_TYPES:
            params["type"] = self.product_type
        if self.sort_option:
            params["sort"] = self.sort_option
        return params
