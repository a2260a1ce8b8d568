"""
Comparadores del catálogo, compartidos por el orden de escritorio y el móvil.

Todo orden se calcula en memoria; nunca se delega al store.
"""

from __future__ import annotations

from tienda.documents import Product
from tienda.ids import strip_accents


SORT_OPTIONS = ("", "priceAsc", "priceDesc", "az", "za")
MOBILE_ORDERS = ("", "asc", "desc", "az", "za")

MOBILE_TO_SORT = {"asc": "priceAsc", "desc": "priceDesc", "az": "az", "za": "za"}
SORT_TO_MOBILE = {v: k for k, v in MOBILE_TO_SORT.items()}


def min_price(product: Product) -> float:
    """
    Mínimo entre priceUSD del producto (si tiene) y el de cada opción de
    variante. Sin ningún precio, 0.
    """
    prices = product.option_prices()
    if product.price_usd is not None:
        prices.append(product.price_usd)
    return min(prices) if prices else 0


def title_key(product: Product, lang: str) -> tuple[str, str]:
    """Clave de comparación de títulos: sin acentos ni mayúsculas, luego literal."""
    title = product.title.get(lang, fallback=False)
    return (strip_accents(title).casefold(), title)


def default_key(product: Product, lang: str):
    return (product.orden, title_key(product, lang))


def sort_products(products: list[Product], option: str, lang: str) -> list[Product]:
    """
    Ordena según la opción de escritorio.

    Args:
        option: "" (orden y título), "priceAsc", "priceDesc", "az" o "za"
    """
    if option == "priceAsc":
        return sorted(products, key=min_price)
    if option == "priceDesc":
        return sorted(products, key=min_price, reverse=True)
    if option == "az":
        return sorted(products, key=lambda p: title_key(p, lang))
    if option == "za":
        return sorted(products, key=lambda p: title_key(p, lang), reverse=True)
    return sorted(products, key=lambda p: default_key(p, lang))


def sort_products_mobile(products: list[Product], order: str, lang: str) -> list[Product]:
    """Igual que `sort_products`, con las claves del selector móvil."""
    return sort_products(products, MOBILE_TO_SORT.get(order, ""), lang)
