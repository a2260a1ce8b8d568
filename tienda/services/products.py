"""
ProductService — Alta, edición y baja de productos del catálogo.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from tienda import backends
from tienda.documents import Bilingual, Product, Variant, VariantOption, as_number, derive_price_and_stock
from tienda.exceptions import InvalidInput, NotFound
from tienda.ids import slugify
from tienda.protocols import SERVER_TIMESTAMP


logger = logging.getLogger(__name__)

COLLECTION = "products"

# Campos que un PATCH puede escribir tal cual (además de variants).
# priceUSD y stockTotal solo se derivan de las variantes.
EDITABLE_FIELDS = frozenset({
    "title",
    "description",
    "slug",
    "category",
    "subcategory",
    "tipo",
    "defaultDescriptionType",
    "extraDescriptionTop",
    "extraDescriptionBottom",
    "descriptionPosition",
    "active",
    "images",
    "allowCustomization",
    "customName",
    "customNumber",
    "sku",
    "orden",
})


def _text(value) -> str:
    return value.strip() if isinstance(value, str) else ""


def validate_product_payload(payload) -> None:
    """
    Valida el payload de alta de producto.

    El orden de los chequeos define qué mensaje se devuelve primero.

    Raises:
        InvalidInput: Con el primer problema encontrado
    """
    if not isinstance(payload, Mapping):
        raise InvalidInput("invalid_payload", "Invalid payload")

    title = payload.get("title")
    if not isinstance(title, Mapping) or not _text(title.get("es")):
        raise InvalidInput("missing_field", "title.es es requerido", {"field": "title.es"})

    category = payload.get("category")
    if not isinstance(category, Mapping) or not category.get("id"):
        raise InvalidInput("missing_field", "category.id es requerido", {"field": "category.id"})

    subcategory = payload.get("subcategory")
    if not isinstance(subcategory, Mapping) or not subcategory.get("id"):
        raise InvalidInput("missing_field", "subcategory.id es requerido", {"field": "subcategory.id"})

    variants = payload.get("variants")
    if not isinstance(variants, list) or not variants:
        raise InvalidInput("missing_field", "Debe incluir al menos una variante", {"field": "variants"})

    validate_variants(variants, require_label=True)

    images = payload.get("images")
    if not isinstance(images, list) or not images:
        raise InvalidInput("missing_field", "Debe incluir al menos una imagen", {"field": "images"})


def validate_variants(variants, *, require_label: bool = False) -> None:
    """Cada variante con opciones; cada opción con valor y precio finito >= 0."""
    message = "Las variantes deben tener opciones con valor y precio válido"
    if not isinstance(variants, list):
        raise InvalidInput("invalid_variants", message)
    for variant in variants:
        if not isinstance(variant, Mapping):
            raise InvalidInput("invalid_variants", message)
        label = variant.get("label")
        if require_label and (not isinstance(label, Mapping) or not _text(label.get("es"))):
            raise InvalidInput("invalid_variants", message)
        options = variant.get("options")
        if not isinstance(options, list) or not options:
            raise InvalidInput("invalid_variants", message)
        for option in options:
            if not isinstance(option, Mapping) or not _text(option.get("value")):
                raise InvalidInput("invalid_variants", message)
            price = as_number(option.get("priceUSD"))
            if price is None or price < 0:
                raise InvalidInput("invalid_variants", message)


def normalize_variants(variants: list) -> list[Variant]:
    """Etiquetas y valores recortados; stock ausente o inválido pasa a 0."""
    normalized = []
    for raw in variants:
        label = raw.get("label") if isinstance(raw.get("label"), Mapping) else {}
        normalized.append(
            Variant(
                label=Bilingual(es=_text(label.get("es")), en=_text(label.get("en"))),
                options=[VariantOption.from_dict(o) for o in raw.get("options") or []],
            )
        )
    return normalized


def build_slug(payload: Mapping) -> str:
    """Slug explícito o derivado de "<title.es>-<subcategory.name>"."""
    explicit = _text(payload.get("slug"))
    if explicit:
        return slugify(explicit)
    subcategory = payload.get("subcategory") or {}
    sub_name = subcategory.get("name") or ""
    if isinstance(sub_name, Mapping):
        sub_name = sub_name.get("es") or ""
    return slugify(f"{payload['title']['es']}-{sub_name}")


class ProductService:
    """
    Servicio de productos (colección "products").

    priceUSD y stockTotal nunca se aceptan del cliente cuando hay variantes:
    se derivan de las opciones.
    """

    @staticmethod
    def list_products(store=None) -> list[dict]:
        store = store or backends.get_document_store()
        return store.list(COLLECTION)

    @staticmethod
    def get_product(product_id: str, store=None) -> Product:
        store = store or backends.get_document_store()
        doc = store.get(COLLECTION, product_id)
        if doc is None:
            raise NotFound("not_found", "Product not found", {"id": product_id})
        return Product.from_dict(doc)

    @staticmethod
    def create_product(payload: Mapping, store=None) -> dict:
        """
        Crea un producto.

        Returns:
            {"id": ..., "slug": ...}

        Raises:
            InvalidInput: Si el payload no es válido
        """
        validate_product_payload(payload)
        store = store or backends.get_document_store()

        variants = normalize_variants(payload["variants"])
        price_usd, stock_total = derive_price_and_stock(variants)
        if price_usd is None:
            raise InvalidInput("no_valid_prices", "No se encontraron precios válidos en las variantes")

        slug = build_slug(payload)
        category = payload["category"]
        subcategory = payload["subcategory"]
        title = payload["title"]

        doc = {
            "title": {"es": title["es"].strip(), "en": _text(title.get("en"))},
            "description": payload.get("description") or "",
            "slug": slug,
            "category": {"id": category["id"], "name": category.get("name") or ""},
            "subcategory": {
                "id": subcategory["id"],
                "name": subcategory.get("name") or "",
                "categoryId": subcategory.get("categoryId") or category["id"],
            },
            "tipo": payload.get("tipo") or "",
            "defaultDescriptionType": payload.get("defaultDescriptionType") or "none",
            "extraDescriptionTop": payload.get("extraDescriptionTop") or "",
            "extraDescriptionBottom": payload.get("extraDescriptionBottom") or "",
            "descriptionPosition": payload.get("descriptionPosition") or "bottom",
            "active": bool(payload.get("active", True)),
            "images": list(payload["images"]),
            "allowCustomization": bool(payload.get("allowCustomization")),
            "customName": payload.get("customName") or "",
            "customNumber": payload.get("customNumber") or "",
            "priceUSD": price_usd,
            "variants": [v.to_dict() for v in variants],
            "sku": payload.get("sku") or "",
            "stockTotal": stock_total,
            "createdAt": SERVER_TIMESTAMP,
            "updatedAt": SERVER_TIMESTAMP,
        }
        orden = as_number(payload.get("orden"))
        if orden is not None:
            doc["orden"] = orden

        product_id = store.add(COLLECTION, doc)
        logger.info("Producto creado", extra={"product_id": product_id, "slug": slug})
        return {"id": product_id, "slug": slug}

    @staticmethod
    def update_product(product_id: str, payload: Mapping, store=None) -> dict:
        """
        Actualiza campos de un producto.

        Si vienen variantes se normalizan y se recalculan priceUSD/stockTotal.

        Raises:
            InvalidInput: Payload inválido
            NotFound: Producto inexistente
        """
        if not isinstance(payload, Mapping):
            raise InvalidInput("invalid_payload", "Invalid payload")
        store = store or backends.get_document_store()

        data = {k: v for k, v in payload.items() if k in EDITABLE_FIELDS}
        if "variants" in payload:
            validate_variants(payload["variants"])
            variants = normalize_variants(payload["variants"])
            price_usd, stock_total = derive_price_and_stock(variants)
            data["variants"] = [v.to_dict() for v in variants]
            if price_usd is not None:
                data["priceUSD"] = price_usd
            data["stockTotal"] = stock_total
        if "slug" in data:
            data["slug"] = slugify(_text(data["slug"]))
        data["updatedAt"] = SERVER_TIMESTAMP

        try:
            store.update(COLLECTION, product_id, data)
        except NotFound:
            raise NotFound("not_found", "Product not found", {"id": product_id})
        logger.info("Producto actualizado", extra={"product_id": product_id})
        return {"id": product_id, "updated": True}

    @staticmethod
    def delete_product(product_id: str, store=None) -> dict:
        store = store or backends.get_document_store()
        store.delete(COLLECTION, product_id)
        logger.info("Producto borrado", extra={"product_id": product_id})
        return {"id": product_id, "deleted": True}
