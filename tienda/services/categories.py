"""
CategoryService — Categorías y subcategorías.

Las subcategorías viven en "categories/<id>/subcategories".
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from tienda import backends
from tienda.documents import Bilingual, Category, Subcategory, as_number
from tienda.exceptions import InvalidInput, NotFound


logger = logging.getLogger(__name__)

COLLECTION = "categories"


def subcollection(category_id: str) -> str:
    return f"{COLLECTION}/{category_id}/subcategories"


def _name(value) -> Bilingual:
    name = Bilingual.coerce(value)
    if not name:
        raise InvalidInput("missing_field", "name es requerido", {"field": "name"})
    return name


class CategoryService:

    @staticmethod
    def list_categories(store=None) -> list[Category]:
        """
        Categorías con sus subcategorías, ordenadas por `orden`.

        Subcategorías cuyo categoryId apunta a otra categoría se descartan.
        """
        store = store or backends.get_document_store()
        categories = []
        for doc in store.list(COLLECTION):
            category = Category.from_dict(doc)
            subs = [
                Subcategory.from_dict(sub, category_id=category.id)
                for sub in store.list(subcollection(category.id))
            ]
            category.subcategories = sorted(
                (s for s in subs if s.category_id == category.id),
                key=lambda s: s.orden,
            )
            categories.append(category)
        return sorted(categories, key=lambda c: c.orden)

    @staticmethod
    def create_category(payload: Mapping, store=None) -> dict:
        store = store or backends.get_document_store()
        name = _name(payload.get("name"))
        doc = {"name": name.to_dict()}
        orden = as_number(payload.get("orden"))
        if orden is not None:
            doc["orden"] = orden
        category_id = store.add(COLLECTION, doc)
        logger.info("Categoría creada", extra={"category_id": category_id})
        return {"id": category_id, **doc}

    @staticmethod
    def delete_category(category_id: str, store=None) -> dict:
        store = store or backends.get_document_store()
        store.delete(COLLECTION, category_id)
        return {"id": category_id, "deleted": True}

    @staticmethod
    def create_subcategory(category_id: str, payload: Mapping, store=None) -> dict:
        store = store or backends.get_document_store()
        if store.get(COLLECTION, category_id) is None:
            raise NotFound("not_found", "Category not found", {"id": category_id})
        name = _name(payload.get("name"))
        doc = {"name": name.to_dict(), "categoryId": category_id}
        orden = as_number(payload.get("orden"))
        if orden is not None:
            doc["orden"] = orden
        sub_id = store.add(subcollection(category_id), doc)
        return {"id": sub_id, **doc}

    @staticmethod
    def delete_subcategory(category_id: str, subcategory_id: str, store=None) -> dict:
        store = store or backends.get_document_store()
        store.delete(subcollection(category_id), subcategory_id)
        return {"id": subcategory_id, "deleted": True}
