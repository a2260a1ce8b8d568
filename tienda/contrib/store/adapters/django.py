"""
Django Document Store — Documentos JSON en la base de datos de Django.

Backend por defecto. Guarda cada documento como una fila del modelo
`tienda.models.Document`; los filtros por igualdad se traducen a lookups
sobre el JSONField (`data__category__id`).
"""

from __future__ import annotations

import logging
from typing import Any

from django.db import transaction

from tienda.contrib.store.adapters.memory import stamp
from tienda.exceptions import NotFound
from tienda.ids import generate_document_id
from tienda.models import Document
from tienda.protocols import Page

logger = logging.getLogger(__name__)


class DjangoDocumentStore:
    """
    DocumentStore respaldado por el ORM.

    Orden natural: por id de documento (igual que un store sin order-by).
    """

    def _qs(self, collection: str):
        return Document.objects.filter(collection=collection)

    def get(self, collection: str, doc_id: str) -> dict | None:
        doc = self._qs(collection).filter(doc_id=doc_id).first()
        return doc.as_dict() if doc else None

    def list(self, collection: str) -> list[dict]:
        return [doc.as_dict() for doc in self._qs(collection).order_by("doc_id")]

    def add(self, collection: str, data: dict) -> str:
        doc_id = generate_document_id()
        Document.objects.create(collection=collection, doc_id=doc_id, data=stamp(data))
        return doc_id

    def set(self, collection: str, doc_id: str, data: dict, *, merge: bool = False) -> None:
        with transaction.atomic():
            doc = self._qs(collection).select_for_update().filter(doc_id=doc_id).first()
            if doc is None:
                Document.objects.create(collection=collection, doc_id=doc_id, data=stamp(data))
                return
            if merge:
                doc.data = {**(doc.data or {}), **stamp(data)}
            else:
                doc.data = stamp(data)
            doc.save(update_fields=["data", "updated_at"])

    def update(self, collection: str, doc_id: str, data: dict) -> None:
        with transaction.atomic():
            doc = self._qs(collection).select_for_update().filter(doc_id=doc_id).first()
            if doc is None:
                raise NotFound("not_found", f"{collection}/{doc_id} no existe")
            doc.data = {**(doc.data or {}), **stamp(data)}
            doc.save(update_fields=["data", "updated_at"])

    def delete(self, collection: str, doc_id: str) -> None:
        deleted, _ = self._qs(collection).filter(doc_id=doc_id).delete()
        if not deleted:
            logger.debug("delete sin efecto: %s/%s", collection, doc_id)

    def query(
        self,
        collection: str,
        *,
        filters: list[tuple[str, Any]] | None = None,
        limit: int | None = None,
        start_after: str | None = None,
    ) -> Page:
        qs = self._qs(collection)
        for path, value in filters or []:
            qs = qs.filter(**{"data__" + path.replace(".", "__"): value})
        if start_after is not None:
            qs = qs.filter(doc_id__gt=start_after)
        qs = qs.order_by("doc_id")
        if limit is not None:
            qs = qs[:limit]
        docs = [doc.as_dict() for doc in qs]
        return Page(docs=docs, cursor=docs[-1]["id"] if docs else None)
