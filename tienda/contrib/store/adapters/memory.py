"""
In-Memory Document Store — Para desarrollo y tests.
"""

from __future__ import annotations

import copy
import threading
from typing import Any

from django.utils import timezone

from tienda.exceptions import NotFound
from tienda.ids import generate_document_id
from tienda.protocols import SERVER_TIMESTAMP, Page


_MISSING = object()


def resolve_path(data: dict, path: str) -> Any:
    """Lee un campo por path con punto ("category.id")."""
    value: Any = data
    for part in path.split("."):
        if not isinstance(value, dict) or part not in value:
            return _MISSING
        value = value[part]
    return value


def stamp(data: dict) -> dict:
    """Reemplaza SERVER_TIMESTAMP por la hora actual (ISO 8601)."""
    now = timezone.now().isoformat()
    return {k: (now if v is SERVER_TIMESTAMP else v) for k, v in data.items()}


class InMemoryDocumentStore:
    """
    DocumentStore en memoria.

    Los documentos se copian al escribir y al leer: mutar un resultado no
    altera el store.

    Uso:
        store = InMemoryDocumentStore()
        doc_id = store.add("products", {"title": {"es": "Omega 3"}})
        store.get("products", doc_id)
    """

    def __init__(self, *, fail_reads: bool = False, fail_writes: bool = False):
        """
        Args:
            fail_reads: Si True, toda lectura levanta ConnectionError
            fail_writes: Si True, toda escritura levanta ConnectionError
        """
        self.fail_reads = fail_reads
        self.fail_writes = fail_writes
        self._lock = threading.RLock()
        self._collections: dict[str, dict[str, dict]] = {}

    def _check(self, write: bool) -> None:
        if write and self.fail_writes:
            raise ConnectionError("store unavailable (writes)")
        if not write and self.fail_reads:
            raise ConnectionError("store unavailable (reads)")

    def _docs(self, collection: str) -> dict[str, dict]:
        return self._collections.setdefault(collection, {})

    def get(self, collection: str, doc_id: str) -> dict | None:
        self._check(write=False)
        with self._lock:
            data = self._docs(collection).get(doc_id)
            if data is None:
                return None
            return {"id": doc_id, **copy.deepcopy(data)}

    def list(self, collection: str) -> list[dict]:
        return self.query(collection).docs

    def add(self, collection: str, data: dict) -> str:
        doc_id = generate_document_id()
        self.set(collection, doc_id, data)
        return doc_id

    def set(self, collection: str, doc_id: str, data: dict, *, merge: bool = False) -> None:
        self._check(write=True)
        with self._lock:
            docs = self._docs(collection)
            payload = copy.deepcopy(stamp(data))
            if merge and doc_id in docs:
                docs[doc_id].update(payload)
            else:
                docs[doc_id] = payload

    def update(self, collection: str, doc_id: str, data: dict) -> None:
        self._check(write=True)
        with self._lock:
            docs = self._docs(collection)
            if doc_id not in docs:
                raise NotFound("not_found", f"{collection}/{doc_id} no existe")
            docs[doc_id].update(copy.deepcopy(stamp(data)))

    def delete(self, collection: str, doc_id: str) -> None:
        self._check(write=True)
        with self._lock:
            self._docs(collection).pop(doc_id, None)

    def query(
        self,
        collection: str,
        *,
        filters: list[tuple[str, Any]] | None = None,
        limit: int | None = None,
        start_after: str | None = None,
    ) -> Page:
        self._check(write=False)
        with self._lock:
            items = sorted(self._docs(collection).items())
            result = []
            for doc_id, data in items:
                if start_after is not None and doc_id <= start_after:
                    continue
                if any(resolve_path(data, path) != value for path, value in filters or []):
                    continue
                result.append({"id": doc_id, **copy.deepcopy(data)})
                if limit is not None and len(result) >= limit:
                    break
        return Page(docs=result, cursor=result[-1]["id"] if result else None)

    def clear(self) -> None:
        with self._lock:
            self._collections.clear()
