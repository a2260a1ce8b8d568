"""
Firestore Document Store — Integración con Cloud Firestore.

Requiere: pip install firebase-admin
"""

from __future__ import annotations

import logging
from typing import Any

from tienda.exceptions import NotFound
from tienda.protocols import SERVER_TIMESTAMP, Page

logger = logging.getLogger(__name__)


class FirestoreDocumentStore:
    """
    DocumentStore sobre Cloud Firestore.

    Args:
        credentials_path: Ruta al JSON de la service account. Si se omite se
            usan las credenciales por defecto del entorno.
        project_id: Proyecto de Firebase (opcional)

    Configuración vía settings:
        TIENDA = {
            "DOCUMENT_STORE": {
                "BACKEND": "tienda.contrib.store.adapters.firestore.FirestoreDocumentStore",
                "OPTIONS": {"credentials_path": os.environ["FIREBASE_CREDENTIALS"]},
            },
        }
    """

    def __init__(self, credentials_path: str | None = None, project_id: str | None = None):
        try:
            from firebase_admin import firestore
        except ImportError:
            raise ImportError(
                "firebase-admin no instalado. Ejecute: pip install firebase-admin"
            )

        from tienda.contrib.identity.adapters.firebase import get_firebase_app

        self._firestore = firestore
        app = get_firebase_app(credentials_path=credentials_path, project_id=project_id)
        self.db = firestore.client(app)

    def _prepare(self, data: dict) -> dict:
        return {
            k: (self._firestore.SERVER_TIMESTAMP if v is SERVER_TIMESTAMP else v)
            for k, v in data.items()
        }

    @staticmethod
    def _to_dict(snapshot) -> dict:
        return {"id": snapshot.id, **(snapshot.to_dict() or {})}

    def get(self, collection: str, doc_id: str) -> dict | None:
        snapshot = self.db.collection(collection).document(doc_id).get()
        if not snapshot.exists:
            return None
        return self._to_dict(snapshot)

    def list(self, collection: str) -> list[dict]:
        return [self._to_dict(s) for s in self.db.collection(collection).stream()]

    def add(self, collection: str, data: dict) -> str:
        _, ref = self.db.collection(collection).add(self._prepare(data))
        return ref.id

    def set(self, collection: str, doc_id: str, data: dict, *, merge: bool = False) -> None:
        self.db.collection(collection).document(doc_id).set(self._prepare(data), merge=merge)

    def update(self, collection: str, doc_id: str, data: dict) -> None:
        from google.api_core.exceptions import NotFound as FirestoreNotFound

        try:
            self.db.collection(collection).document(doc_id).update(self._prepare(data))
        except FirestoreNotFound:
            raise NotFound("not_found", f"{collection}/{doc_id} no existe")

    def delete(self, collection: str, doc_id: str) -> None:
        self.db.collection(collection).document(doc_id).delete()

    def query(
        self,
        collection: str,
        *,
        filters: list[tuple[str, Any]] | None = None,
        limit: int | None = None,
        start_after: str | None = None,
    ) -> Page:
        from google.cloud.firestore_v1.base_query import FieldFilter

        ref = self.db.collection(collection)
        query = ref
        for path, value in filters or []:
            query = query.where(filter=FieldFilter(path, "==", value))
        # Orden por id de documento: el cursor sigue siendo válido aunque el
        # documento se haya borrado.
        query = query.order_by("__name__")
        if start_after is not None:
            query = query.start_after({"__name__": ref.document(start_after)})
        if limit is not None:
            query = query.limit(limit)
        docs = [self._to_dict(s) for s in query.stream()]
        return Page(docs=docs, cursor=docs[-1]["id"] if docs else None)
