"""
Store Adapters — Implementaciones de DocumentStore.

Backends disponibles:
- DjangoDocumentStore: Documentos en la base de datos de Django (default)
- InMemoryDocumentStore: Para desarrollo y tests
- FirestoreDocumentStore: Cloud Firestore vía firebase-admin
"""

from .memory import InMemoryDocumentStore


# Lazy imports para no exigir dependencias opcionales
def get_django_store():
    from .django import DjangoDocumentStore
    return DjangoDocumentStore


def get_firestore_store():
    from .firestore import FirestoreDocumentStore
    return FirestoreDocumentStore


__all__ = [
    "InMemoryDocumentStore",
    "get_django_store",
    "get_firestore_store",
]
