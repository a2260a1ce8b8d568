"""
Tienda Backends — Contexto de colaboradores externos configurados.

Cada colaborador (document store, identity provider, payment gateway,
image CDN) se construye de forma perezosa a partir de settings.TIENDA
y queda cacheado hasta `clear()`.

Uso:
    from tienda import backends

    store = backends.get_document_store()
    backends.set_document_store(InMemoryDocumentStore())  # tests
"""

from __future__ import annotations

import logging
import threading
from typing import Any

from django.utils.module_loading import import_string

from tienda.conf import get_tienda_setting


logger = logging.getLogger(__name__)


class _Backends:
    """Contexto thread-safe de instancias de backends."""

    def __init__(self):
        self._lock = threading.RLock()
        self._instances: dict[str, Any] = {}

    def _build(self, key: str) -> Any:
        conf = get_tienda_setting(key)
        backend_class = import_string(conf["BACKEND"])
        logger.debug("Construyendo backend %s: %s", key, conf["BACKEND"])
        return backend_class(**(conf.get("OPTIONS") or {}))

    def get(self, key: str) -> Any:
        with self._lock:
            if key not in self._instances:
                self._instances[key] = self._build(key)
            return self._instances[key]

    def set(self, key: str, instance: Any) -> None:
        """Instala una instancia explícita (útil para tests)."""
        with self._lock:
            self._instances[key] = instance

    def clear(self) -> None:
        """Descarta todas las instancias. Útil para tests."""
        with self._lock:
            self._instances.clear()


_backends = _Backends()


def get_document_store():
    return _backends.get("DOCUMENT_STORE")


def get_identity_provider():
    return _backends.get("IDENTITY_PROVIDER")


def get_payment_gateway():
    return _backends.get("PAYMENT_GATEWAY")


def get_image_cdn():
    return _backends.get("IMAGE_CDN")


def set_document_store(instance) -> None:
    _backends.set("DOCUMENT_STORE", instance)


def set_identity_provider(instance) -> None:
    _backends.set("IDENTITY_PROVIDER", instance)


def set_payment_gateway(instance) -> None:
    _backends.set("PAYMENT_GATEWAY", instance)


def set_image_cdn(instance) -> None:
    _backends.set("IMAGE_CDN", instance)


clear = _backends.clear
reset = _backends.clear  # Alias para tests
