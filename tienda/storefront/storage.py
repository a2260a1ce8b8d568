"""
Almacenamiento local del cliente — strings JSON por clave.

- MemoryStorage: dict en memoria (tests, CLI)
- CacheStorage: respaldado por el cache de Django, con prefijo por sesión
"""

from __future__ import annotations

import json
import logging
from typing import Any

from django.core.cache import caches

logger = logging.getLogger(__name__)


class MemoryStorage:
    def __init__(self, initial: dict[str, str] | None = None):
        self._data: dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> str | None:
        return self._data.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove_item(self, key: str) -> None:
        self._data.pop(key, None)


class CacheStorage:
    """
    LocalStorage sobre un cache de Django.

    Args:
        namespace: Prefijo de claves (ej.: la session key del navegador)
        alias: Alias del cache en settings.CACHES
        timeout: Expiración en segundos (None = sin expiración)
    """

    def __init__(self, namespace: str, *, alias: str = "default", timeout: int | None = None):
        self.namespace = namespace
        self.cache = caches[alias]
        self.timeout = timeout

    def _key(self, key: str) -> str:
        return f"tienda:{self.namespace}:{key}"

    def get_item(self, key: str) -> str | None:
        return self.cache.get(self._key(key))

    def set_item(self, key: str, value: str) -> None:
        self.cache.set(self._key(key), value, self.timeout)

    def remove_item(self, key: str) -> None:
        self.cache.delete(self._key(key))


def safe_parse(storage, key: str, fallback: Any) -> Any:
    """
    Lee y parsea JSON de `storage`.

    Si el valor no existe devuelve `fallback`; si está corrupto lo borra y
    devuelve `fallback`.
    """
    raw = storage.get_item(key)
    if not raw:
        return fallback
    try:
        return json.loads(raw)
    except ValueError:
        logger.warning("JSON corrupto en %s; se limpia", key)
        storage.remove_item(key)
        return fallback


def save_json(storage, key: str, value: Any) -> None:
    storage.set_item(key, json.dumps(value))
