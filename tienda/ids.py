"""
Tienda IDs — Generación de identificadores únicos.
"""

from __future__ import annotations

import re
import secrets
import string
import unicodedata

from django.utils.text import slugify as django_slugify


# Mismo alfabeto que los auto-ids de documentos de Firestore
_DOC_ID_CHARS = string.ascii_letters + string.digits
_SEPARATORS = re.compile(r"[\W_]+")


def _random(chars: str, length: int) -> str:
    return "".join(secrets.choice(chars) for _ in range(length))


def generate_document_id() -> str:
    """
    Genera ID de documento.

    Formato: 20 caracteres alfanuméricos.
    """
    return _random(_DOC_ID_CHARS, 20)


def generate_uid() -> str:
    """
    Genera uid de identidad (anónima o registrada).

    Formato: 28 caracteres alfanuméricos.
    """
    return _random(_DOC_ID_CHARS, 28)


def generate_token() -> str:
    """Genera un token opaco (credenciales bearer, firmas de upload)."""
    return secrets.token_hex(16)


def strip_accents(text: str) -> str:
    """Elimina diacríticos: "Tamaño" -> "Tamano"."""
    normalized = unicodedata.normalize("NFD", text)
    return "".join(ch for ch in normalized if unicodedata.category(ch) != "Mn")


def slugify(value: str, max_length: int = 120) -> str:
    """
    Genera un slug URL-safe sobre `django.utils.text.slugify`.

    Toda secuencia no alfanumérica (puntuación y "_" incluidos) separa
    palabras: "Omega.3_Plus" -> "omega-3-plus".

    Example:
        slugify("Omega 3-Suplementos") -> "omega-3-suplementos"
    """
    return django_slugify(_SEPARATORS.sub(" ", value or ""))[:max_length].strip("-")
