"""
Tienda Models — Modelos de la app.

Re-exports:
    from tienda.models import Document
"""

from .document import Document  # noqa: F401
