from __future__ import annotations

from django.core.serializers.json import DjangoJSONEncoder
from django.db import models
from django.utils.translation import gettext_lazy as _


class Document(models.Model):
    """
    Documento JSON dentro de una colección.

    Respaldo por defecto del DocumentStore. Las subcolecciones se guardan con
    su path completo en `collection` ("categories/<id>/subcategories").
    """

    collection = models.CharField(_("colección"), max_length=255, db_index=True)
    doc_id = models.CharField(_("id de documento"), max_length=128)
    data = models.JSONField(_("datos"), default=dict, blank=True, encoder=DjangoJSONEncoder)

    created_at = models.DateTimeField(_("creado en"), auto_now_add=True)
    updated_at = models.DateTimeField(_("actualizado en"), auto_now=True)

    class Meta:
        app_label = "tienda"
        verbose_name = _("documento")
        verbose_name_plural = _("documentos")
        ordering = ("collection", "doc_id")
        constraints = [
            models.UniqueConstraint(fields=["collection", "doc_id"], name="tienda_document_unique_path"),
        ]

    def __str__(self) -> str:
        return f"{self.collection}/{self.doc_id}"

    def as_dict(self) -> dict:
        return {"id": self.doc_id, **(self.data or {})}
