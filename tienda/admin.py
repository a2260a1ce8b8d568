from __future__ import annotations

import json
import logging

from django.contrib import admin
from django.utils.html import format_html
from django.utils.translation import gettext_lazy as _
from unfold.admin import ModelAdmin
from unfold.decorators import display

from .models import Document


logger = logging.getLogger(__name__)

COLLECTIONS = ("products", "categories", "orders", "clients", "adminUsers", "carts")


class CollectionFilter(admin.SimpleListFilter):
    """Filtra por colección raíz; las subcolecciones se agrupan con su padre."""

    title = _("colección")
    parameter_name = "collection"

    def lookups(self, request, model_admin):
        return [(name, name) for name in COLLECTIONS]

    def queryset(self, request, queryset):
        value = self.value()
        if not value:
            return queryset
        return queryset.filter(collection__startswith=value)


@admin.register(Document)
class DocumentAdmin(ModelAdmin):
    list_display = ["path", "title_display", "estado_badge", "updated_at"]
    list_filter = (CollectionFilter,)
    search_fields = ("doc_id", "collection")
    ordering = ("collection", "doc_id")
    list_filter_submit = True
    list_fullwidth = True
    compressed_fields = True
    warn_unsaved_form = True

    fieldsets = (
        (_("Ubicación"), {"fields": ("collection", "doc_id"), "classes": ("tab",)}),
        (_("Datos"), {"fields": ("data_display", "data"), "classes": ("tab",)}),
        (_("Auditoría"), {"fields": ("created_at", "updated_at"), "classes": ("tab",)}),
    )
    readonly_fields = ("created_at", "updated_at", "data_display")

    @display(description=_("documento"), ordering="doc_id")
    def path(self, obj: Document) -> str:
        return str(obj)

    @display(description=_("título"))
    def title_display(self, obj: Document) -> str:
        data = obj.data or {}
        value = data.get("title") or data.get("name") or data.get("email") or ""
        if isinstance(value, dict):
            value = value.get("es") or value.get("en") or ""
        return value or "-"

    @display(
        description=_("estado"),
        label={
            "En proceso": "warning",
            "Confirmado": "info",
            "Entregado": "success",
            "Cancelado": "danger",
        },
    )
    def estado_badge(self, obj: Document) -> str:
        return (obj.data or {}).get("estado") or "-"

    @display(description=_("JSON"))
    def data_display(self, obj: Document) -> str:
        """JSON formateado de forma legible."""
        if not obj or not obj.data:
            return "-"
        formatted = json.dumps(obj.data, indent=2, ensure_ascii=False, sort_keys=True, default=str)
        return format_html(
            '<pre class="bg-base-50 border border-base-200 dark:bg-base-800 dark:border-base-700 '
            'font-mono overflow-x-auto p-3 rounded-default text-sm">{}</pre>',
            formatted,
        )
