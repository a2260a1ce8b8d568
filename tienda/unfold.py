from __future__ import annotations

from django.utils.translation import gettext_lazy as _


DOCUMENTS_URL = "/admin/tienda/document/"


def _collection_items():
    items = [
        {"title": _("Productos"), "icon": "inventory_2", "collection": "products"},
        {"title": _("Categorías"), "icon": "category", "collection": "categories"},
        {"title": _("Pedidos"), "icon": "receipt_long", "collection": "orders"},
        {"title": _("Clientes"), "icon": "group", "collection": "clients"},
        {"title": _("Usuarios admin"), "icon": "admin_panel_settings", "collection": "adminUsers"},
        {"title": _("Carritos"), "icon": "shopping_cart", "collection": "carts"},
    ]
    return [
        {
            "title": item["title"],
            "icon": item["icon"],
            "link": f"{DOCUMENTS_URL}?collection={item['collection']}",
        }
        for item in items
    ]


def get_sidebar_navigation(request):
    """
    Retorna `UNFOLD['SIDEBAR']['navigation']`.

    `group['items']` tiene que ser una lista (no callable).
    """
    return [
        {
            "title": _("Tienda"),
            "icon": "storefront",
            "items": _collection_items(),
        },
        {
            "title": _("Sistema"),
            "icon": "settings",
            "items": [
                {"title": _("Todos los documentos"), "icon": "description", "link": DOCUMENTS_URL},
            ],
        },
    ]
