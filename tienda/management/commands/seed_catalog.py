"""
Carga un catálogo de demostración en el document store configurado.

Uso:
    python manage.py seed_catalog
    python manage.py seed_catalog --reset
"""

from __future__ import annotations

from django.core.management import BaseCommand

from tienda import backends
from tienda.services import CategoryService, ProductService
from tienda.services.categories import COLLECTION as CATEGORIES, subcollection


CATALOG = [
    {
        "name": {"es": "Suplementos", "en": "Supplements"},
        "subcategories": [
            {
                "name": {"es": "Vitaminas", "en": "Vitamins"},
                "products": [
                    ("Omega 3", "Omega 3", "Cápsulas", [("60 cápsulas", 19.99, 10), ("120 cápsulas", 34.5, 4)]),
                    ("Vitamina C", "Vitamin C", "Comprimidos", [("30 comprimidos", 9.9, 25)]),
                    ("Magnesio", "Magnesium", "Polvo", [("200 g", 14.0, 0), ("400 g", 24.0, 8)]),
                ],
            },
            {
                "name": {"es": "Proteínas", "en": "Proteins"},
                "products": [
                    ("Proteína whey", "Whey protein", "Polvo", [("1 kg", 39.0, 6), ("2 kg", 72.0, 3)]),
                    ("Barra proteica", "Protein bar", "Barra", [("Unidad", 2.5, 100)]),
                ],
            },
        ],
    },
    {
        "name": {"es": "Indumentaria", "en": "Apparel"},
        "subcategories": [
            {
                "name": {"es": "Camisetas", "en": "Jerseys"},
                "products": [
                    ("Camiseta titular", "Home jersey", "Camiseta", [("S", 45.0, 5), ("M", 45.0, 7), ("L", 45.0, 2)]),
                    ("Ábaco camiseta retro", "Retro jersey", "Camiseta", [("M", 55.0, 3)]),
                ],
            },
        ],
    },
]


class Command(BaseCommand):
    help = "Carga categorías, subcategorías y productos de demostración"

    def add_arguments(self, parser):
        parser.add_argument(
            "--reset",
            action="store_true",
            help="Borra productos y categorías antes de cargar",
        )

    def handle(self, *args, **opts):
        store = backends.get_document_store()

        if opts["reset"]:
            self._reset(store)

        products = 0
        for c_index, category in enumerate(CATALOG):
            created = CategoryService.create_category(
                {"name": category["name"], "orden": c_index}, store=store
            )
            for s_index, sub in enumerate(category["subcategories"]):
                sub_created = CategoryService.create_subcategory(
                    created["id"], {"name": sub["name"], "orden": s_index}, store=store
                )
                for orden, (title_es, title_en, tipo, options) in enumerate(sub["products"]):
                    ProductService.create_product(
                        {
                            "title": {"es": title_es, "en": title_en},
                            "description": f"{title_es} de demostración.",
                            "category": {"id": created["id"], "name": category["name"]["es"]},
                            "subcategory": {
                                "id": sub_created["id"],
                                "name": sub["name"]["es"],
                                "categoryId": created["id"],
                            },
                            "tipo": tipo,
                            "active": True,
                            "orden": orden,
                            "images": [f"https://placehold.co/600x600?text={title_en.replace(' ', '+')}"],
                            "variants": [
                                {
                                    "label": {"es": "Tamaño", "en": "Size"},
                                    "options": [
                                        {"value": value, "priceUSD": price, "stock": stock}
                                        for value, price, stock in options
                                    ],
                                }
                            ],
                        },
                        store=store,
                    )
                    products += 1

        self.stdout.write(
            self.style.SUCCESS(f"✓ Catálogo cargado: {len(CATALOG)} categorías, {products} productos")
        )

    def _reset(self, store) -> None:
        for doc in store.list("products"):
            store.delete("products", doc["id"])
        for doc in store.list(CATEGORIES):
            for sub in store.list(subcollection(doc["id"])):
                store.delete(subcollection(doc["id"]), sub["id"])
            store.delete(CATEGORIES, doc["id"])
        self.stdout.write(self.style.WARNING("  Catálogo anterior borrado"))
