"""
Navega el catálogo desde la terminal con el mismo pipeline del storefront.

Uso:
    python manage.py browse_catalog
    python manage.py browse_catalog --cat=<id> --sort=priceAsc --pages=2
    python manage.py browse_catalog --q=omega --lang=en
"""

from __future__ import annotations

from django.core.management import BaseCommand, CommandError

from tienda.storefront.catalog import CatalogBrowser
from tienda.storefront.sorting import SORT_OPTIONS, min_price


class Command(BaseCommand):
    help = "Lista productos aplicando búsqueda, filtros, orden y paginación"

    def add_arguments(self, parser):
        parser.add_argument("--q", default="", help="Término de búsqueda (activa el modo búsqueda)")
        parser.add_argument("--cat", default="", help="Id de categoría")
        parser.add_argument("--sub", default="", help="Id de subcategoría")
        parser.add_argument("--type", default="", help="Tipo de producto")
        parser.add_argument("--sort", default="az", help=f"Orden: {', '.join(o for o in SORT_OPTIONS if o)}")
        parser.add_argument("--pages", type=int, default=1, help="Páginas a cargar en modo paginado")
        parser.add_argument("--page-size", type=int, default=None)
        parser.add_argument("--lang", default=None, help="Idioma de los títulos (es, en)")

    def handle(self, *args, **opts):
        if opts["sort"] not in SORT_OPTIONS:
            raise CommandError(f"Orden inválido: {opts['sort']}")

        browser = CatalogBrowser(page_size=opts["page_size"])
        if opts["lang"]:
            browser.set_language(opts["lang"])
        browser.load_categories()
        browser.apply_query_params(
            {
                "q": opts["q"],
                "cat": opts["cat"],
                "sub": opts["sub"],
                "type": opts["type"],
                "sort": opts["sort"],
            }
        )

        if not browser.is_search_mode:
            for _ in range(max(opts["pages"], 1) - 1):
                if not browser.load_more():
                    break

        products = browser.sorted_products
        for product in products:
            title = product.title.get(browser.language)
            self.stdout.write(f"{product.id}  {title}  US$ {min_price(product):.2f}  stock={product.stock_total}")

        mode = "búsqueda" if browser.is_search_mode else "paginado"
        self.stdout.write(self.style.SUCCESS(f"✓ {len(products)} productos ({mode}, has_more={browser.has_more})"))
        self.stdout.write(f"  query: {browser.to_query_params()}")
