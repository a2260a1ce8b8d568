from __future__ import annotations

from django.test import SimpleTestCase

from tienda.documents import (
    Bilingual,
    CartItem,
    Product,
    Variant,
    as_number,
    as_stock,
    derive_price_and_stock,
)
from tienda.ids import slugify, strip_accents


class NumberCoercionTests(SimpleTestCase):
    def test_as_number_rejects_non_numeric(self) -> None:
        """Booleanos, strings y no finitos no son números."""
        self.assertIsNone(as_number(True))
        self.assertIsNone(as_number("10"))
        self.assertIsNone(as_number(float("nan")))
        self.assertIsNone(as_number(float("inf")))
        self.assertEqual(as_number(19.99), 19.99)

    def test_as_stock_defaults_to_zero(self) -> None:
        self.assertEqual(as_stock(None), 0)
        self.assertEqual(as_stock(float("nan")), 0)
        self.assertEqual(as_stock(-3), 0)
        self.assertEqual(as_stock(7), 7)


class BilingualTests(SimpleTestCase):
    def test_coerce_string_copies_to_both_languages(self) -> None:
        text = Bilingual.coerce("Omega 3")
        self.assertEqual(text.es, "Omega 3")
        self.assertEqual(text.en, "Omega 3")

    def test_get_falls_back_to_spanish(self) -> None:
        text = Bilingual(es="Tamaño", en="")
        self.assertEqual(text.get("en"), "Tamaño")
        self.assertEqual(text.get("en", fallback=False), "")


class PriceDerivationTests(SimpleTestCase):
    def test_price_is_min_and_stock_is_sum_across_variants(self) -> None:
        """priceUSD = mínimo de opciones; stockTotal = suma de opciones."""
        variants = [
            Variant.from_dict({
                "label": {"es": "Tamaño"},
                "options": [
                    {"value": "60", "priceUSD": 19.99, "stock": 10},
                    {"value": "120", "priceUSD": 34.5, "stock": 4},
                ],
            }),
            Variant.from_dict({
                "label": {"es": "Sabor"},
                "options": [{"value": "Limón", "priceUSD": 12.0}],
            }),
        ]
        price, stock = derive_price_and_stock(variants)
        self.assertEqual(price, 12.0)
        self.assertEqual(stock, 14)

    def test_no_variants_has_no_price(self) -> None:
        self.assertEqual(derive_price_and_stock([]), (None, 0))

    def test_invalid_stock_counts_as_zero(self) -> None:
        variant = Variant.from_dict({
            "label": {"es": "Tamaño"},
            "options": [{"value": "S", "priceUSD": 5, "stock": "muchos"}],
        })
        self.assertEqual(variant.options[0].stock, 0)


class ProductNormalizationTests(SimpleTestCase):
    def test_legacy_string_title_and_missing_slug(self) -> None:
        product = Product.from_dict({"id": "abc", "title": "Omega 3 Forte"})
        self.assertEqual(product.title.es, "Omega 3 Forte")
        self.assertEqual(product.slug, "abc-omega-3-forte")

    def test_title_from_legacy_fields(self) -> None:
        product = Product.from_dict({"id": "x", "titleEs": "Magnesio", "titleEn": "Magnesium"})
        self.assertEqual(product.title.get("en"), "Magnesium")

    def test_tipo_list_is_kept(self) -> None:
        product = Product.from_dict({"id": "x", "title": {"es": "A"}, "tipo": ["Polvo", ""]})
        self.assertEqual(product.tipos, ["Polvo"])


class CartItemTests(SimpleTestCase):
    def test_key_uses_id_variant_id_and_label(self) -> None:
        item = CartItem.from_dict({"id": 7, "variantId": "Tamaño-S", "variantLabel": "S"})
        self.assertEqual(item.key, ("7", "Tamaño-S", "S"))

    def test_price_falls_back_to_price_usd(self) -> None:
        item = CartItem.from_dict({"id": "p1", "priceUSD": 9.5, "quantity": 2})
        self.assertEqual(item.price, 9.5)
        self.assertEqual(item.line_total, 19.0)

    def test_variant_title_string_normalized(self) -> None:
        item = CartItem.from_dict({"id": "p1", "variantTitle": "Talle"})
        self.assertEqual(item.variant, Bilingual(es="Talle", en="Talle"))


class IdsTests(SimpleTestCase):
    def test_slugify_strips_accents_and_collapses(self) -> None:
        self.assertEqual(slugify("Omega 3-Suplementos"), "omega-3-suplementos")
        self.assertEqual(slugify("  Ábaco   Camión!! "), "abaco-camion")

    def test_slugify_punctuation_and_underscore_separate_words(self) -> None:
        self.assertEqual(slugify("Omega.3_Plus"), "omega-3-plus")
        self.assertEqual(slugify("Vit. C / Zinc -- 500mg"), "vit-c-zinc-500mg")
        self.assertEqual(slugify(""), "")

    def test_slugify_truncates_without_trailing_dash(self) -> None:
        self.assertEqual(slugify("abc def", max_length=4), "abc")

    def test_strip_accents(self) -> None:
        self.assertEqual(strip_accents("Tamaño"), "Tamano")
