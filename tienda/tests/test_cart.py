from __future__ import annotations

import json

from django.test import SimpleTestCase

from tienda.contrib.identity.adapters.memory import InMemoryIdentityProvider
from tienda.contrib.store.adapters.memory import InMemoryDocumentStore
from tienda.exceptions import IdentityTimeout
from tienda.storefront.cart import CART_KEY, SHIPPING_KEY, CartSession
from tienda.storefront.identity import IdentityTracker
from tienda.storefront.storage import MemoryStorage, safe_parse


def _item(product_id: str = "p1", quantity: int = 1, *, label: str = "60 caps", price: float = 10) -> dict:
    return {
        "id": product_id,
        "variantId": f"Tamaño-{label}",
        "variantLabel": label,
        "title": {"es": "Omega 3", "en": "Omega 3"},
        "price": price,
        "quantity": quantity,
    }


class CartTestCase(SimpleTestCase):
    def setUp(self) -> None:
        self.provider = InMemoryIdentityProvider()
        self.session = self.provider.client_session()
        self.store = InMemoryDocumentStore()
        self.storage = MemoryStorage()

    def cart(self, **kwargs) -> CartSession:
        kwargs.setdefault("store", self.store)
        kwargs.setdefault("storage", self.storage)
        kwargs.setdefault("timeout", 0.2)
        return CartSession(self.session, **kwargs)

    def local_items(self) -> list[dict]:
        return safe_parse(self.storage, CART_KEY, [])


class MergeTests(CartTestCase):
    def test_same_identity_sums_quantities_in_any_order(self) -> None:
        """Dos líneas con igual (id, variantId, variantLabel) se fusionan."""
        for first, second in ((2, 3), (3, 2)):
            with self.subTest(first=first, second=second):
                cart = self.cart(storage=MemoryStorage())
                cart.add_to_cart(_item(quantity=first))
                cart.add_to_cart(_item(quantity=second))
                self.assertEqual(len(cart.items), 1)
                self.assertEqual(cart.items[0].quantity, 5)

    def test_different_variant_is_a_new_line(self) -> None:
        cart = self.cart()
        cart.add_to_cart(_item(label="60 caps"))
        cart.add_to_cart(_item(label="120 caps"))
        self.assertEqual(len(cart.items), 2)

    def test_add_persists_locally_and_defers_remote(self) -> None:
        cart = self.cart()
        cart.start()
        cart.add_to_cart(_item())

        self.assertEqual(len(self.local_items()), 1)
        self.assertTrue(cart.dirty)
        self.assertIsNone(self.store.get("carts", cart.uid))

        result = cart.sync()
        self.assertTrue(result.ok)
        self.assertFalse(cart.dirty)
        self.assertEqual(len(self.store.get("carts", cart.uid)["items"]), 1)

    def test_item_without_id_is_ignored(self) -> None:
        cart = self.cart()

        self.assertIsNone(cart.add_to_cart({"price": 10, "quantity": 2}))
        self.assertIsNone(cart.add_to_cart({}))

        self.assertEqual(cart.items, [])
        self.assertEqual(cart.total, 0)
        self.assertFalse(cart.dirty)
        self.assertEqual(self.local_items(), [])


class UpdateRemoveTests(CartTestCase):
    def test_quantity_zero_removes_exactly_one_line(self) -> None:
        cart = self.cart()
        cart.add_to_cart(_item("p1"))
        cart.add_to_cart(_item("p2"))
        cart.update_item("p1", "60 caps", quantity=0)
        self.assertEqual([i.id for i in cart.items], ["p2"])

    def test_partial_update(self) -> None:
        cart = self.cart()
        cart.add_to_cart(_item("p1"))
        cart.update_item("p1", "60 caps", quantity=4, custom_name="LUIS")
        self.assertEqual(cart.items[0].quantity, 4)
        self.assertEqual(self.local_items()[0]["customName"], "LUIS")

    def test_remove_writes_remote_immediately(self) -> None:
        cart = self.cart()
        cart.start()
        cart.add_to_cart(_item("p1"))
        cart.add_to_cart(_item("p2"))
        cart.sync()

        result = cart.remove_item("p1", "60 caps")

        self.assertTrue(result.ok)
        remote = self.store.get("carts", cart.uid)["items"]
        self.assertEqual([i["id"] for i in remote], ["p2"])

    def test_clear_empties_local_and_remote(self) -> None:
        cart = self.cart()
        cart.start()
        cart.add_to_cart(_item())
        cart.sync()

        cart.clear_cart()

        self.assertEqual(cart.items, [])
        self.assertEqual(self.local_items(), [])
        self.assertEqual(self.store.get("carts", cart.uid)["items"], [])

    def test_remote_failure_is_degraded_not_raised(self) -> None:
        cart = self.cart()
        cart.start()
        cart.add_to_cart(_item())
        self.store.fail_writes = True

        result = cart.remove_item("p1", "60 caps")

        self.assertFalse(result.ok)
        self.assertIn("unavailable", result.reason)
        self.assertEqual(self.local_items(), [])


class ReconciliationTests(CartTestCase):
    def test_empty_remote_never_overwrites_local(self) -> None:
        """Carrito local no vacío + remoto vacío: el local queda intacto."""
        self.storage.set_item(CART_KEY, json.dumps([_item("p1", 2)]))
        self.session.sign_in("user-1")
        self.store.set("carts", "user-1", {"items": []})

        cart = self.cart()
        cart.start()

        self.assertEqual([(i.id, i.quantity) for i in cart.items], [("p1", 2)])
        self.assertEqual(self.local_items()[0]["quantity"], 2)

    def test_remote_adopted_and_enriched(self) -> None:
        self.session.sign_in("user-1")
        self.store.set("products", "p1", {
            "title": {"es": "Omega 3 Forte", "en": "Omega 3 Strong"},
            "images": ["https://cdn/omega.jpg"],
            "slug": "omega-3-forte",
        })
        self.store.set("carts", "user-1", {"items": [_item("p1", 3), _item("borrado", 1)]})

        cart = self.cart()
        cart.start()

        self.assertEqual(len(cart.items), 2)
        first = cart.items[0]
        self.assertEqual(first.title.en, "Omega 3 Strong")
        self.assertEqual(first.image, "https://cdn/omega.jpg")
        self.assertEqual(first.slug, "omega-3-forte")
        self.assertEqual(cart.items[1].title.es, "Omega 3")
        self.assertEqual(len(self.local_items()), 2)

    def test_remote_read_failure_keeps_local(self) -> None:
        self.storage.set_item(CART_KEY, json.dumps([_item("p1")]))
        self.store.fail_reads = True
        cart = self.cart()
        cart.start()
        self.assertEqual(len(cart.items), 1)

    def test_identity_change_triggers_reload(self) -> None:
        self.store.set("carts", "user-2", {"items": [_item("p9", 1)]})
        cart = self.cart()
        cart.start()
        cart.clear_cart()

        self.session.sign_in("user-2")
        cart.pump()

        self.assertEqual(cart.uid, "user-2")
        self.assertEqual([i.id for i in cart.items], ["p9"])

    def test_result_for_superseded_identity_is_discarded(self) -> None:
        store = self.store
        session = self.session

        class SwitchingStore(InMemoryDocumentStore):
            def get(self, collection, doc_id):
                doc = store.get(collection, doc_id)
                if collection == "carts" and doc_id == "user-1":
                    session.sign_in("user-2")
                return doc

        store.set("carts", "user-1", {"items": [_item("viejo", 1)]})
        self.session.sign_in("user-1")

        cart = self.cart(store=SwitchingStore())
        cart.start()

        self.assertEqual(cart.items, [])

    def test_corrupt_local_storage_is_cleared(self) -> None:
        self.storage.set_item(CART_KEY, "{no es json")
        cart = self.cart()
        self.assertEqual(cart.items, [])
        self.assertIsNone(self.storage.get_item(CART_KEY))


class TotalTests(CartTestCase):
    def test_total_adds_surcharge_only_for_designated_region(self) -> None:
        cart = self.cart()
        cart.add_to_cart(_item("p1", 2, price=10))
        cart.add_to_cart(_item("p2", 1, price=5.5))
        self.assertEqual(cart.total, 25.5)

        cart.set_shipping_data({"state": "montevideo"})
        self.assertEqual(cart.total, 25.5 + 169)

        cart.set_shipping_data({"state": "Canelones"})
        self.assertEqual(cart.total, 25.5)
        self.assertEqual(safe_parse(self.storage, SHIPPING_KEY, {}), {"state": "Canelones"})

    def test_departamento_takes_precedence_over_state(self) -> None:
        cart = self.cart()
        cart.add_to_cart(_item("p1", 1, price=10))

        cart.set_shipping_data({"departamento": "Montevideo", "state": "Canelones"})
        self.assertEqual(cart.department, "Montevideo")
        self.assertEqual(cart.total, 10 + 169)

        cart.set_shipping_data({"departamento": "", "state": "Montevideo"})
        self.assertEqual(cart.total, 10 + 169)

        cart.set_shipping_data({})
        self.assertEqual(cart.department, "")
        self.assertEqual(cart.total, 10)


class IdentityTrackerTests(CartTestCase):
    def test_single_in_flight_anonymous_provisioning(self) -> None:
        session = self.provider.client_session(auto_provision=False)
        tracker = IdentityTracker(session, timeout=0.05)

        tracker.handle(None)
        tracker.handle(None)
        self.assertEqual(session.anonymous_requests, 1)

        uid = session.complete_anonymous_sign_in()
        tracker.pump()
        self.assertEqual(tracker.uid, uid)
        self.assertEqual(tracker.generation, 1)

    def test_bounded_wait_raises_timeout(self) -> None:
        session = self.provider.client_session(auto_provision=False)
        tracker = IdentityTracker(session, timeout=0.05)
        with self.assertRaises(IdentityTimeout):
            tracker.ensure_identity()

    def test_present_identity_adopted_immediately(self) -> None:
        changes = []
        self.session.sign_in("user-1")
        tracker = IdentityTracker(self.session, on_change=lambda uid, gen: changes.append((uid, gen)))
        self.assertEqual(tracker.ensure_identity(), "user-1")
        self.assertEqual(changes, [("user-1", 1)])
        self.assertEqual(self.session.anonymous_requests, 0)
