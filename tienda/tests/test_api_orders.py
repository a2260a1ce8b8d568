from __future__ import annotations

from tienda.contrib.payment.adapters.mock import MockPaymentGateway
from tienda import backends
from tienda.tests.helpers import TiendaApiTestCase, product_payload


def _order(uid: str, **overrides) -> dict:
    order = {
        "uid": uid,
        "items": [
            {
                "id": "p1",
                "variantId": "Tamaño-60 cápsulas",
                "variantLabel": "60 cápsulas",
                "title": {"es": "Omega 3"},
                "price": 19.99,
                "quantity": 3,
            }
        ],
        "total": 59.97,
        "shipping": {"name": "Ana", "email": "Ana@Correo.uy", "department": "Montevideo", "phone": "099123456"},
        "paymentIntentId": "pi_123",
    }
    order.update(overrides)
    return order


class OrderApiTests(TiendaApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.uid = self.login_as("ana@correo.uy")

    def test_create_order(self) -> None:
        resp = self.client.post("/api/orders", _order(self.uid), format="json")

        self.assertEqual(resp.status_code, 201, resp.data)
        order = self.store.get("orders", resp.data["id"])
        self.assertEqual(order["uid"], self.uid)
        self.assertEqual(order["estado"], "En proceso")
        self.assertEqual(order["paymentStatus"], "pendiente")
        self.assertEqual(order["paymentMethod"], "mercadopago")
        self.assertEqual(order["paymentIntentId"], "pi_123")

    def test_uid_mismatch_is_403(self) -> None:
        resp = self.client.post("/api/orders", _order("otro-uid"), format="json")
        self.assertEqual(resp.status_code, 403)
        self.assertEqual(resp.data["error"], "uid mismatch")
        self.assertEqual(self.store.list("orders"), [])

    def test_requires_authentication(self) -> None:
        self.client.credentials()
        resp = self.client.post("/api/orders", _order(self.uid), format="json")
        self.assertEqual(resp.status_code, 401)

    def test_anonymous_identity_can_order(self) -> None:
        anon = self.identity.create_anonymous_user()
        self.login(anon.uid)
        resp = self.client.post("/api/orders", _order(anon.uid), format="json")
        self.assertEqual(resp.status_code, 201, resp.data)

    def test_validation(self) -> None:
        resp = self.client.post("/api/orders", _order(self.uid, items=[]), format="json")
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.data["error"], "items is required")

        resp = self.client.post("/api/orders", _order(self.uid, total=0), format="json")
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.data["error"], "invalid total")

    def test_get_not_allowed(self) -> None:
        resp = self.client.get("/api/orders")
        self.assertEqual(resp.status_code, 405)

    def test_stock_decremented_by_variant_and_clamped(self) -> None:
        self.login_as("admin@tienda.uy", "admin")
        product_id = self.client.post(
            "/api/admin/products",
            product_payload(
                variants=[
                    {
                        "label": {"es": "Tamaño"},
                        "options": [
                            {"value": "60 cápsulas", "priceUSD": 19.99, "stock": 2},
                            {"value": "120 cápsulas", "priceUSD": 34.5, "stock": 4},
                        ],
                    }
                ]
            ),
            format="json",
        ).data["id"]
        self.login(self.uid)

        items = [dict(_order(self.uid)["items"][0], id=product_id)]
        resp = self.client.post("/api/orders", _order(self.uid, items=items), format="json")

        self.assertEqual(resp.status_code, 201, resp.data)
        doc = self.store.get("products", product_id)
        self.assertEqual([o["stock"] for o in doc["variants"][0]["options"]], [0, 4])
        self.assertEqual(doc["stockTotal"], 4)

    def test_client_upserted_from_shipping(self) -> None:
        self.client.post("/api/orders", _order(self.uid), format="json")
        client = self.store.get("clients", self.uid)
        self.assertEqual(client["email"], "ana@correo.uy")
        self.assertEqual(client["state"], "Montevideo")
        self.assertEqual(client["uid"], self.uid)


class AdminOrderApiTests(TiendaApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.login_as("admin@tienda.uy", "admin")
        self.old = self.store.add("orders", {"estado": "En proceso", "createdAt": "2026-01-01T10:00:00+00:00"})
        self.new = self.store.add("orders", {"estado": "En proceso", "createdAt": "2026-03-01T10:00:00+00:00"})

    def test_list_newest_first(self) -> None:
        resp = self.client.get("/api/admin/orders")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual([o["id"] for o in resp.data["orders"]], [self.new, self.old])

    def test_allowed_transitions(self) -> None:
        for estado in ("Confirmado", "Entregado"):
            resp = self.client.patch(f"/api/admin/orders/{self.old}", {"estado": estado}, format="json")
            self.assertEqual(resp.status_code, 200, resp.data)
        self.assertEqual(self.store.get("orders", self.old)["estado"], "Entregado")

    def test_rejected_transitions(self) -> None:
        resp = self.client.patch(f"/api/admin/orders/{self.old}", {"estado": "Entregado"}, format="json")
        self.assertEqual(resp.status_code, 400)

        self.client.patch(f"/api/admin/orders/{self.new}", {"estado": "Cancelado"}, format="json")
        resp = self.client.patch(f"/api/admin/orders/{self.new}", {"estado": "Confirmado"}, format="json")
        self.assertEqual(resp.status_code, 400)
        self.assertIn("terminal", resp.data["error"])

        resp = self.client.patch(f"/api/admin/orders/{self.old}", {"estado": "Perdido"}, format="json")
        self.assertEqual(resp.status_code, 400)

        resp = self.client.patch("/api/admin/orders/nope", {"estado": "Confirmado"}, format="json")
        self.assertEqual(resp.status_code, 404)


class PreferenceApiTests(TiendaApiTestCase):
    def _payload(self, **overrides) -> dict:
        payload = {
            "items": [
                {"title": {"es": "Omega 3"}, "priceUSD": 19.99, "quantity": 2.7},
                {"title": "Gratis", "price": 0, "quantity": 1},
                {"name": "Sin precio", "quantity": 1},
                {"title": "Magnesio", "price": 10},
            ],
            "shippingData": {"name": "Ana", "email": "ana@correo.uy", "shippingCost": 169},
        }
        payload.update(overrides)
        return payload

    def test_normalizes_items_and_adds_shipping(self) -> None:
        """Cantidad entera, líneas sin precio descartadas y línea de envío."""
        resp = self.client.post("/api/create-mp-preference", self._payload(), format="json")

        self.assertEqual(resp.status_code, 200, resp.data)
        self.assertTrue(resp.data["init_point"].startswith("https://mock.pay/checkout"))
        preference = self.gateway.preferences[-1]
        self.assertEqual(
            [(i["title"], i["quantity"], i["unit_price"]) for i in preference["items"]],
            [("Omega 3", 2, 19.99), ("Magnesio", 1, 10), ("Costo de envío", 1, 169)],
        )
        self.assertEqual(preference["payer"], {"name": "Ana", "email": "ana@correo.uy"})
        self.assertEqual(preference["auto_return"], "approved")
        self.assertTrue(preference["back_urls"]["success"].endswith("/success"))

    def test_no_shipping_line_when_cost_is_zero(self) -> None:
        payload = self._payload(shippingData={"shippingCost": 0})
        self.client.post("/api/create-mp-preference", payload, format="json")
        preference = self.gateway.preferences[-1]
        self.assertNotIn("Costo de envío", [i["title"] for i in preference["items"]])
        self.assertEqual(preference["payer"], {"name": "No especificado"})

    def test_validation(self) -> None:
        """El envío no cuenta como línea válida: sin productos con precio, 400."""
        resp = self.client.post("/api/create-mp-preference", self._payload(items=[]), format="json")
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.data["error"], "Items array is required and must not be empty")

        payload = self._payload()
        del payload["shippingData"]
        resp = self.client.post("/api/create-mp-preference", payload, format="json")
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.data["error"], "shippingData is required")

        resp = self.client.post(
            "/api/create-mp-preference",
            self._payload(items=[{"title": "x", "price": 0}]),
            format="json",
        )
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.data["error"], "No valid items found")
        self.assertIn("details", resp.data)
        self.assertEqual(self.gateway.preferences, [])

    def test_upstream_status_propagated(self) -> None:
        backends.set_payment_gateway(MockPaymentGateway(fail_status=401))
        resp = self.client.post("/api/create-mp-preference", self._payload(), format="json")
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.data["error"], "Failed to create Mercado Pago preference")
        self.assertEqual(resp.data["details"], "Simulated failure")

    def test_public_endpoint_ignores_bad_token(self) -> None:
        self.client.credentials(HTTP_AUTHORIZATION="Bearer basura")
        resp = self.client.post("/api/create-mp-preference", self._payload(), format="json")
        self.assertEqual(resp.status_code, 200, resp.data)

    def test_get_not_allowed(self) -> None:
        resp = self.client.get("/api/create-mp-preference")
        self.assertEqual(resp.status_code, 405)
