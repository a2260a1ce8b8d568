from __future__ import annotations

from io import StringIO

from django.core.management import CommandError, call_command
from django.test import TestCase

from tienda import backends
from tienda.contrib.identity.adapters.memory import InMemoryIdentityProvider
from tienda.contrib.store.adapters.django import DjangoDocumentStore


class CommandTestCase(TestCase):
    def setUp(self) -> None:
        super().setUp()
        backends.clear()
        self.store = DjangoDocumentStore()
        self.identity = InMemoryIdentityProvider()
        backends.set_document_store(self.store)
        backends.set_identity_provider(self.identity)

    def tearDown(self) -> None:
        backends.clear()
        super().tearDown()

    def run_command(self, *args) -> str:
        out = StringIO()
        call_command(*args, stdout=out)
        return out.getvalue()


class SetAdminRoleCommandTests(CommandTestCase):
    def test_assigns_admin(self) -> None:
        user = self.identity.create_user(email="ana@correo.uy", password="secret123")

        output = self.run_command("set_admin_role", "--email", "ana@correo.uy")

        self.assertIn("admin", output)
        self.assertEqual(self.identity.get_claims(user.uid), {"admin": True, "superadmin": False})
        record = self.store.get("adminUsers", user.uid)
        self.assertEqual(record["rol"], "admin")
        self.assertTrue(record["activo"])

    def test_assigns_superadmin(self) -> None:
        user = self.identity.create_user(email="ana@correo.uy", password="secret123")

        self.run_command("set_admin_role", "--email", "ana@correo.uy", "--superadmin")

        self.assertTrue(self.identity.get_claims(user.uid)["superadmin"])
        self.assertEqual(self.store.get("adminUsers", user.uid)["rol"], "superadmin")

    def test_invalid_email(self) -> None:
        with self.assertRaises(CommandError):
            self.run_command("set_admin_role", "--email", "sin-arroba")

    def test_unknown_user(self) -> None:
        """Un email sin usuario es un error del comando, no un traceback."""
        with self.assertRaises(CommandError):
            self.run_command("set_admin_role", "--email", "nadie@correo.uy")


class SeedCatalogCommandTests(CommandTestCase):
    def test_seed_creates_catalog(self) -> None:
        output = self.run_command("seed_catalog")

        self.assertIn("7 productos", output)
        self.assertEqual(len(self.store.list("products")), 7)
        self.assertEqual(len(self.store.list("categories")), 2)

        omega = next(p for p in self.store.list("products") if p["title"]["es"] == "Omega 3")
        self.assertEqual(omega["priceUSD"], 19.99)
        self.assertEqual(omega["stockTotal"], 14)

    def test_reset_replaces_catalog(self) -> None:
        self.run_command("seed_catalog")
        self.run_command("seed_catalog", "--reset")

        self.assertEqual(len(self.store.list("products")), 7)
        self.assertEqual(len(self.store.list("categories")), 2)


class BrowseCatalogCommandTests(CommandTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.run_command("seed_catalog")

    def test_lists_first_page(self) -> None:
        output = self.run_command("browse_catalog")

        self.assertIn("✓ 7 productos (paginado, has_more=False)", output)
        self.assertIn("'sort': 'az'", output)

    def test_search_mode(self) -> None:
        output = self.run_command("browse_catalog", "--q", "omega")

        self.assertIn("Omega 3", output)
        self.assertIn("✓ 1 productos (búsqueda", output)

    def test_pages(self) -> None:
        output = self.run_command("browse_catalog", "--page-size", "3", "--pages", "2")

        self.assertIn("✓ 6 productos (paginado, has_more=True)", output)

    def test_invalid_sort(self) -> None:
        with self.assertRaises(CommandError):
            self.run_command("browse_catalog", "--sort", "random")
