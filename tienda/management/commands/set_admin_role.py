"""
Asigna rol admin o superadmin a un usuario existente (por email).

Uso:
    python manage.py set_admin_role --email=correo@ejemplo.com
    python manage.py set_admin_role --email=correo@ejemplo.com --superadmin
"""

from django.core.management.base import BaseCommand, CommandError

from tienda.documents import Rol, claims_for_role
from tienda.exceptions import TiendaError
from tienda.services import UserService


class Command(BaseCommand):
    help = "Asigna los claims admin/superadmin a un usuario por email"

    def add_arguments(self, parser):
        parser.add_argument("--email", required=True, help="Email del usuario")
        parser.add_argument(
            "--superadmin",
            action="store_true",
            help="Asigna superadmin; sin esta opción asigna admin",
        )

    def handle(self, *args, **options):
        email = (options["email"] or "").strip().strip("\"'")
        if "@" not in email:
            raise CommandError("Email inválido")

        rol = Rol.SUPERADMIN if options["superadmin"] else Rol.ADMIN
        try:
            user = UserService.set_role_by_email(email, rol)
        except TiendaError as e:
            raise CommandError(f"Error al asignar el rol: {e.message or e.code}") from e

        self.stdout.write(self.style.SUCCESS(f"✓ Usuario {email} (UID: {user.uid}) ahora tiene rol: {rol}"))
        self.stdout.write(f"  Claims: {claims_for_role(rol)}")
