"""
UserService — Usuarios administrativos (colección "adminUsers").

El rol vive en dos lugares: los claims de identidad (lo que autoriza) y el
registro en el store (lo que se lista). Todo cambio de rol escribe ambos,
primero los claims.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from django.utils import timezone

from tienda import backends
from tienda.documents import AdminUser, Rol, claims_for_role
from tienda.exceptions import Forbidden, InvalidInput, NotFound
from tienda.protocols import Identity


logger = logging.getLogger(__name__)

COLLECTION = "adminUsers"


def _check_role(rol) -> str:
    if rol not in Rol.values:
        raise InvalidInput("invalid_role", 'rol debe ser "admin" o "superadmin"', {"rol": rol})
    return rol


class UserService:
    """Servicio de usuarios administrativos."""

    @staticmethod
    def list_users(store=None) -> list[dict]:
        store = store or backends.get_document_store()
        return store.list(COLLECTION)

    @staticmethod
    def get_user(user_id: str, store=None) -> dict:
        store = store or backends.get_document_store()
        doc = store.get(COLLECTION, user_id)
        if doc is None:
            raise NotFound("not_found", "User not found", {"id": user_id})
        return doc

    @staticmethod
    def create_user(payload: Mapping, *, store=None, identity=None) -> dict:
        """
        Crea identidad, asigna claims y escribe el registro.

        Returns:
            {"id": uid, "email": ..., "rol": ...}
        """
        payload = payload if isinstance(payload, Mapping) else {}
        email = payload.get("email")
        password = payload.get("password")
        rol = payload.get("rol")
        if not email or not password or not rol:
            raise InvalidInput("missing_field", "email, password y rol son requeridos")
        _check_role(rol)

        store = store or backends.get_document_store()
        identity = identity or backends.get_identity_provider()

        nombre = payload.get("nombre") or ""
        created = identity.create_user(email=email, password=password, display_name=nombre or None)
        identity.set_custom_claims(created.uid, claims_for_role(rol))

        record = AdminUser(
            uid=created.uid,
            email=email,
            rol=rol,
            nombre=nombre,
            activo=True,
            created_at=timezone.now().isoformat(),
        ).to_dict()
        record.pop("id")
        store.set(COLLECTION, created.uid, record)

        logger.info("Usuario admin creado", extra={"uid": created.uid, "rol": rol})
        return {"id": created.uid, "email": email, "rol": rol}

    @staticmethod
    def update_user(user_id: str, payload: Mapping, *, actor: Identity, store=None, identity=None) -> dict:
        """
        Actualiza nombre/activo (admin) o rol (solo superadmin).

        Un cambio de rol sincroniza los claims antes de escribir el registro.

        Raises:
            Forbidden: Cambio de rol sin ser superadmin
            InvalidInput: Rol inválido o sin campos para actualizar
            NotFound: Registro inexistente
        """
        payload = payload if isinstance(payload, Mapping) else {}
        store = store or backends.get_document_store()

        data = {}
        if "nombre" in payload:
            data["nombre"] = payload["nombre"]
        if "activo" in payload:
            data["activo"] = payload["activo"]

        new_role = payload.get("rol")
        if "rol" in payload:
            if not actor.is_superadmin:
                raise Forbidden("superadmin_required", "Forbidden: superadmin access required")
            if new_role not in Rol.values:
                raise InvalidInput("invalid_role", "Invalid role value", {"rol": new_role})
            data["rol"] = new_role

        if not data:
            raise InvalidInput("no_fields", "No valid fields to update")

        if store.get(COLLECTION, user_id) is None:
            raise NotFound("not_found", "User not found", {"id": user_id})

        if "rol" in data:
            identity = identity or backends.get_identity_provider()
            identity.set_custom_claims(user_id, claims_for_role(new_role))
            logger.info("Rol cambiado", extra={"uid": user_id, "rol": new_role, "actor": actor.uid})

        data["updatedAt"] = timezone.now().isoformat()
        store.update(COLLECTION, user_id, data)
        return {"id": user_id, "updated": True}

    @staticmethod
    def delete_user(user_id: str, *, store=None, identity=None) -> dict:
        """Borra la identidad y el registro."""
        store = store or backends.get_document_store()
        identity = identity or backends.get_identity_provider()
        identity.delete_user(user_id)
        store.delete(COLLECTION, user_id)
        logger.info("Usuario admin borrado", extra={"uid": user_id})
        return {"id": user_id, "deleted": True}

    @staticmethod
    def set_role_by_email(email: str, rol: str, *, store=None, identity=None) -> Identity:
        """
        Asigna rol a un usuario existente identificado por email.

        Crea o actualiza el registro en adminUsers.
        """
        _check_role(rol)
        store = store or backends.get_document_store()
        identity = identity or backends.get_identity_provider()

        user = identity.get_user_by_email(email)
        identity.set_custom_claims(user.uid, claims_for_role(rol))
        store.set(
            COLLECTION,
            user.uid,
            {"email": user.email or email, "rol": rol, "uid": user.uid, "activo": True},
            merge=True,
        )
        logger.info("Rol asignado por email", extra={"uid": user.uid, "rol": rol})
        return user
