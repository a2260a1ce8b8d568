"""
Permisos por rol.

Jerarquía: superadmin ⊇ admin. Una request sin credencial válida termina en
401 (DRF convierte el rechazo en NotAuthenticated porque hay un
authenticator con `authenticate_header`); con credencial pero sin rol, 403.
"""

from __future__ import annotations

from rest_framework.permissions import BasePermission


def _is_authenticated(request) -> bool:
    user = getattr(request, "user", None)
    return bool(user and user.is_authenticated)


class IsAuthenticatedIdentity(BasePermission):
    """Cualquier identidad verificada, incluso anónima."""

    def has_permission(self, request, view):
        return _is_authenticated(request)


class IsAdmin(BasePermission):
    message = "Forbidden: admin access required"
    code = "admin_required"

    def has_permission(self, request, view):
        return _is_authenticated(request) and getattr(request.user, "is_admin", False)


class IsSuperadmin(BasePermission):
    message = "Forbidden: superadmin access required"
    code = "superadmin_required"

    def has_permission(self, request, view):
        return _is_authenticated(request) and getattr(request.user, "is_superadmin", False)
