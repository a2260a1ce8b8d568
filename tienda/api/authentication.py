"""
Autenticación bearer contra el proveedor de identidad configurado.

    Authorization: Bearer <token>

El token se verifica con `backends.get_identity_provider().verify_token()`;
el resultado se expone como `request.user` (IdentityUser) y
`request.auth` (el token crudo).
"""

from __future__ import annotations

import logging

from rest_framework import authentication, exceptions

from tienda import backends
from tienda.exceptions import Unauthenticated
from tienda.protocols import Identity


logger = logging.getLogger(__name__)


class IdentityUser:
    """Adaptador mínimo de Identity a la interfaz de usuario que espera DRF."""

    is_authenticated = True
    is_anonymous = False
    is_active = True

    def __init__(self, identity: Identity):
        self.identity = identity

    @property
    def uid(self) -> str:
        return self.identity.uid

    @property
    def username(self) -> str:
        return self.identity.email or self.identity.uid

    @property
    def is_admin(self) -> bool:
        return self.identity.is_admin

    @property
    def is_superadmin(self) -> bool:
        return self.identity.is_superadmin

    def __str__(self) -> str:
        return self.username


class BearerAuthentication(authentication.BaseAuthentication):
    keyword = "Bearer"

    def authenticate(self, request):
        auth = authentication.get_authorization_header(request).split()
        if not auth or auth[0].lower() != self.keyword.lower().encode():
            return None

        if len(auth) != 2:
            raise exceptions.AuthenticationFailed("Unauthorized: malformed bearer header", code="invalid_token")

        try:
            token = auth[1].decode()
        except UnicodeError:
            raise exceptions.AuthenticationFailed("Unauthorized: invalid token", code="invalid_token")

        try:
            identity = backends.get_identity_provider().verify_token(token)
        except Unauthenticated as e:
            logger.info("Token rechazado: %s", e.code)
            raise exceptions.AuthenticationFailed(e.message or "Unauthorized: invalid token", code=e.code)

        return IdentityUser(identity), token

    def authenticate_header(self, request):
        return self.keyword
