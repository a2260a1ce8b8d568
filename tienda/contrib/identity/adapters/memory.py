"""
In-Memory Identity Provider — Para desarrollo y tests.
"""

from __future__ import annotations

import threading

from tienda.exceptions import InvalidInput, NotFound, Unauthenticated
from tienda.ids import generate_token, generate_uid
from tienda.protocols import Identity
from tienda.storefront.identity import IdentityChannel


class InMemoryIdentityProvider:
    """
    Proveedor de identidad en memoria.

    Los tokens bearer son opacos y se emiten con `issue_token(uid)`.

    Uso:
        provider = InMemoryIdentityProvider()
        user = provider.create_user(email="a@b.com", password="secret")
        provider.set_custom_claims(user.uid, {"admin": True})
        token = provider.issue_token(user.uid)
    """

    def __init__(self):
        self._lock = threading.RLock()
        self._users: dict[str, dict] = {}
        self._tokens: dict[str, str] = {}

    def _identity(self, uid: str) -> Identity:
        user = self._users[uid]
        return Identity(
            uid=uid,
            email=user["email"],
            anonymous=user["anonymous"],
            claims=dict(user["claims"]),
        )

    def issue_token(self, uid: str) -> str:
        with self._lock:
            if uid not in self._users:
                raise NotFound("not_found", f"Usuario {uid} no existe")
            token = generate_token()
            self._tokens[token] = uid
            return token

    def revoke_tokens(self, uid: str) -> None:
        with self._lock:
            for token in [t for t, owner in self._tokens.items() if owner == uid]:
                del self._tokens[token]

    def verify_token(self, token: str) -> Identity:
        with self._lock:
            uid = self._tokens.get(token)
            if uid is None or uid not in self._users:
                raise Unauthenticated("invalid_token", "Token inválido")
            return self._identity(uid)

    def set_custom_claims(self, uid: str, claims: dict) -> None:
        with self._lock:
            if uid not in self._users:
                raise NotFound("not_found", f"Usuario {uid} no existe")
            self._users[uid]["claims"] = dict(claims or {})

    def get_claims(self, uid: str) -> dict:
        with self._lock:
            if uid not in self._users:
                raise NotFound("not_found", f"Usuario {uid} no existe")
            return dict(self._users[uid]["claims"])

    def create_user(self, *, email: str, password: str, display_name: str | None = None) -> Identity:
        with self._lock:
            email = email.strip().lower()
            if any(u["email"] == email for u in self._users.values()):
                raise InvalidInput("email_exists", f"Ya existe un usuario con email {email}")
            uid = generate_uid()
            self._users[uid] = {
                "email": email,
                "password": password,
                "display_name": display_name,
                "anonymous": False,
                "claims": {},
            }
            return self._identity(uid)

    def create_anonymous_user(self) -> Identity:
        with self._lock:
            uid = generate_uid()
            self._users[uid] = {
                "email": None,
                "password": None,
                "display_name": None,
                "anonymous": True,
                "claims": {},
            }
            return self._identity(uid)

    def delete_user(self, uid: str) -> None:
        with self._lock:
            if self._users.pop(uid, None) is None:
                raise NotFound("not_found", f"Usuario {uid} no existe")
            self.revoke_tokens(uid)

    def get_user_by_email(self, email: str) -> Identity:
        with self._lock:
            email = email.strip().lower()
            for uid, user in self._users.items():
                if user["email"] == email:
                    return self._identity(uid)
            raise NotFound("not_found", f"No hay usuario con email {email}")

    def client_session(self, *, auto_provision: bool = True) -> InMemoryAuthSession:
        return InMemoryAuthSession(self, auto_provision=auto_provision)


class InMemoryAuthSession:
    """
    Sesión de identidad del cliente, en memoria.

    Args:
        provider: InMemoryIdentityProvider donde se crean los anónimos
        auto_provision: Si False, `sign_in_anonymously()` queda pendiente hasta
            `complete_anonymous_sign_in()` (simula un alta en vuelo)
    """

    def __init__(self, provider: InMemoryIdentityProvider, *, auto_provision: bool = True):
        self.provider = provider
        self.auto_provision = auto_provision
        self.events = IdentityChannel()
        self.anonymous_requests = 0
        self._uid: str | None = None

    def current_uid(self) -> str | None:
        return self._uid

    def _set(self, uid: str | None) -> None:
        self._uid = uid
        self.events.publish(uid)

    def sign_in_anonymously(self) -> None:
        self.anonymous_requests += 1
        if self.auto_provision:
            self.complete_anonymous_sign_in()

    def complete_anonymous_sign_in(self) -> str:
        identity = self.provider.create_anonymous_user()
        self._set(identity.uid)
        return identity.uid

    def sign_in(self, uid: str) -> None:
        self._set(uid)

    def sign_out(self) -> None:
        self._set(None)
