"""
Firebase Identity — Integración con Firebase Authentication.

Requiere: pip install firebase-admin

- FirebaseIdentityProvider: lado servidor (Admin SDK)
- FirebaseAuthSession: lado cliente, vía la REST API de Identity Toolkit
"""

from __future__ import annotations

import json
import logging
import threading
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from tienda.exceptions import InvalidInput, NotFound, Unauthenticated, UpstreamFailure
from tienda.protocols import Identity
from tienda.storefront.identity import IdentityChannel

logger = logging.getLogger(__name__)

_app_lock = threading.Lock()

ROLE_CLAIMS = ("admin", "superadmin")


def get_firebase_app(credentials_path: str | None = None, project_id: str | None = None):
    """Devuelve la app de Firebase por defecto, inicializándola una sola vez."""
    try:
        import firebase_admin
        from firebase_admin import credentials
    except ImportError:
        raise ImportError(
            "firebase-admin no instalado. Ejecute: pip install firebase-admin"
        )

    with _app_lock:
        try:
            return firebase_admin.get_app()
        except ValueError:
            if credentials_path:
                cred = credentials.Certificate(credentials_path)
            else:
                cred = credentials.ApplicationDefault()
            options = {"projectId": project_id} if project_id else None
            return firebase_admin.initialize_app(cred, options)


class FirebaseIdentityProvider:
    """
    IdentityProvider sobre Firebase Auth (Admin SDK).

    Args:
        credentials_path: Ruta al JSON de la service account
        project_id: Proyecto de Firebase (opcional)

    Configuración vía settings:
        TIENDA = {
            "IDENTITY_PROVIDER": {
                "BACKEND": "tienda.contrib.identity.adapters.firebase.FirebaseIdentityProvider",
                "OPTIONS": {"credentials_path": os.environ["FIREBASE_CREDENTIALS"]},
            },
        }
    """

    def __init__(self, credentials_path: str | None = None, project_id: str | None = None):
        from firebase_admin import auth

        self.auth = auth
        self.app = get_firebase_app(credentials_path=credentials_path, project_id=project_id)

    def verify_token(self, token: str) -> Identity:
        auth = self.auth
        try:
            decoded = auth.verify_id_token(token, app=self.app)
        except (
            auth.InvalidIdTokenError,
            auth.ExpiredIdTokenError,
            auth.RevokedIdTokenError,
            auth.CertificateFetchError,
            ValueError,
        ) as e:
            logger.info("Token rechazado: %s", e)
            raise Unauthenticated("invalid_token", "Token inválido")

        provider = (decoded.get("firebase") or {}).get("sign_in_provider")
        return Identity(
            uid=decoded["uid"],
            email=decoded.get("email"),
            anonymous=provider == "anonymous",
            claims={k: decoded[k] for k in ROLE_CLAIMS if k in decoded},
        )

    def set_custom_claims(self, uid: str, claims: dict) -> None:
        try:
            self.auth.set_custom_user_claims(uid, claims, app=self.app)
        except self.auth.UserNotFoundError:
            raise NotFound("not_found", f"Usuario {uid} no existe")

    def get_claims(self, uid: str) -> dict:
        try:
            user = self.auth.get_user(uid, app=self.app)
        except self.auth.UserNotFoundError:
            raise NotFound("not_found", f"Usuario {uid} no existe")
        return dict(user.custom_claims or {})

    def create_user(self, *, email: str, password: str, display_name: str | None = None) -> Identity:
        kwargs = {"email": email, "password": password}
        if display_name:
            kwargs["display_name"] = display_name
        try:
            user = self.auth.create_user(app=self.app, **kwargs)
        except self.auth.EmailAlreadyExistsError:
            raise InvalidInput("email_exists", f"Ya existe un usuario con email {email}")
        return Identity(uid=user.uid, email=user.email)

    def delete_user(self, uid: str) -> None:
        try:
            self.auth.delete_user(uid, app=self.app)
        except self.auth.UserNotFoundError:
            raise NotFound("not_found", f"Usuario {uid} no existe")

    def get_user_by_email(self, email: str) -> Identity:
        try:
            user = self.auth.get_user_by_email(email, app=self.app)
        except self.auth.UserNotFoundError:
            raise NotFound("not_found", f"No hay usuario con email {email}")
        return Identity(uid=user.uid, email=user.email, claims=dict(user.custom_claims or {}))


class FirebaseAuthSession:
    """
    Sesión de identidad del cliente contra Identity Toolkit.

    El alta anónima corre en un thread aparte: el uid resultante llega por
    `events`, igual que en el SDK web.

    Args:
        api_key: Web API key del proyecto de Firebase
        timeout: Timeout HTTP en segundos

    Documentación:
        https://firebase.google.com/docs/reference/rest/auth
    """

    BASE_URL = "https://identitytoolkit.googleapis.com/v1"

    def __init__(self, api_key: str, *, timeout: float = 10.0):
        self.api_key = api_key
        self.timeout = timeout
        self.events = IdentityChannel()
        self.id_token: str | None = None
        self._uid: str | None = None

    def current_uid(self) -> str | None:
        return self._uid

    def _set(self, uid: str | None, id_token: str | None = None) -> None:
        self._uid = uid
        self.id_token = id_token
        self.events.publish(uid)

    def _request(self, endpoint: str, payload: dict) -> dict:
        request = Request(
            f"{self.BASE_URL}/{endpoint}?key={self.api_key}",
            data=json.dumps(payload).encode(),
            headers={"Content-Type": "application/json"},
            method="POST",
        )
        try:
            with urlopen(request, timeout=self.timeout) as response:
                return json.loads(response.read().decode())
        except HTTPError as e:
            error_body = e.read().decode() if e.fp else ""
            logger.error("Identity Toolkit error: %s - %s", e.code, error_body)
            raise UpstreamFailure(
                "identity_error",
                "Identity Toolkit rechazó la solicitud",
                status_code=e.code,
                details=error_body,
            )
        except URLError as e:
            raise UpstreamFailure("identity_unreachable", str(e.reason))

    def _sign_up_anonymous(self) -> None:
        try:
            data = self._request("accounts:signUp", {"returnSecureToken": True})
        except UpstreamFailure:
            logger.warning("Alta anónima fallida", exc_info=True)
            return
        self._set(data["localId"], data.get("idToken"))

    def sign_in_anonymously(self) -> None:
        threading.Thread(target=self._sign_up_anonymous, daemon=True).start()

    def sign_in_with_password(self, email: str, password: str) -> str:
        data = self._request(
            "accounts:signInWithPassword",
            {"email": email, "password": password, "returnSecureToken": True},
        )
        self._set(data["localId"], data.get("idToken"))
        return data["localId"]

    def sign_out(self) -> None:
        self._set(None)
