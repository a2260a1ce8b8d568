"""
Tienda Exceptions — Excepciones específicas de la tienda.

Todas las excepciones siguen el patrón:
- code: Código máquina del error (ej.: "missing_field", "uid_mismatch")
- message: Mensaje legible para humanos
- context: Datos adicionales sobre el error

Cada clase declara `status_code`, usado por el exception handler de la API
para traducir el error a una respuesta `{"error": ...}`.
"""

from __future__ import annotations


class TiendaError(Exception):
    """
    Clase base para todas las excepciones de la tienda.

    Attributes:
        code: Código máquina del error
        message: Mensaje legible para humanos
        context: Datos adicionales sobre el error
    """

    status_code = 500

    def __init__(self, code: str = "error", message: str = "", context: dict | None = None):
        self.code = code
        self.message = message
        self.context = context or {}
        super().__init__(message)


class Unauthenticated(TiendaError):
    """
    Credencial bearer ausente o inválida.

    Codes: "missing_token", "invalid_token"
    """

    status_code = 401


class Forbidden(TiendaError):
    """
    Identidad válida sin el rol requerido.

    Codes: "admin_required", "superadmin_required", "uid_mismatch"
    """

    status_code = 403


class NotFound(TiendaError):
    """
    Documento referenciado inexistente.

    Codes: "not_found"
    """

    status_code = 404


class InvalidInput(TiendaError):
    """
    Payload inválido (campo faltante, enum inválido, cantidad/precio no positivo).

    Codes: "missing_field", "invalid_role", "invalid_total", "no_valid_items", ...
    """

    status_code = 400


class InvalidTransition(InvalidInput):
    """
    Transición de estado de pedido no permitida.

    Codes: "invalid_transition", "terminal_status"
    """


class UpstreamFailure(TiendaError):
    """
    Falla de un colaborador externo (pasarela de pago, CDN de imágenes).

    El status del upstream se propaga tal cual al cliente, junto con los
    detalles reportados. No se reintenta.
    """

    def __init__(
        self,
        code: str = "upstream_error",
        message: str = "",
        context: dict | None = None,
        *,
        status_code: int = 502,
        details: str | None = None,
    ):
        super().__init__(code, message, context)
        self.status_code = status_code
        self.details = details


class IdentityTimeout(TiendaError):
    """
    El aprovisionamiento de identidad anónima no entregó un uid a tiempo.

    Codes: "identity_timeout"
    """

    status_code = 504
