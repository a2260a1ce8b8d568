"""
Exception handler de la API.

Toda respuesta de error tiene la forma:

    {"error": "<mensaje>", "details": ...}   # details es opcional

- TiendaError: status de la clase (UpstreamFailure propaga el del upstream)
- Excepciones de DRF: su status (401, 403, 404, 405, 400, ...)
- Cualquier otra cosa: se loguea y se responde 500
"""

from __future__ import annotations

import logging

from django.core.exceptions import PermissionDenied
from django.http import Http404
from rest_framework import exceptions, status
from rest_framework.response import Response
from rest_framework.views import set_rollback

from tienda.exceptions import TiendaError, UpstreamFailure


logger = logging.getLogger(__name__)


def _message(detail) -> str:
    if isinstance(detail, list):
        return "; ".join(_message(d) for d in detail)
    if isinstance(detail, dict):
        return "; ".join(f"{key}: {_message(value)}" for key, value in detail.items())
    return str(detail)


def error_payload(message: str, details=None) -> dict:
    payload = {"error": message}
    if details not in (None, "", {}):
        payload["details"] = details
    return payload


def _tienda_response(exc: TiendaError) -> Response:
    details = exc.details if isinstance(exc, UpstreamFailure) else None
    if details is None and exc.context:
        details = exc.context.get("details", exc.context)
    return Response(error_payload(exc.message or exc.code, details), status=exc.status_code)


def exception_handler(exc, context):
    """
    Traduce excepciones al formato `{"error": ...}`.

    Configurar en settings:
        REST_FRAMEWORK = {"EXCEPTION_HANDLER": "tienda.api.exceptions.exception_handler"}
    """
    if isinstance(exc, TiendaError):
        set_rollback()
        if exc.status_code >= 500:
            logger.error("Error %s (%s): %s", exc.status_code, exc.code, exc.message)
        return _tienda_response(exc)

    if isinstance(exc, Http404):
        exc = exceptions.NotFound()
    elif isinstance(exc, PermissionDenied):
        exc = exceptions.PermissionDenied()

    if isinstance(exc, exceptions.APIException):
        headers = {}
        if getattr(exc, "auth_header", None):
            headers["WWW-Authenticate"] = exc.auth_header
        if getattr(exc, "wait", None):
            headers["Retry-After"] = str(exc.wait)

        if isinstance(exc, exceptions.ValidationError):
            payload = error_payload("Invalid input", exc.detail)
        elif isinstance(exc, exceptions.NotAuthenticated):
            payload = error_payload("Unauthorized: missing bearer token")
        elif isinstance(exc, exceptions.MethodNotAllowed):
            payload = error_payload("Method not allowed")
        else:
            payload = error_payload(_message(exc.detail))

        set_rollback()
        return Response(payload, status=exc.status_code, headers=headers)

    view = context.get("view")
    logger.exception("Error inesperado en %s", type(view).__name__ if view else "api")
    set_rollback()
    return Response(
        error_payload(str(exc) or "Internal server error"),
        status=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
