"""
Mercado Pago Gateway — Checkout Pro vía REST API.

Para usar otra pasarela hospedada, use este archivo como template y adapte.
"""

from __future__ import annotations

import json
import logging
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from tienda.exceptions import UpstreamFailure
from tienda.protocols import Preference, PreferenceItem

logger = logging.getLogger(__name__)


class MercadoPagoGateway:
    """
    Pasarela Mercado Pago (Checkout Pro).

    Args:
        access_token: Access token de la cuenta (APP_USR-... o TEST-...)
        timeout: Timeout HTTP en segundos

    Configuración vía settings:
        TIENDA = {
            "PAYMENT_GATEWAY": {
                "BACKEND": "tienda.contrib.payment.adapters.mercadopago.MercadoPagoGateway",
                "OPTIONS": {"access_token": os.environ["MP_ACCESS_TOKEN"]},
            },
        }

    Documentación:
        https://www.mercadopago.com.uy/developers/es/reference/preferences/_checkout_preferences/post
    """

    API_URL = "https://api.mercadopago.com"

    def __init__(self, access_token: str = "", *, timeout: float = 30.0):
        self.access_token = (access_token or "").strip()
        self.timeout = timeout

    def create_preference(
        self,
        *,
        items: list[PreferenceItem],
        payer: dict,
        back_urls: dict,
        auto_return: str = "approved",
    ) -> Preference:
        """
        Crea una preferencia de pago.

        Returns:
            Preference con init_point (o sandbox_init_point si es el único)
        """
        if not self.access_token:
            raise UpstreamFailure(
                "payment_not_configured",
                "MP_ACCESS_TOKEN not configured",
                status_code=500,
                details="access_token required",
            )

        payload = {
            "items": [item.to_dict() for item in items],
            "payer": payer,
            "back_urls": back_urls,
            "auto_return": auto_return,
        }
        logger.debug("MP payload: %s", payload)

        data = self._request("POST", "/checkout/preferences", payload)

        init_point = data.get("init_point") or data.get("sandbox_init_point")
        if not init_point:
            logger.error("Respuesta de MP sin init_point: %s", data)
            raise UpstreamFailure(
                "invalid_payment_response",
                "Invalid response from Mercado Pago",
                status_code=500,
                details="init_point not found in response",
            )

        return Preference(
            preference_id=str(data.get("id", "")),
            init_point=init_point,
            sandbox_init_point=data.get("sandbox_init_point"),
        )

    def _request(self, method: str, path: str, payload: dict | None = None) -> dict:
        """Request autenticado a la API de Mercado Pago."""
        data = json.dumps(payload).encode() if payload else None

        request = Request(
            f"{self.API_URL}{path}",
            data=data,
            headers={
                "Authorization": f"Bearer {self.access_token}",
                "Content-Type": "application/json",
            },
            method=method,
        )

        try:
            with urlopen(request, timeout=self.timeout) as response:
                return json.loads(response.read().decode() or "{}")
        except HTTPError as e:
            error_body = e.read().decode() if e.fp else ""
            logger.error("MP API error: %s - %s", e.code, error_body)
            try:
                body = json.loads(error_body) if error_body else {}
            except ValueError:
                body = {}
            raise UpstreamFailure(
                "payment_error",
                "Failed to create Mercado Pago preference",
                context={"mpStatus": e.code},
                status_code=e.code,
                details=body.get("message") or body.get("error") or "Unknown error from Mercado Pago",
            )
        except URLError as e:
            logger.error("MP API inalcanzable: %s", e.reason)
            raise UpstreamFailure(
                "payment_unreachable",
                "Failed to create Mercado Pago preference",
                details=str(e.reason),
            )
