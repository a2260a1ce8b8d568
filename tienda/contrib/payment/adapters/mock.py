"""
Mock Payment Gateway — Para desarrollo y tests.
"""

from __future__ import annotations

from uuid import uuid4

from django.utils import timezone

from tienda.exceptions import UpstreamFailure
from tienda.protocols import Preference, PreferenceItem


class MockPaymentGateway:
    """
    Pasarela mock para desarrollo y tests.

    Registra cada preferencia creada en `preferences` (último al final).

    Uso:
        gateway = MockPaymentGateway()
        pref = gateway.create_preference(items=[...], payer={...}, back_urls={...})
        gateway.preferences[-1]["items"]
    """

    def __init__(self, *, fail_status: int | None = None, base_url: str = "https://mock.pay/checkout"):
        """
        Args:
            fail_status: Si se define, toda creación falla con ese status upstream
            base_url: Base del init_point devuelto
        """
        self.fail_status = fail_status
        self.base_url = base_url
        self.preferences: list[dict] = []

    def create_preference(
        self,
        *,
        items: list[PreferenceItem],
        payer: dict,
        back_urls: dict,
        auto_return: str = "approved",
    ) -> Preference:
        if self.fail_status is not None:
            raise UpstreamFailure(
                "payment_error",
                "Failed to create Mercado Pago preference",
                status_code=self.fail_status,
                details="Simulated failure",
            )

        preference_id = f"mock_pref_{uuid4().hex[:12]}"
        self.preferences.append({
            "id": preference_id,
            "items": [item.to_dict() for item in items],
            "payer": dict(payer),
            "back_urls": dict(back_urls),
            "auto_return": auto_return,
            "created_at": timezone.now(),
        })
        return Preference(
            preference_id=preference_id,
            init_point=f"{self.base_url}?pref_id={preference_id}",
        )
