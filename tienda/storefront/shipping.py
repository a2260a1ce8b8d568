"""
Envío — Costo por departamento y validación de datos de envío.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass

from tienda.conf import get_tienda_setting


REQUIRED_FIELDS = ("name", "address", "city", "state", "postalCode", "phone", "email")

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_RE = re.compile(r"^\d{8,15}$")


@dataclass
class ShippingQuote:
    cost: float
    label: str


def is_surcharge_region(department: str | None) -> bool:
    region = get_tienda_setting("SHIPPING_SURCHARGE_REGION")
    return bool(department) and department.strip().casefold() == region.casefold()


def shipping_quote(department: str | None) -> ShippingQuote:
    """Costo de envío para un departamento (recargo solo en la región configurada)."""
    if is_surcharge_region(department):
        cost = get_tienda_setting("SHIPPING_SURCHARGE")
        region = get_tienda_setting("SHIPPING_SURCHARGE_REGION")
        return ShippingQuote(cost=cost, label=f"Envío {region}: ${cost}")
    return ShippingQuote(cost=0, label="Envío al interior: a cargo del cliente")


def shipping_errors(data: Mapping) -> dict[str, str]:
    """Errores por campo; vacío si los datos son válidos."""
    errors = {}
    for field in REQUIRED_FIELDS:
        value = data.get(field)
        if not isinstance(value, str) or not value.strip():
            errors[field] = "requerido"
    if "email" not in errors and not EMAIL_RE.match(data["email"]):
        errors["email"] = "Email inválido"
    if "phone" not in errors and not PHONE_RE.match(data["phone"]):
        errors["phone"] = "Teléfono inválido"
    return errors


def validate_shipping_data(data: Mapping) -> bool:
    return not shipping_errors(data)
