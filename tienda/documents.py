"""
Tienda Documents — Tipos de dominio normalizados en el ingreso.

Los documentos del store son dicts JSON con nombres de campo de wire
(`priceUSD`, `stockTotal`, `allowCustomization`, `tipo`, `orden`, `rol`,
`activo`, `nombre`, `estado`). Este módulo los convierte una sola vez a
dataclasses tipadas (`from_dict`) y de vuelta (`to_dict`), de modo que el
resto del código nunca vuelve a inspeccionar formas alternativas (título
string vs. bilingüe, ids numéricos, etc.).
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from django.db import models
from django.utils.translation import gettext_lazy as _


LANGUAGES = ("es", "en")


def as_number(value: Any) -> float | None:
    """Número finito o None. Booleanos y strings no cuentan como número."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if not math.isfinite(value):
        return None
    return value


def as_stock(value: Any) -> int:
    """Stock entero no negativo; ausente o inválido -> 0."""
    number = as_number(value)
    if number is None or number < 0:
        return 0
    return int(number)


def _str(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


# =============================================================================
# Enums
# =============================================================================


class Rol(models.TextChoices):
    ADMIN = "admin", _("Admin")
    SUPERADMIN = "superadmin", _("Superadmin")


class Estado(models.TextChoices):
    EN_PROCESO = "En proceso", _("En proceso")
    CONFIRMADO = "Confirmado", _("Confirmado")
    ENTREGADO = "Entregado", _("Entregado")
    CANCELADO = "Cancelado", _("Cancelado")


ORDER_TRANSITIONS: dict[str, set[str]] = {
    Estado.EN_PROCESO: {Estado.CONFIRMADO, Estado.CANCELADO},
    Estado.CONFIRMADO: {Estado.ENTREGADO, Estado.CANCELADO},
    Estado.ENTREGADO: set(),
    Estado.CANCELADO: set(),
}


def claims_for_role(rol: str) -> dict:
    """Claims de identidad para un rol administrativo."""
    return {"admin": True, "superadmin": rol == Rol.SUPERADMIN}


# =============================================================================
# Bilingual text
# =============================================================================


@dataclass
class Bilingual:
    """Texto con variante español e inglés."""

    es: str = ""
    en: str = ""

    @classmethod
    def coerce(cls, value: Any) -> Bilingual:
        """Acepta Bilingual, string (copiado a ambos idiomas) o mapping."""
        if isinstance(value, Bilingual):
            return value
        if isinstance(value, str):
            return cls(es=value, en=value)
        if isinstance(value, Mapping):
            return cls(es=_str(value.get("es")), en=_str(value.get("en")))
        return cls()

    def get(self, lang: str, *, fallback: bool = True) -> str:
        text = getattr(self, lang, "") if lang in LANGUAGES else self.es
        if text or not fallback:
            return text
        return self.es or self.en

    def __bool__(self) -> bool:
        return bool(self.es or self.en)

    def to_dict(self) -> dict:
        return {"es": self.es, "en": self.en}


# =============================================================================
# Variants
# =============================================================================


@dataclass
class VariantOption:
    value: str
    price_usd: float | None = None
    stock: int = 0

    @classmethod
    def from_dict(cls, data: Mapping) -> VariantOption:
        return cls(
            value=_str(data.get("value")).strip(),
            price_usd=as_number(data.get("priceUSD")),
            stock=as_stock(data.get("stock")),
        )

    def to_dict(self) -> dict:
        return {"value": self.value, "priceUSD": self.price_usd, "stock": self.stock}


@dataclass
class Variant:
    label: Bilingual
    options: list[VariantOption] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping) -> Variant:
        options = data.get("options") or []
        return cls(
            label=Bilingual.coerce(data.get("label")),
            options=[VariantOption.from_dict(o) for o in options if isinstance(o, Mapping)],
        )

    def variant_id(self, option: VariantOption) -> str:
        """Id estable de una opción: "<label>-<value>" (ej.: "Tamaño-60 caps")."""
        return f"{self.label.es or self.label.en}-{option.value}"

    def to_dict(self) -> dict:
        return {"label": self.label.to_dict(), "options": [o.to_dict() for o in self.options]}


def derive_price_and_stock(variants: list[Variant]) -> tuple[float | None, int]:
    """
    Precio y stock derivados de las variantes.

    Returns:
        (mínimo priceUSD entre opciones con precio válido, suma de stock)
    """
    prices = [
        o.price_usd
        for v in variants
        for o in v.options
        if o.price_usd is not None and o.price_usd >= 0
    ]
    stock = sum(o.stock for v in variants for o in v.options)
    return (min(prices) if prices else None), stock


# =============================================================================
# Catalog
# =============================================================================


@dataclass
class CategoryRef:
    id: str = ""
    name: Bilingual = field(default_factory=Bilingual)

    @classmethod
    def coerce(cls, value: Any) -> CategoryRef:
        if not isinstance(value, Mapping):
            return cls()
        return cls(id=_str(value.get("id")), name=Bilingual.coerce(value.get("name")))

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name.to_dict()}


@dataclass
class Product:
    """Producto del catálogo."""

    id: str
    slug: str
    title: Bilingual
    description: Bilingual = field(default_factory=Bilingual)
    category: CategoryRef = field(default_factory=CategoryRef)
    subcategory: CategoryRef = field(default_factory=CategoryRef)
    tipo: str | list[str] = ""
    images: list[str] = field(default_factory=list)
    active: bool = True
    allow_customization: bool = False
    custom_name: str = ""
    custom_number: str = ""
    sku: str = ""
    orden: float = 0
    variants: list[Variant] = field(default_factory=list)
    price_usd: float | None = None
    stock_total: int = 0
    default_description_type: str = "none"
    extra_description_top: str = ""
    extra_description_bottom: str = ""
    description_position: str = "bottom"

    @classmethod
    def from_dict(cls, data: Mapping) -> Product:
        """
        Normaliza un documento del store.

        Tolera documentos antiguos: título string, `titleEs`/`titleEn`,
        documentos sin slug.
        """
        doc_id = _str(data.get("id"))
        raw_title = data.get("title")
        if isinstance(raw_title, Mapping):
            title = Bilingual.coerce(raw_title)
        elif isinstance(raw_title, str):
            title = Bilingual(es=raw_title, en="")
        else:
            title = Bilingual(es=_str(data.get("titleEs")) or "Producto", en=_str(data.get("titleEn")))

        slug = _str(data.get("slug"))
        if not slug:
            slug = legacy_slug(doc_id, title.es)

        tipo = data.get("tipo") or ""
        if isinstance(tipo, (list, tuple)):
            tipo = [_str(t) for t in tipo]
        else:
            tipo = _str(tipo)

        variants = [Variant.from_dict(v) for v in data.get("variants") or [] if isinstance(v, Mapping)]
        orden = as_number(data.get("orden"))

        return cls(
            id=doc_id,
            slug=slug,
            title=title,
            description=Bilingual.coerce(data.get("description")),
            category=CategoryRef.coerce(data.get("category")),
            subcategory=CategoryRef.coerce(data.get("subcategory")),
            tipo=tipo,
            images=[_str(i) for i in data.get("images") or []],
            active=bool(data.get("active", True)),
            allow_customization=bool(data.get("allowCustomization", False)),
            custom_name=_str(data.get("customName")),
            custom_number=_str(data.get("customNumber")),
            sku=_str(data.get("sku")),
            orden=orden if orden is not None else 0,
            variants=variants,
            price_usd=as_number(data.get("priceUSD")),
            stock_total=as_stock(data.get("stockTotal")),
            default_description_type=_str(data.get("defaultDescriptionType")) or "none",
            extra_description_top=_str(data.get("extraDescriptionTop")),
            extra_description_bottom=_str(data.get("extraDescriptionBottom")),
            description_position=_str(data.get("descriptionPosition")) or "bottom",
        )

    @property
    def tipos(self) -> list[str]:
        if isinstance(self.tipo, list):
            return [t for t in self.tipo if t]
        return [self.tipo] if self.tipo else []

    def option_prices(self) -> list[float]:
        return [o.price_usd for v in self.variants for o in v.options if o.price_usd is not None]

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "slug": self.slug,
            "title": self.title.to_dict(),
            "description": self.description.to_dict(),
            "category": self.category.to_dict(),
            "subcategory": self.subcategory.to_dict(),
            "tipo": list(self.tipo) if isinstance(self.tipo, list) else self.tipo,
            "images": list(self.images),
            "active": self.active,
            "allowCustomization": self.allow_customization,
            "customName": self.custom_name,
            "customNumber": self.custom_number,
            "sku": self.sku,
            "orden": self.orden,
            "variants": [v.to_dict() for v in self.variants],
            "priceUSD": self.price_usd,
            "stockTotal": self.stock_total,
            "defaultDescriptionType": self.default_description_type,
            "extraDescriptionTop": self.extra_description_top,
            "extraDescriptionBottom": self.extra_description_bottom,
            "descriptionPosition": self.description_position,
        }


def legacy_slug(doc_id: str, title_es: str) -> str:
    """Slug de documentos antiguos: "<id>-<titulo-con-guiones>"."""
    return f"{doc_id}-{'-'.join((title_es or 'producto').lower().split())}"


@dataclass
class Subcategory:
    id: str
    name: Bilingual
    category_id: str
    orden: float = 0

    @classmethod
    def from_dict(cls, data: Mapping, *, category_id: str = "") -> Subcategory:
        orden = as_number(data.get("orden"))
        return cls(
            id=_str(data.get("id")),
            name=Bilingual.coerce(data.get("name")),
            category_id=_str(data.get("categoryId")) or category_id,
            orden=orden if orden is not None else 0,
        )

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name.to_dict(), "categoryId": self.category_id, "orden": self.orden}


@dataclass
class Category:
    id: str
    name: Bilingual
    orden: float = 0
    subcategories: list[Subcategory] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping) -> Category:
        orden = as_number(data.get("orden"))
        return cls(
            id=_str(data.get("id")),
            name=Bilingual.coerce(data.get("name")),
            orden=orden if orden is not None else 0,
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name.to_dict(),
            "orden": self.orden,
            "subcategories": [s.to_dict() for s in self.subcategories],
        }


# =============================================================================
# Cart
# =============================================================================


DEFAULT_VARIANT_LABEL = Bilingual(es="Tamaño", en="Size")


def _variant_axis(data: Mapping) -> Bilingual | None:
    variant = data.get("variant")
    if isinstance(variant, Bilingual):
        return variant
    if isinstance(variant, Mapping) and isinstance(variant.get("label"), Mapping):
        label = variant["label"]
        return Bilingual(
            es=_str(label.get("es")) or DEFAULT_VARIANT_LABEL.es,
            en=_str(label.get("en")) or DEFAULT_VARIANT_LABEL.en,
        )
    variant_title = data.get("variantTitle")
    if isinstance(variant_title, Mapping):
        return Bilingual(
            es=_str(variant_title.get("es")) or DEFAULT_VARIANT_LABEL.es,
            en=_str(variant_title.get("en")) or DEFAULT_VARIANT_LABEL.en,
        )
    if isinstance(variant_title, str):
        return Bilingual(es=variant_title, en=variant_title)
    return None


@dataclass
class CartItem:
    """
    Línea del carrito.

    Identidad: (id, variant_id, variant_label). Dos líneas con la misma
    identidad se fusionan sumando cantidades.
    """

    id: str
    quantity: int = 1
    price: float = 0
    title: Bilingual = field(default_factory=Bilingual)
    variant_id: str = ""
    variant_label: str = ""
    variant: Bilingual | None = None
    image: str = ""
    slug: str = ""
    custom_name: str = ""
    custom_number: str = ""

    @classmethod
    def from_dict(cls, data: Mapping) -> CartItem:
        quantity = as_number(data.get("quantity"))
        price = as_number(data.get("price"))
        if price is None:
            price = as_number(data.get("priceUSD"))
        return cls(
            id=_str(data.get("id")),
            quantity=int(quantity) if quantity else 1,
            price=price or 0,
            title=Bilingual.coerce(data.get("title")),
            variant_id=_str(data.get("variantId")),
            variant_label=_str(data.get("variantLabel")),
            variant=_variant_axis(data),
            image=_str(data.get("image")),
            slug=_str(data.get("slug")),
            custom_name=_str(data.get("customName")),
            custom_number=_str(data.get("customNumber")),
        )

    @property
    def key(self) -> tuple[str, str, str]:
        return (self.id, self.variant_id, self.variant_label)

    @property
    def line_total(self) -> float:
        return (self.price or 0) * (self.quantity or 1)

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "quantity": self.quantity,
            "price": self.price,
            "priceUSD": self.price,
            "title": self.title.to_dict(),
            "variantId": self.variant_id,
            "variantLabel": self.variant_label,
            "image": self.image,
            "slug": self.slug,
        }
        if self.variant is not None:
            data["variant"] = {"label": self.variant.to_dict()}
        if self.custom_name:
            data["customName"] = self.custom_name
        if self.custom_number:
            data["customNumber"] = self.custom_number
        return data


# =============================================================================
# Users
# =============================================================================


@dataclass
class AdminUser:
    """Registro de usuario administrativo (colección adminUsers)."""

    uid: str
    email: str
    rol: str = Rol.ADMIN
    nombre: str = ""
    activo: bool = True
    created_at: Any = None

    @classmethod
    def from_dict(cls, data: Mapping) -> AdminUser:
        return cls(
            uid=_str(data.get("uid") or data.get("id")),
            email=_str(data.get("email")),
            rol=_str(data.get("rol")) or Rol.ADMIN,
            nombre=_str(data.get("nombre")),
            activo=bool(data.get("activo", True)),
            created_at=data.get("createdAt"),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.uid,
            "uid": self.uid,
            "email": self.email,
            "rol": str(self.rol),
            "nombre": self.nombre,
            "activo": self.activo,
            "createdAt": self.created_at,
        }
