"""
Tienda Services — Servicios de dominio.

- ProductService: Alta, edición y baja de productos
- CategoryService: Categorías y subcategorías
- UserService: Usuarios administrativos y sus claims
- ClientService: Clientes de la tienda
- OrderService: Pedidos y transiciones de estado
- StockService: Descuento de stock por variante
- CheckoutService: Preferencias de pago
"""

from .categories import CategoryService
from .checkout import CheckoutService
from .clients import ClientService
from .orders import OrderService
from .products import ProductService
from .stock import StockService
from .users import UserService

__all__ = [
    "CategoryService",
    "CheckoutService",
    "ClientService",
    "OrderService",
    "ProductService",
    "StockService",
    "UserService",
]
