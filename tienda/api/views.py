"""
Tienda API Views — Endpoints del panel de administración y del checkout.

Rutas (bajo /api/):

    admin/products[/{id}]          admin+
    admin/clients[/{id}]           admin+
    admin/users[/{id}]             admin+ (alta, baja y cambio de rol: superadmin)
    admin/orders[/{id}]            admin+
    admin/categories[/{id}]        admin+
    admin/imagekit-auth            admin+
    orders                         identidad autenticada, uid debe coincidir
    create-mp-preference           público

Los handlers delegan en los servicios; los errores (TiendaError y las
excepciones de DRF) se traducen en `tienda.api.exceptions.exception_handler`.
Un método no mapeado en el ViewSet responde 405.
"""

from __future__ import annotations

import logging

from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from tienda import backends
from tienda.services import (
    CategoryService,
    CheckoutService,
    ClientService,
    OrderService,
    ProductService,
    UserService,
)

from .permissions import IsAdmin, IsAuthenticatedIdentity, IsSuperadmin
from .serializers import CategorySerializer, OrderStatusSerializer, UserUpdateSerializer


logger = logging.getLogger(__name__)

LOOKUP_REGEX = r"[^/]+"


def _get_actor(request) -> str:
    """uid de la identidad del request, o 'api' como fallback."""
    user = getattr(request, "user", None)
    return getattr(user, "uid", None) or "api"


def _payload(request) -> dict:
    data = request.data
    return data if hasattr(data, "get") else {}


class AdminViewSet(viewsets.ViewSet):
    permission_classes = [IsAdmin]
    lookup_value_regex = LOOKUP_REGEX


class ProductViewSet(AdminViewSet):
    """
    GET    /api/admin/products       - Lista todos los productos
    POST   /api/admin/products       - Crea un producto (201 {id, slug})
    PATCH  /api/admin/products/{id}  - Actualiza y recalcula precio/stock
    DELETE /api/admin/products/{id}  - Borra un producto
    """

    def list(self, request):
        return Response({"products": ProductService.list_products()})

    def create(self, request):
        result = ProductService.create_product(_payload(request))
        return Response(result, status=status.HTTP_201_CREATED)

    def partial_update(self, request, pk=None):
        return Response(ProductService.update_product(pk, _payload(request)))

    def destroy(self, request, pk=None):
        result = ProductService.delete_product(pk)
        logger.info("Producto borrado", extra={"product_id": pk, "actor": _get_actor(request)})
        return Response(result)


class ClientViewSet(AdminViewSet):
    """
    GET    /api/admin/clients       - Lista clientes
    DELETE /api/admin/clients/{id}  - Borra un cliente
    """

    def list(self, request):
        return Response({"clients": ClientService.list_clients()})

    def destroy(self, request, pk=None):
        return Response(ClientService.delete_client(pk))


class UserViewSet(AdminViewSet):
    """
    Usuarios del panel.

    Lectura y cambios de nombre/activo: admin+. Alta, baja y cambio de rol:
    superadmin. El cambio de rol se valida en UserService porque depende del
    payload, no solo del método.
    """

    def get_permissions(self):
        if self.action in ("create", "destroy"):
            return [IsSuperadmin()]
        return super().get_permissions()

    def list(self, request):
        return Response({"users": UserService.list_users()})

    def create(self, request):
        result = UserService.create_user(_payload(request))
        return Response(result, status=status.HTTP_201_CREATED)

    def retrieve(self, request, pk=None):
        return Response(UserService.get_user(pk))

    def partial_update(self, request, pk=None):
        s = UserUpdateSerializer(data=_payload(request))
        s.is_valid(raise_exception=True)
        result = UserService.update_user(pk, s.validated_data, actor=request.user.identity)
        return Response(result)

    def destroy(self, request, pk=None):
        return Response(UserService.delete_user(pk))


class AdminOrderViewSet(AdminViewSet):
    """
    GET   /api/admin/orders       - Pedidos, más recientes primero
    PATCH /api/admin/orders/{id}  - Cambia `estado` según las transiciones permitidas
    """

    def list(self, request):
        return Response({"orders": OrderService.list_orders()})

    def partial_update(self, request, pk=None):
        s = OrderStatusSerializer(data=_payload(request))
        s.is_valid(raise_exception=True)
        return Response(OrderService.transition(pk, s.validated_data["estado"]))


class CategoryViewSet(AdminViewSet):
    """
    GET    /api/admin/categories                          - Categorías con subcategorías
    POST   /api/admin/categories                          - Crea categoría
    DELETE /api/admin/categories/{id}                     - Borra categoría
    POST   /api/admin/categories/{id}/subcategories       - Crea subcategoría
    DELETE /api/admin/categories/{id}/subcategories/{sub} - Borra subcategoría
    """

    def list(self, request):
        categories = CategoryService.list_categories()
        return Response({"categories": [c.to_dict() for c in categories]})

    def create(self, request):
        s = CategorySerializer(data=_payload(request))
        s.is_valid(raise_exception=True)
        return Response(CategoryService.create_category(s.validated_data), status=status.HTTP_201_CREATED)

    def destroy(self, request, pk=None):
        return Response(CategoryService.delete_category(pk))

    @action(detail=True, methods=["post"], url_path="subcategories")
    def subcategories(self, request, pk=None):
        s = CategorySerializer(data=_payload(request))
        s.is_valid(raise_exception=True)
        result = CategoryService.create_subcategory(pk, s.validated_data)
        return Response(result, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["delete"], url_path=r"subcategories/(?P<subcategory_id>[^/]+)")
    def delete_subcategory(self, request, pk=None, subcategory_id=None):
        return Response(CategoryService.delete_subcategory(pk, subcategory_id))


class OrderViewSet(viewsets.ViewSet):
    """
    POST /api/orders - Crea un pedido a nombre de la identidad autenticada.

    Cualquier identidad verificada (incluso anónima) puede crear pedidos, pero
    el `uid` del payload debe coincidir con el del token.
    """

    permission_classes = [IsAuthenticatedIdentity]

    def create(self, request):
        result = OrderService.create_order(_payload(request), identity=request.user.identity)
        return Response(result, status=status.HTTP_201_CREATED)


class ImageKitAuthView(APIView):
    """GET /api/admin/imagekit-auth - Firma de subida para el CDN de imágenes."""

    permission_classes = [IsAdmin]

    def get(self, request):
        signature = backends.get_image_cdn().sign_upload()
        return Response(signature.to_dict())


class PreferenceView(APIView):
    """
    POST /api/create-mp-preference

    Público. Normaliza las líneas del carrito, agrega el costo de envío y
    crea la preferencia en la pasarela. Devuelve {"init_point": ...}.
    Errores de la pasarela propagan su status.
    """

    authentication_classes = []
    permission_classes = [AllowAny]

    def post(self, request):
        return Response(CheckoutService.create_preference(_payload(request)))
