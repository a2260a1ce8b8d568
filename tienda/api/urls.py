from __future__ import annotations

from django.http import JsonResponse
from django.urls import include, path
from rest_framework.routers import DefaultRouter

from .views import (
    AdminOrderViewSet,
    CategoryViewSet,
    ClientViewSet,
    ImageKitAuthView,
    OrderViewSet,
    PreferenceView,
    ProductViewSet,
    UserViewSet,
)


def health_check(request):
    """
    Healthcheck para monitoreo.

    Returns:
        200 OK con {"status": "healthy", "version": "X.X.X"}
    """
    from tienda import __version__

    return JsonResponse({
        "status": "healthy",
        "version": __version__,
    })


router = DefaultRouter(trailing_slash=False)
router.include_root_view = False
router.include_format_suffixes = False
router.register("admin/products", ProductViewSet, basename="admin-products")
router.register("admin/clients", ClientViewSet, basename="admin-clients")
router.register("admin/users", UserViewSet, basename="admin-users")
router.register("admin/orders", AdminOrderViewSet, basename="admin-orders")
router.register("admin/categories", CategoryViewSet, basename="admin-categories")
router.register("orders", OrderViewSet, basename="orders")

urlpatterns = [
    path("health", health_check, name="health-check"),
    path("admin/imagekit-auth", ImageKitAuthView.as_view(), name="imagekit-auth"),
    path("create-mp-preference", PreferenceView.as_view(), name="create-mp-preference"),
    path("", include(router.urls)),
]
