from __future__ import annotations

from rest_framework import serializers


class OrderStatusSerializer(serializers.Serializer):
    """PATCH /api/admin/orders/{id}"""

    estado = serializers.CharField()


class CategorySerializer(serializers.Serializer):
    """
    POST /api/admin/categories y /api/admin/categories/{id}/subcategories

    `name` acepta string o {"es", "en"}.
    """

    name = serializers.JSONField()
    orden = serializers.FloatField(required=False)


class UserUpdateSerializer(serializers.Serializer):
    """
    PATCH /api/admin/users/{id}

    Solo valida tipos; los permisos por campo los resuelve UserService.
    """

    nombre = serializers.CharField(required=False, allow_blank=True)
    activo = serializers.BooleanField(required=False)
    rol = serializers.CharField(required=False)

