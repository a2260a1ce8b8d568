from django.apps import AppConfig
from django.utils.translation import gettext_lazy as _


class TiendaConfig(AppConfig):
    name = "tienda"
    verbose_name = _("Tienda")
    default_auto_field = "django.db.models.BigAutoField"
