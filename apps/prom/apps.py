from django.apps import AppConfig


class PromConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.prom"
    verbose_name = "Prom planning"
