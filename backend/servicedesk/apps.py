"""Service desk app configuration."""

from django.apps import AppConfig


class ServicedeskConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "servicedesk"
    verbose_name = "Service desk"
