# rx_core/schedules/apps.py
from django.apps import AppConfig


class SchedulesConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "rx_core.schedules"
