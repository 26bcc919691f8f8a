# rx_core/pharmacies/apps.py
from django.apps import AppConfig


class PharmaciesConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "rx_core.pharmacies"
