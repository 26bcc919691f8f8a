# rx_core/pharmacies/selectors.py
from __future__ import annotations

from uuid import UUID

from django.db.models import QuerySet

from rx_core.pharmacies.models import Pharmacist


class PharmacistSelector:
    class NotFound(Exception):
        pass

    @staticmethod
    def get_pharmacist(*, pharmacist_id: UUID) -> Pharmacist:
        try:
            return (
                Pharmacist.objects.select_related("home_pharmacy")
                .prefetch_related("specialty_links__specialty")
                .get(id=pharmacist_id)
            )
        except Pharmacist.DoesNotExist:
            raise PharmacistSelector.NotFound()

    @staticmethod
    def list_pharmacists(*, include_inactive: bool = False) -> QuerySet[Pharmacist]:
        qs = Pharmacist.objects.select_related("home_pharmacy").prefetch_related("specialty_links__specialty")
        if not include_inactive:
            qs = qs.filter(is_active=True)
        return qs.order_by("last_name", "first_name", "id")
