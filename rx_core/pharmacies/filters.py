# rx_core/pharmacies/filters.py
from __future__ import annotations

import django_filters
from django.db.models import Q

from rx_core.pharmacies.models import Pharmacist


class PharmacistFilter(django_filters.FilterSet):
    pharmacy_id = django_filters.UUIDFilter(field_name="home_pharmacy_id")
    specialty = django_filters.CharFilter(field_name="specialty_links__specialty__code", distinct=True)
    min_experience = django_filters.NumberFilter(field_name="total_experience_years", lookup_expr="gte")
    q = django_filters.CharFilter(method="filter_q")

    class Meta:
        model = Pharmacist
        fields = ["pharmacy_id", "specialty", "min_experience", "q"]

    def filter_q(self, queryset, name, value):
        value = (value or "").strip()
        if not value:
            return queryset
        return queryset.filter(Q(last_name__icontains=value) | Q(first_name__icontains=value))
