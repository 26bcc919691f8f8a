# rx_core/pharmacies/admin.py
from __future__ import annotations

from django.contrib import admin

from rx_core.pharmacies.models import Pharmacist, PharmacistSpecialty, Pharmacy, Specialty


@admin.register(Pharmacy)
class PharmacyAdmin(admin.ModelAdmin):
    list_display = ("name", "code", "phone", "is_active", "created_at")
    list_filter = ("is_active",)
    search_fields = ("name", "code")
    ordering = ("name",)


@admin.register(Specialty)
class SpecialtyAdmin(admin.ModelAdmin):
    list_display = ("code", "name")
    search_fields = ("code", "name")


class PharmacistSpecialtyInline(admin.TabularInline):
    model = PharmacistSpecialty
    extra = 0


@admin.register(Pharmacist)
class PharmacistAdmin(admin.ModelAdmin):
    list_display = (
        "last_name",
        "first_name",
        "license_number",
        "home_pharmacy",
        "total_experience_years",
        "is_active",
    )
    list_filter = ("is_active", "home_pharmacy")
    search_fields = ("last_name", "first_name", "license_number")
    list_select_related = ("home_pharmacy",)
    inlines = [PharmacistSpecialtyInline]
    readonly_fields = ("created_at", "updated_at")
