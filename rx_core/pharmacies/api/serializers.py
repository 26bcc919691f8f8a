# rx_core/pharmacies/api/serializers.py
from __future__ import annotations

from rest_framework import serializers

from rx_core.pharmacies.models import Pharmacist, PharmacistSpecialty


class PharmacistSpecialtySerializer(serializers.ModelSerializer):
    code = serializers.CharField(source="specialty.code", read_only=True)
    name = serializers.CharField(source="specialty.name", read_only=True)

    class Meta:
        model = PharmacistSpecialty
        fields = ["specialty_id", "code", "name", "proficiency_level"]
        read_only_fields = fields


class PharmacistSerializer(serializers.ModelSerializer):
    display_name = serializers.CharField(read_only=True)
    home_pharmacy_id = serializers.UUIDField(read_only=True)
    home_pharmacy_name = serializers.CharField(source="home_pharmacy.name", read_only=True)
    specialties = PharmacistSpecialtySerializer(source="specialty_links", many=True, read_only=True)

    class Meta:
        model = Pharmacist
        fields = [
            "id",
            "first_name",
            "last_name",
            "display_name",
            "license_number",
            "license_date",
            "total_experience_years",
            "home_pharmacy_id",
            "home_pharmacy_name",
            "specialties",
            "is_active",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields
