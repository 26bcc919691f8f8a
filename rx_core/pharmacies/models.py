# rx_core/pharmacies/models.py
from __future__ import annotations

from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

from rx_core.common.models import UUIDModel


class Pharmacy(UUIDModel):
    """
    A dispensing site. Pharmacists have exactly one home pharmacy.
    """
    name = models.CharField(max_length=255)
    code = models.SlugField(max_length=64, unique=True)

    phone = models.CharField(max_length=32, blank=True, default="")
    postal_code = models.CharField(max_length=16, blank=True, default="")
    address = models.CharField(max_length=255, blank=True, default="")

    is_active = models.BooleanField(default=True, db_index=True)

    class Meta:
        db_table = "pharmacies_pharmacy"
        ordering = ["name"]

    def __str__(self) -> str:
        return f"{self.name} ({self.code})"


class Specialty(UUIDModel):
    """
    Clinical specialty tag (e.g. oncology, pediatrics).
    """
    code = models.SlugField(max_length=64, unique=True)
    name = models.CharField(max_length=128)

    class Meta:
        db_table = "pharmacies_specialty"
        ordering = ["code"]
        verbose_name_plural = "specialties"

    def __str__(self) -> str:
        return self.name


class Pharmacist(UUIDModel):
    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        related_name="pharmacist",
        null=True,
        blank=True,
    )

    first_name = models.CharField(max_length=128)
    last_name = models.CharField(max_length=128)

    license_number = models.CharField(max_length=64, unique=True)
    license_date = models.DateField(null=True, blank=True)
    total_experience_years = models.PositiveSmallIntegerField(default=0)

    home_pharmacy = models.ForeignKey(Pharmacy, on_delete=models.PROTECT, related_name="pharmacists")

    is_active = models.BooleanField(default=True, db_index=True)

    class Meta:
        db_table = "pharmacies_pharmacist"
        indexes = [
            models.Index(fields=["home_pharmacy", "is_active"], name="pharmacist_home_active_idx"),
        ]

    @property
    def display_name(self) -> str:
        return f"{self.last_name} {self.first_name}".strip()

    def __str__(self) -> str:
        return self.display_name


class PharmacistSpecialty(models.Model):
    pharmacist = models.ForeignKey(Pharmacist, on_delete=models.CASCADE, related_name="specialty_links")
    specialty = models.ForeignKey(Specialty, on_delete=models.PROTECT, related_name="pharmacist_links")

    # 1 = basic .. 5 = expert
    proficiency_level = models.PositiveSmallIntegerField(
        default=1,
        validators=[MinValueValidator(1), MaxValueValidator(5)],
    )

    class Meta:
        db_table = "pharmacies_pharmacist_specialty"
        constraints = [
            models.UniqueConstraint(fields=["pharmacist", "specialty"], name="uq_pharmacist_specialty"),
        ]

    def __str__(self) -> str:
        return f"{self.pharmacist_id}:{self.specialty_id} (L{self.proficiency_level})"
