# rx_core/pharmacies/directory.py
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from rx_core.pharmacies.models import Pharmacist, Pharmacy


@dataclass(frozen=True)
class PharmacistProfile:
    """
    Read-only view of a pharmacist as seen by the scheduling core.

    `specialties` holds (specialty_id, proficiency_level) pairs.
    """
    id: UUID
    display_name: str
    experience_years: int
    home_pharmacy_id: UUID
    specialties: tuple[tuple[UUID, int], ...] = ()
    is_active: bool = True

    @property
    def specialty_ids(self) -> frozenset[UUID]:
        return frozenset(specialty_id for specialty_id, _ in self.specialties)

    @property
    def specialty_count(self) -> int:
        return len(self.specialty_ids)


class PharmacistDirectory(ABC):
    """
    Read access to pharmacist records and pharmacy membership.
    """

    @abstractmethod
    def find_by_id(self, pharmacist_id: UUID) -> Optional[PharmacistProfile]:
        """Return the pharmacist (active or not), or None."""

    @abstractmethod
    def find_by_pharmacy(self, pharmacy_id: UUID) -> list[PharmacistProfile]:
        """Active pharmacists whose home pharmacy is `pharmacy_id`, in stable order."""

    @abstractmethod
    def find_all(self) -> list[PharmacistProfile]:
        """Every active pharmacist, in stable order."""

    @abstractmethod
    def pharmacy_exists(self, pharmacy_id: UUID) -> bool:
        """True if `pharmacy_id` names a known pharmacy."""


def to_profile(pharmacist: Pharmacist) -> PharmacistProfile:
    links = sorted(pharmacist.specialty_links.all(), key=lambda link: str(link.specialty_id))
    return PharmacistProfile(
        id=pharmacist.id,
        display_name=pharmacist.display_name,
        experience_years=pharmacist.total_experience_years,
        home_pharmacy_id=pharmacist.home_pharmacy_id,
        specialties=tuple((link.specialty_id, link.proficiency_level) for link in links),
        is_active=pharmacist.is_active,
    )


class DjangoPharmacistDirectory(PharmacistDirectory):
    ORDERING = ("last_name", "first_name", "id")

    def _base_qs(self):
        return Pharmacist.objects.prefetch_related("specialty_links")

    def find_by_id(self, pharmacist_id: UUID) -> Optional[PharmacistProfile]:
        pharmacist = self._base_qs().filter(id=pharmacist_id).first()
        return to_profile(pharmacist) if pharmacist else None

    def find_by_pharmacy(self, pharmacy_id: UUID) -> list[PharmacistProfile]:
        qs = self._base_qs().filter(home_pharmacy_id=pharmacy_id, is_active=True).order_by(*self.ORDERING)
        return [to_profile(p) for p in qs]

    def find_all(self) -> list[PharmacistProfile]:
        qs = self._base_qs().filter(is_active=True).order_by(*self.ORDERING)
        return [to_profile(p) for p in qs]

    def pharmacy_exists(self, pharmacy_id: UUID) -> bool:
        return Pharmacy.objects.filter(id=pharmacy_id).exists()
