# rx_core/schedules/availability.py
from __future__ import annotations

from datetime import date, time
from typing import Optional
from uuid import UUID

from rx_core.pharmacies.directory import DjangoPharmacistDirectory, PharmacistDirectory, PharmacistProfile
from rx_core.schedules.conflicts import ConflictDetector
from rx_core.schedules.repositories import storage_call
from rx_core.schedules.timerange import validate_window


def seniority_key(profile: PharmacistProfile) -> tuple[int, int]:
    return (profile.experience_years, profile.specialty_count)


class AvailabilityFinder:
    def __init__(
        self,
        directory: Optional[PharmacistDirectory] = None,
        conflicts: Optional[ConflictDetector] = None,
    ):
        self.directory = directory or DjangoPharmacistDirectory()
        self.conflicts = conflicts or ConflictDetector()

    def find_available(
        self,
        pharmacy_id: Optional[UUID],
        on_date: date,
        start: time,
        end: time,
    ) -> list[PharmacistProfile]:
        """
        Pharmacists free for the whole window, most senior first
        (experience, then number of specialties). Ties keep directory order.

        pharmacy_id=None searches the whole directory (emergency cover).
        An empty list means nobody is free.
        """
        validate_window(start, end, break_minutes=None)

        with storage_call("load pharmacists"):
            if pharmacy_id:
                roster = self.directory.find_by_pharmacy(pharmacy_id)
            else:
                roster = self.directory.find_all()

        if not roster:
            return []

        busy = self.conflicts.busy_pharmacist_ids(on_date, start, end)
        free = [p for p in roster if p.id not in busy]

        # sorted() is stable under reverse=True
        return sorted(free, key=seniority_key, reverse=True)
