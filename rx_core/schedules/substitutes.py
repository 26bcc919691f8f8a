# rx_core/schedules/substitutes.py
from __future__ import annotations

from typing import Optional
from uuid import UUID

from rx_core.pharmacies.directory import DjangoPharmacistDirectory, PharmacistDirectory, PharmacistProfile
from rx_core.schedules.availability import AvailabilityFinder
from rx_core.schedules.conflicts import ConflictDetector
from rx_core.schedules.domain import SubstituteCandidate
from rx_core.schedules.exceptions import PharmacistNotFound, ShiftNotFound
from rx_core.schedules.repositories import DjangoShiftRepository, ShiftRepository, storage_call

EXPERIENCE_WEIGHT = 0.3
SPECIALTY_WEIGHT = 0.4
AVAILABILITY_BONUS = 3.0
NEUTRAL_SPECIALTY_TERM = 5.0

# (minimum score, label), checked top-down
SCORE_LABELS = (
    (8.0, "excellent"),
    (6.0, "good"),
    (4.0, "fair"),
)
FALLBACK_LABEL = "needs_review"


def score_label(score: float) -> str:
    for threshold, label in SCORE_LABELS:
        if score >= threshold:
            return label
    return FALLBACK_LABEL


def compatibility(original: PharmacistProfile, candidate: PharmacistProfile) -> SubstituteCandidate:
    """
    0-10 blend of experience similarity (0.3), specialty overlap (0.4)
    and a flat +3 for being free during the shift.
    """
    experience_gap = abs(candidate.experience_years - original.experience_years)
    experience_term = max(0, 10 - experience_gap)

    shared = len(original.specialty_ids & candidate.specialty_ids)
    if original.specialty_count:
        specialty_term = 10 * (shared / original.specialty_count)
    else:
        specialty_term = NEUTRAL_SPECIALTY_TERM

    score = round(
        EXPERIENCE_WEIGHT * experience_term + SPECIALTY_WEIGHT * specialty_term + AVAILABILITY_BONUS,
        1,
    )
    return SubstituteCandidate(
        pharmacist=candidate,
        score=score,
        shared_specialty_count=shared,
        experience_gap=experience_gap,
        label=score_label(score),
    )


class SubstituteMatcher:
    def __init__(
        self,
        shifts: Optional[ShiftRepository] = None,
        directory: Optional[PharmacistDirectory] = None,
        availability: Optional[AvailabilityFinder] = None,
    ):
        self.shifts = shifts or DjangoShiftRepository()
        self.directory = directory or DjangoPharmacistDirectory()
        self.availability = availability or AvailabilityFinder(
            directory=self.directory,
            conflicts=ConflictDetector(self.shifts),
        )

    def suggest_substitutes(self, shift_id: UUID) -> list[SubstituteCandidate]:
        """
        Free pharmacists from the original assignee's home pharmacy,
        best match first. Empty when nobody can cover.
        """
        with storage_call("load shift"):
            shift = self.shifts.find_by_id(shift_id)
        if shift is None:
            raise ShiftNotFound()

        with storage_call("load pharmacist"):
            original = self.directory.find_by_id(shift.pharmacist_id)
        if original is None:
            raise PharmacistNotFound(f"Assigned pharmacist {shift.pharmacist_id} not found.")

        available = self.availability.find_available(
            original.home_pharmacy_id,
            shift.schedule_date,
            shift.start_time,
            shift.end_time,
        )

        candidates = [compatibility(original, p) for p in available if p.id != original.id]
        # stable: equal scores keep seniority order from the finder
        candidates.sort(key=lambda c: c.score, reverse=True)
        return candidates
