# rx_core/pharmacies/management/commands/seed_pharmacy_roster.py
from datetime import time, timedelta

from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils import timezone

from rx_core.pharmacies.models import Pharmacist, PharmacistSpecialty, Pharmacy, Specialty
from rx_core.schedules.exceptions import ScheduleConflictError
from rx_core.schedules.services import ScheduleService

SPECIALTIES = (
    ("oncology", "Oncology"),
    ("pediatrics", "Pediatrics"),
    ("geriatrics", "Geriatrics"),
    ("compounding", "Compounding"),
)

# (first, last, license suffix, years, {specialty code: level})
ROSTER = (
    ("Hana", "Sato", "001", 15, {"oncology": 5, "geriatrics": 3}),
    ("Kenji", "Mori", "002", 8, {"oncology": 3}),
    ("Aiko", "Ito", "003", 12, {"pediatrics": 4, "compounding": 2}),
    ("Ren", "Kato", "004", 3, {}),
)


class Command(BaseCommand):
    help = "Seed a demo pharmacy with specialties, pharmacists and (optionally) day shifts. Idempotent."

    def add_arguments(self, parser):
        parser.add_argument("--code", default="central", help="Pharmacy code to create or reuse.")
        parser.add_argument("--name", default="Central Pharmacy")
        parser.add_argument("--days", type=int, default=0, help="Schedule day shifts for the next N days.")

    @transaction.atomic
    def handle(self, *args, **options):
        pharmacy, _ = Pharmacy.objects.get_or_create(code=options["code"], defaults={"name": options["name"]})

        specialties = {}
        for code, name in SPECIALTIES:
            specialties[code], _ = Specialty.objects.get_or_create(code=code, defaults={"name": name})

        pharmacists = []
        for first, last, suffix, years, levels in ROSTER:
            pharmacist, _ = Pharmacist.objects.get_or_create(
                license_number=f"{pharmacy.code.upper()}-{suffix}",
                defaults={
                    "first_name": first,
                    "last_name": last,
                    "total_experience_years": years,
                    "home_pharmacy": pharmacy,
                },
            )
            for code, level in levels.items():
                PharmacistSpecialty.objects.get_or_create(
                    pharmacist=pharmacist,
                    specialty=specialties[code],
                    defaults={"proficiency_level": level},
                )
            pharmacists.append(pharmacist)

        created_shifts = 0
        skipped = 0
        service = ScheduleService()
        today = timezone.localdate()
        for offset in range(options["days"]):
            day = today + timedelta(days=offset)
            # rotate one pharmacist off each day
            for index, pharmacist in enumerate(pharmacists):
                if index == offset % len(pharmacists):
                    continue
                try:
                    service.create_shift(
                        pharmacist_id=pharmacist.id,
                        pharmacy_id=pharmacy.id,
                        schedule_date=day,
                        start_time=time(9, 0),
                        end_time=time(18, 0),
                        break_minutes=60,
                    )
                    created_shifts += 1
                except ScheduleConflictError:
                    skipped += 1

        self.stdout.write(
            self.style.SUCCESS(
                f"Seeded pharmacy={pharmacy.code} pharmacists={len(pharmacists)} "
                f"shifts_created={created_shifts} shifts_skipped={skipped}"
            )
        )
