import uuid

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ("pharmacies", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Shift",
            fields=[
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("schedule_date", models.DateField(db_index=True)),
                ("start_time", models.TimeField()),
                ("end_time", models.TimeField()),
                ("break_minutes", models.PositiveIntegerField(default=0)),
                (
                    "work_type",
                    models.CharField(
                        choices=[
                            ("regular", "Regular"),
                            ("overtime", "Overtime"),
                            ("holiday", "Holiday"),
                            ("emergency", "Emergency"),
                        ],
                        default="regular",
                        max_length=16,
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("scheduled", "Scheduled"),
                            ("confirmed", "Confirmed"),
                            ("completed", "Completed"),
                            ("cancelled", "Cancelled"),
                        ],
                        db_index=True,
                        default="scheduled",
                        max_length=16,
                    ),
                ),
                ("work_location", models.CharField(blank=True, max_length=255, null=True)),
                ("work_description", models.TextField(blank=True, null=True)),
                ("version", models.PositiveIntegerField(default=1)),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="created_shifts",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "pharmacist",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="shifts",
                        to="pharmacies.pharmacist",
                    ),
                ),
                (
                    "pharmacy",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="shifts",
                        to="pharmacies.pharmacy",
                    ),
                ),
            ],
            options={
                "db_table": "schedules_shift",
                "indexes": [
                    models.Index(fields=["pharmacist", "schedule_date"], name="shift_pharmacist_date_idx"),
                    models.Index(fields=["pharmacy", "schedule_date"], name="shift_pharmacy_date_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(end_time__gt=models.F("start_time")),
                        name="ck_shift_end_after_start",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(break_minutes__gte=0),
                        name="ck_shift_break_non_negative",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="ShiftChangeEvent",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("shift_id", models.UUIDField(db_index=True)),
                ("sequence", models.PositiveIntegerField()),
                (
                    "change_type",
                    models.CharField(
                        choices=[
                            ("update", "Update"),
                            ("cancel", "Cancel"),
                            ("reschedule", "Reschedule"),
                            ("substitute", "Substitute"),
                        ],
                        db_index=True,
                        max_length=16,
                    ),
                ),
                ("reason", models.TextField(blank=True, null=True)),
                ("previous_values", models.JSONField(blank=True, default=dict)),
                ("new_values", models.JSONField(blank=True, default=dict)),
                ("substitute_requested", models.BooleanField(default=False)),
                ("suggested_pharmacist_id", models.UUIDField(blank=True, null=True)),
                ("suggestion_accepted", models.BooleanField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                (
                    "changed_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="shift_changes",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "schedules_shift_change_event",
                "indexes": [
                    models.Index(fields=["shift_id", "created_at"], name="shift_change_shift_time_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(fields=("shift_id", "sequence"), name="uq_shift_change_sequence"),
                ],
            },
        ),
    ]
