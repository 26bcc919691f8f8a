# rx_core/schedules/api/serializers.py
from __future__ import annotations

from rest_framework import serializers

from rx_core.schedules.constants import ShiftStatus, WorkType
from rx_core.schedules.periods import VIEWS
from rx_core.schedules import timerange


# ----------------------------
# Output (records -> JSON)
# ----------------------------
class ShiftSerializer(serializers.Serializer):
    id = serializers.UUIDField(read_only=True)
    pharmacist_id = serializers.UUIDField(read_only=True)
    pharmacy_id = serializers.UUIDField(read_only=True)
    schedule_date = serializers.DateField(read_only=True)
    start_time = serializers.TimeField(read_only=True)
    end_time = serializers.TimeField(read_only=True)
    break_minutes = serializers.IntegerField(read_only=True)
    work_type = serializers.CharField(read_only=True)
    status = serializers.CharField(read_only=True)
    work_location = serializers.CharField(read_only=True, allow_null=True)
    work_description = serializers.CharField(read_only=True, allow_null=True)
    created_by_id = serializers.IntegerField(read_only=True, allow_null=True)
    version = serializers.IntegerField(read_only=True)
    worked_hours = serializers.SerializerMethodField()
    created_at = serializers.DateTimeField(read_only=True)
    updated_at = serializers.DateTimeField(read_only=True)

    def get_worked_hours(self, obj) -> float:
        return round(timerange.worked_hours(obj), 2)


class ShiftChangeEventSerializer(serializers.Serializer):
    id = serializers.UUIDField(read_only=True)
    shift_id = serializers.UUIDField(read_only=True)
    sequence = serializers.IntegerField(read_only=True)
    change_type = serializers.CharField(read_only=True)
    changed_by_id = serializers.IntegerField(read_only=True, allow_null=True)
    reason = serializers.CharField(read_only=True, allow_null=True)
    previous_values = serializers.DictField(read_only=True)
    new_values = serializers.DictField(read_only=True)
    substitute_requested = serializers.BooleanField(read_only=True)
    suggested_pharmacist_id = serializers.UUIDField(read_only=True, allow_null=True)
    suggestion_accepted = serializers.BooleanField(read_only=True, allow_null=True)
    created_at = serializers.DateTimeField(read_only=True)


class ShiftChangeResultSerializer(serializers.Serializer):
    shift = ShiftSerializer(read_only=True)
    event = ShiftChangeEventSerializer(read_only=True, allow_null=True)
    history_recorded = serializers.SerializerMethodField()

    def get_history_recorded(self, obj) -> bool:
        return not obj.audit_diverged


class PharmacistProfileSerializer(serializers.Serializer):
    id = serializers.UUIDField(read_only=True)
    display_name = serializers.CharField(read_only=True)
    experience_years = serializers.IntegerField(read_only=True)
    home_pharmacy_id = serializers.UUIDField(read_only=True)
    specialties = serializers.SerializerMethodField()

    def get_specialties(self, obj) -> list[dict]:
        return [
            {"specialty_id": str(specialty_id), "proficiency_level": level}
            for specialty_id, level in obj.specialties
        ]


class SubstituteCandidateSerializer(serializers.Serializer):
    pharmacist = PharmacistProfileSerializer(read_only=True)
    score = serializers.FloatField(read_only=True)
    shared_specialty_count = serializers.IntegerField(read_only=True)
    experience_gap = serializers.IntegerField(read_only=True)
    label = serializers.CharField(read_only=True)


class ShiftStatsSerializer(serializers.Serializer):
    pharmacist_id = serializers.UUIDField(read_only=True)
    start_date = serializers.DateField(read_only=True)
    end_date = serializers.DateField(read_only=True)
    total_shifts = serializers.IntegerField(read_only=True)
    completed_shifts = serializers.IntegerField(read_only=True)
    cancelled_shifts = serializers.IntegerField(read_only=True)
    total_hours = serializers.FloatField(read_only=True)
    average_hours_per_shift = serializers.FloatField(read_only=True)


# ----------------------------
# Input
# ----------------------------
class ShiftCreateSerializer(serializers.Serializer):
    pharmacist_id = serializers.UUIDField()
    pharmacy_id = serializers.UUIDField()
    schedule_date = serializers.DateField()
    start_time = serializers.TimeField()
    end_time = serializers.TimeField()
    break_minutes = serializers.IntegerField(required=False, default=0)
    work_type = serializers.ChoiceField(choices=WorkType.choices, required=False, default=WorkType.REGULAR)
    status = serializers.ChoiceField(choices=ShiftStatus.choices, required=False, default=ShiftStatus.SCHEDULED)
    work_location = serializers.CharField(required=False, allow_null=True, allow_blank=True, max_length=255)
    work_description = serializers.CharField(required=False, allow_null=True, allow_blank=True)


class ShiftUpdateSerializer(serializers.Serializer):
    """
    Partial update contract (PATCH). `reason` is recorded on the change event.
    """
    schedule_date = serializers.DateField(required=False)
    start_time = serializers.TimeField(required=False)
    end_time = serializers.TimeField(required=False)
    break_minutes = serializers.IntegerField(required=False)
    work_type = serializers.ChoiceField(choices=WorkType.choices, required=False)
    status = serializers.ChoiceField(choices=ShiftStatus.choices, required=False)
    work_location = serializers.CharField(required=False, allow_null=True, allow_blank=True, max_length=255)
    work_description = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    reason = serializers.CharField(required=False, allow_null=True, allow_blank=True)

    def validate(self, attrs):
        if not set(attrs) - {"reason"}:
            raise serializers.ValidationError("At least one field is required.")
        return attrs


class CancelShiftSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    suggest_substitute = serializers.BooleanField(required=False, default=False)


class RescheduleShiftSerializer(serializers.Serializer):
    new_schedule_date = serializers.DateField()
    new_start_time = serializers.TimeField()
    new_end_time = serializers.TimeField()
    reason = serializers.CharField(required=False, allow_null=True, allow_blank=True)


class SubstituteShiftSerializer(serializers.Serializer):
    new_pharmacist_id = serializers.UUIDField()
    suggested_pharmacist_id = serializers.UUIDField(required=False, allow_null=True)
    reason = serializers.CharField(required=False, allow_null=True, allow_blank=True)


class ShiftListQuerySerializer(serializers.Serializer):
    """
    Either an explicit range (start_date + end_date) or a calendar view
    (view + date).
    """
    start_date = serializers.DateField(required=False)
    end_date = serializers.DateField(required=False)
    view = serializers.ChoiceField(choices=VIEWS, required=False)
    date = serializers.DateField(required=False)
    pharmacist_id = serializers.UUIDField(required=False)
    pharmacy_id = serializers.UUIDField(required=False)

    def validate(self, attrs):
        has_range = "start_date" in attrs and "end_date" in attrs
        has_view = "view" in attrs and "date" in attrs
        if not has_range and not has_view:
            raise serializers.ValidationError(
                {"detail": "Provide start_date and end_date, or view and date."}
            )
        return attrs


class AvailabilityQuerySerializer(serializers.Serializer):
    date = serializers.DateField()
    start_time = serializers.TimeField()
    end_time = serializers.TimeField()
    pharmacy_id = serializers.UUIDField(required=False)


class StatsQuerySerializer(serializers.Serializer):
    start_date = serializers.DateField()
    end_date = serializers.DateField()
