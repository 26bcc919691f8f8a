# rx_core/schedules/admin.py
from django.contrib import admin

from rx_core.schedules.models import Shift, ShiftChangeEvent


@admin.register(Shift)
class ShiftAdmin(admin.ModelAdmin):
    list_display = (
        "schedule_date",
        "start_time",
        "end_time",
        "pharmacist",
        "pharmacy",
        "work_type",
        "status",
        "version",
    )
    list_filter = ("status", "work_type", "pharmacy")
    search_fields = ("pharmacist__last_name", "pharmacist__first_name", "work_location")
    list_select_related = ("pharmacist", "pharmacy")
    date_hierarchy = "schedule_date"
    readonly_fields = ("version", "created_by", "created_at", "updated_at")
    ordering = ("-schedule_date", "start_time")


@admin.register(ShiftChangeEvent)
class ShiftChangeEventAdmin(admin.ModelAdmin):
    list_display = ("shift_id", "sequence", "change_type", "changed_by", "created_at")
    list_filter = ("change_type",)
    search_fields = ("shift_id",)
    ordering = ("-created_at",)

    # Append-only: rows are written by ScheduleService only
    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
