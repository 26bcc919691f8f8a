# rx_core/schedules/tests/test_schedule_service.py
import uuid
from datetime import date, time

import pytest

from rx_core.schedules.constants import ChangeType, ShiftStatus, WorkType
from rx_core.schedules.exceptions import (
    PharmacistNotFound,
    PharmacyNotFound,
    ScheduleConflictError,
    ScheduleValidationError,
    ShiftNotFound,
    StaleShiftError,
)
from rx_core.schedules.services import ScheduleService
from rx_core.schedules.substitutes import SubstituteMatcher
from rx_core.schedules.tests.fakes import (
    FailingChangeEventLog,
    InMemoryChangeEventLog,
    InMemoryPharmacistDirectory,
    InMemoryShiftRepository,
    profile,
)

DAY = date(2024, 3, 1)
PHARMACY = uuid.uuid4()
ONCOLOGY = uuid.uuid4()


@pytest.fixture
def roster():
    return {
        "a": profile(pharmacy_id=PHARMACY, years=5, specialties=[ONCOLOGY], name="A"),
        "b": profile(pharmacy_id=PHARMACY, years=6, specialties=[ONCOLOGY], name="B"),
        "c": profile(pharmacy_id=PHARMACY, years=1, name="C"),
        "far": profile(pharmacy_id=uuid.uuid4(), years=5, specialties=[ONCOLOGY], name="Far"),
    }


@pytest.fixture
def shifts():
    return InMemoryShiftRepository()


@pytest.fixture
def events():
    return InMemoryChangeEventLog()


@pytest.fixture
def directory(roster):
    return InMemoryPharmacistDirectory(roster.values())


@pytest.fixture
def service(shifts, events, directory):
    return ScheduleService(shifts=shifts, events=events, directory=directory)


def _create(service, pharmacist, start=time(9), end=time(13), **kwargs):
    kwargs.setdefault("schedule_date", DAY)
    return service.create_shift(
        pharmacist_id=pharmacist.id,
        pharmacy_id=PHARMACY,
        start_time=start,
        end_time=end,
        **kwargs,
    )


# -------------------------
# Create
# -------------------------
def test_double_booking_rejected_but_back_to_back_allowed(service, roster, events):
    first = _create(service, roster["a"], time(9), time(13))

    with pytest.raises(ScheduleConflictError) as exc:
        _create(service, roster["a"], time(11), time(15))
    assert exc.value.conflicting_shift_ids == [str(first.id)]

    second = _create(service, roster["a"], time(13), time(17))

    assert second.id != first.id
    assert second.status == ShiftStatus.SCHEDULED
    assert second.version == 1
    assert events.events == []


def test_create_can_skip_conflict_check(service, roster):
    _create(service, roster["a"], time(9), time(13))

    overlapping = _create(service, roster["a"], time(10), time(12), check_conflicts=False)

    assert overlapping.id is not None


def test_create_conflict_check_follows_setting(service, roster, settings):
    settings.RX_SCHEDULING = {"CHECK_CONFLICTS_ON_CREATE": False}
    _create(service, roster["a"], time(9), time(13))

    assert _create(service, roster["a"], time(10), time(12)).id is not None


def test_create_rejects_invalid_window_before_writing(service, roster, shifts):
    with pytest.raises(ScheduleValidationError) as exc:
        _create(service, roster["a"], time(13), time(9))

    assert exc.value.field == "end_time"
    assert shifts.rows == {}


def test_create_rejects_unknown_pharmacist(service):
    ghost = profile(pharmacy_id=PHARMACY)
    with pytest.raises(PharmacistNotFound):
        _create(service, ghost)


def test_create_rejects_unknown_pharmacy_before_writing(service, roster, shifts):
    with pytest.raises(PharmacyNotFound) as exc:
        service.create_shift(
            pharmacist_id=roster["a"].id,
            pharmacy_id=uuid.uuid4(),
            schedule_date=DAY,
            start_time=time(9),
            end_time=time(13),
        )

    assert exc.value.field == "pharmacy_id"
    assert shifts.rows == {}


def test_inactive_pharmacist_cannot_be_assigned(service, roster, directory):
    shift = _create(service, roster["a"])
    directory.inactive_ids.add(roster["c"].id)

    with pytest.raises(ScheduleValidationError) as exc:
        _create(service, roster["c"])
    assert exc.value.field == "pharmacist_id"

    with pytest.raises(ScheduleValidationError) as exc:
        service.substitute_pharmacist(shift.id, new_pharmacist_id=roster["c"].id)
    assert exc.value.field == "new_pharmacist_id"
    assert service.get_shift(shift.id).pharmacist_id == roster["a"].id


def test_create_normalises_blank_optional_text(service, roster):
    shift = _create(service, roster["a"], work_location="   ", work_description=" counter 2 ")

    assert shift.work_location is None
    assert shift.work_description == "counter 2"


def test_create_rejects_unknown_work_type(service, roster):
    with pytest.raises(ScheduleValidationError) as exc:
        _create(service, roster["a"], work_type="night")
    assert exc.value.field == "work_type"


# -------------------------
# Cancel + substitutes
# -------------------------
def test_cancel_with_substitute_request(service, roster, shifts, events, directory):
    shift = _create(service, roster["a"])

    change = service.cancel_shift(shift.id, actor_id=7, reason="illness", suggest_substitute=True)

    assert change.shift.status == ShiftStatus.CANCELLED
    assert change.shift.version == 2
    assert not change.audit_diverged

    trail = service.history(shift.id)
    assert len(trail) == 1
    assert trail[0].change_type == ChangeType.CANCEL
    assert trail[0].reason == "illness"
    assert trail[0].substitute_requested is True
    assert trail[0].previous_values == {"status": "scheduled"}
    assert trail[0].new_values == {"status": "cancelled"}

    suggestions = SubstituteMatcher(shifts=shifts, directory=directory).suggest_substitutes(shift.id)
    ids = [c.pharmacist.id for c in suggestions]
    assert ids == [roster["b"].id, roster["c"].id]
    assert roster["far"].id not in ids
    assert [c.score for c in suggestions] == sorted((c.score for c in suggestions), reverse=True)


@pytest.mark.parametrize("status", [ShiftStatus.COMPLETED, ShiftStatus.CANCELLED])
def test_cannot_cancel_finished_shift(service, roster, status):
    shift = _create(service, roster["a"], status=status)

    with pytest.raises(ScheduleValidationError):
        service.cancel_shift(shift.id)


def test_cancel_unknown_shift(service):
    with pytest.raises(ShiftNotFound):
        service.cancel_shift(uuid.uuid4())


# -------------------------
# Reschedule
# -------------------------
def test_reschedule_moves_window_and_keeps_status(service, roster):
    shift = _create(service, roster["a"], status=ShiftStatus.CONFIRMED)

    change = service.reschedule_shift(
        shift.id,
        schedule_date=date(2024, 3, 2),
        start_time=time(14),
        end_time=time(18),
        reason="swap",
    )

    assert change.shift.schedule_date == date(2024, 3, 2)
    assert change.shift.start_time == time(14)
    assert change.shift.status == ShiftStatus.CONFIRMED
    assert change.event.change_type == ChangeType.RESCHEDULE
    assert change.event.previous_values == {
        "schedule_date": "2024-03-01",
        "start_time": "09:00:00",
        "end_time": "13:00:00",
    }
    assert change.event.new_values["schedule_date"] == "2024-03-02"


def test_reschedule_into_own_slot_conflicts(service, roster):
    _create(service, roster["a"], time(14), time(18))
    shift = _create(service, roster["a"], time(9), time(13))

    with pytest.raises(ScheduleConflictError):
        service.reschedule_shift(shift.id, schedule_date=DAY, start_time=time(12), end_time=time(15))


def test_reschedule_overlapping_itself_is_fine(service, roster):
    shift = _create(service, roster["a"], time(9), time(13))

    change = service.reschedule_shift(shift.id, schedule_date=DAY, start_time=time(10), end_time=time(14))

    assert change.shift.end_time == time(14)


def test_reschedule_to_identical_window_is_rejected(service, roster):
    shift = _create(service, roster["a"])

    with pytest.raises(ScheduleValidationError):
        service.reschedule_shift(shift.id, schedule_date=DAY, start_time=time(9), end_time=time(13))


# -------------------------
# Substitute
# -------------------------
def test_substitute_reassigns_and_records_suggestion_outcome(service, roster):
    shift = _create(service, roster["a"])

    change = service.substitute_pharmacist(
        shift.id,
        new_pharmacist_id=roster["b"].id,
        reason="covering",
        suggested_pharmacist_id=roster["c"].id,
    )

    assert change.shift.pharmacist_id == roster["b"].id
    assert change.event.change_type == ChangeType.SUBSTITUTE
    assert change.event.previous_values == {"pharmacist_id": str(roster["a"].id)}
    assert change.event.new_values == {"pharmacist_id": str(roster["b"].id)}
    assert change.event.suggestion_accepted is False


def test_substitute_rejects_busy_replacement(service, roster):
    shift = _create(service, roster["a"], time(9), time(13))
    _create(service, roster["b"], time(12), time(16))

    with pytest.raises(ScheduleConflictError):
        service.substitute_pharmacist(shift.id, new_pharmacist_id=roster["b"].id)


def test_substitute_rejects_same_or_unknown_pharmacist(service, roster):
    shift = _create(service, roster["a"])

    with pytest.raises(ScheduleValidationError):
        service.substitute_pharmacist(shift.id, new_pharmacist_id=roster["a"].id)
    with pytest.raises(PharmacistNotFound) as exc:
        service.substitute_pharmacist(shift.id, new_pharmacist_id=uuid.uuid4())
    assert exc.value.field == "new_pharmacist_id"


# -------------------------
# Generic update / status machine
# -------------------------
def test_update_records_only_changed_fields(service, roster):
    shift = _create(service, roster["a"])

    change = service.update_shift(
        shift.id,
        changes={"work_type": WorkType.OVERTIME, "break_minutes": 0, "work_location": "Counter 3"},
        actor_id=3,
    )

    assert change.event.change_type == ChangeType.UPDATE
    assert change.event.previous_values == {"work_type": "regular", "work_location": None}
    assert change.event.new_values == {"work_type": "overtime", "work_location": "Counter 3"}
    assert change.event.changed_by_id == 3


def test_update_without_effective_change_is_noop(service, roster, events):
    shift = _create(service, roster["a"])

    change = service.update_shift(shift.id, changes={"start_time": time(9)})

    assert change.event is None
    assert change.shift.version == shift.version
    assert events.events == []


def test_status_moves_forward_only(service, roster):
    shift = _create(service, roster["a"])

    service.update_shift(shift.id, changes={"status": ShiftStatus.CONFIRMED})
    service.update_shift(shift.id, changes={"status": ShiftStatus.COMPLETED})

    with pytest.raises(ScheduleValidationError):
        service.update_shift(shift.id, changes={"status": ShiftStatus.SCHEDULED})


def test_update_rejects_unknown_and_empty_fields(service, roster):
    shift = _create(service, roster["a"])

    with pytest.raises(ScheduleValidationError):
        service.update_shift(shift.id, changes={"pharmacist_id": roster["b"].id})
    with pytest.raises(ScheduleValidationError):
        service.update_shift(shift.id, changes={"start_time": None})


def test_update_window_checks_conflicts(service, roster):
    _create(service, roster["a"], time(14), time(18))
    shift = _create(service, roster["a"], time(9), time(13))

    with pytest.raises(ScheduleConflictError):
        service.update_shift(shift.id, changes={"end_time": time(15)})


def test_history_is_append_only_and_newest_first(service, roster):
    shift = _create(service, roster["a"], time(9), time(13))

    service.update_shift(shift.id, changes={"work_location": "Front"})
    service.reschedule_shift(shift.id, schedule_date=DAY, start_time=time(10), end_time=time(14))
    service.substitute_pharmacist(shift.id, new_pharmacist_id=roster["b"].id)
    service.cancel_shift(shift.id)

    trail = service.history(shift.id)

    assert [e.change_type for e in trail] == [
        ChangeType.CANCEL,
        ChangeType.SUBSTITUTE,
        ChangeType.RESCHEDULE,
        ChangeType.UPDATE,
    ]
    assert [e.sequence for e in trail] == [4, 3, 2, 1]


# -------------------------
# Failure modes
# -------------------------
def test_history_failure_keeps_data_write_and_reports_divergence(shifts, directory, roster):
    service = ScheduleService(shifts=shifts, events=FailingChangeEventLog(), directory=directory)
    shift = _create(service, roster["a"])

    change = service.cancel_shift(shift.id, reason="illness")

    assert change.audit_diverged
    assert change.event is None
    assert "Failed to record shift history" in str(change.history_error)
    assert shifts.find_by_id(shift.id).status == ShiftStatus.CANCELLED


def test_concurrent_edit_is_rejected_as_stale(service, roster, shifts, events, monkeypatch):
    shift = _create(service, roster["a"])
    stale = shifts.find_by_id(shift.id)
    # another writer cancels after our read
    service.cancel_shift(shift.id)
    monkeypatch.setattr(shifts, "find_by_id", lambda shift_id: stale)

    with pytest.raises(StaleShiftError):
        service.update_shift(shift.id, changes={"work_location": "Back"})

    assert len(events.events) == 1


# -------------------------
# Delete
# -------------------------
def test_delete_removes_shift_and_keeps_history(service, roster):
    shift = _create(service, roster["a"])
    service.cancel_shift(shift.id)

    service.delete_shift(shift.id)

    with pytest.raises(ShiftNotFound):
        service.get_shift(shift.id)
    assert len(service.history(shift.id)) == 1

    with pytest.raises(ShiftNotFound):
        service.delete_shift(shift.id)


def test_list_shifts_rejects_inverted_range(service):
    with pytest.raises(ScheduleValidationError):
        service.list_shifts(start_date=date(2024, 3, 2), end_date=date(2024, 3, 1))
