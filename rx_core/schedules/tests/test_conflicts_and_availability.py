# rx_core/schedules/tests/test_conflicts_and_availability.py
import uuid
from datetime import date, time

import pytest

from rx_core.schedules.availability import AvailabilityFinder
from rx_core.schedules.conflicts import ConflictDetector
from rx_core.schedules.constants import ShiftStatus
from rx_core.schedules.domain import ShiftRecord
from rx_core.schedules.exceptions import ScheduleStorageError, ScheduleValidationError
from rx_core.schedules.tests.fakes import (
    FailingShiftRepository,
    InMemoryPharmacistDirectory,
    InMemoryShiftRepository,
    profile,
)

DAY = date(2024, 5, 20)
PHARMACY = uuid.uuid4()
OTHER_PHARMACY = uuid.uuid4()


def _shift(pharmacist_id, start, end, *, status=ShiftStatus.SCHEDULED, day=DAY, pharmacy_id=PHARMACY):
    return ShiftRecord(
        pharmacist_id=pharmacist_id,
        pharmacy_id=pharmacy_id,
        schedule_date=day,
        start_time=start,
        end_time=end,
        status=status,
    )


# -------------------------
# ConflictDetector
# -------------------------
def test_overlapping_shift_is_a_conflict():
    pid = uuid.uuid4()
    repo = InMemoryShiftRepository([_shift(pid, time(9), time(13))])

    clashes = ConflictDetector(repo).find_conflicts(pid, DAY, time(12), time(17))

    assert len(clashes) == 1
    assert ConflictDetector(repo).has_conflict(pid, DAY, time(12), time(17))


def test_touching_shifts_do_not_conflict():
    pid = uuid.uuid4()
    repo = InMemoryShiftRepository([_shift(pid, time(9), time(13))])

    assert not ConflictDetector(repo).has_conflict(pid, DAY, time(13), time(17))


def test_cancelled_shift_never_conflicts():
    pid = uuid.uuid4()
    repo = InMemoryShiftRepository([_shift(pid, time(9), time(17), status=ShiftStatus.CANCELLED)])

    assert not ConflictDetector(repo).has_conflict(pid, DAY, time(10), time(12))


def test_excluded_shift_is_ignored():
    pid = uuid.uuid4()
    repo = InMemoryShiftRepository()
    stored = repo.create(_shift(pid, time(9), time(17)))

    assert not ConflictDetector(repo).has_conflict(pid, DAY, time(10), time(18), exclude_shift_id=stored.id)


def test_other_pharmacist_and_other_day_do_not_conflict():
    pid = uuid.uuid4()
    repo = InMemoryShiftRepository(
        [
            _shift(uuid.uuid4(), time(9), time(17)),
            _shift(pid, time(9), time(17), day=date(2024, 5, 21)),
        ]
    )

    assert not ConflictDetector(repo).has_conflict(pid, DAY, time(9), time(17))


def test_storage_failure_is_wrapped():
    with pytest.raises(ScheduleStorageError) as exc:
        ConflictDetector(FailingShiftRepository()).has_conflict(uuid.uuid4(), DAY, time(9), time(10))
    assert exc.value.message.startswith("Failed to check shift conflicts")
    assert isinstance(exc.value.__cause__, ConnectionError)


# -------------------------
# AvailabilityFinder
# -------------------------
def _finder(profiles, shifts=(), inactive_ids=()):
    repo = InMemoryShiftRepository(shifts)
    directory = InMemoryPharmacistDirectory(profiles, inactive_ids=inactive_ids)
    return AvailabilityFinder(directory=directory, conflicts=ConflictDetector(repo))


def test_availability_excludes_busy_and_sorts_by_seniority():
    s1, s2 = uuid.uuid4(), uuid.uuid4()
    junior = profile(pharmacy_id=PHARMACY, years=2)
    senior = profile(pharmacy_id=PHARMACY, years=12)
    senior_more_specialties = profile(pharmacy_id=PHARMACY, years=12, specialties=[s1, s2])
    busy = profile(pharmacy_id=PHARMACY, years=20)

    finder = _finder(
        [junior, senior, senior_more_specialties, busy],
        shifts=[_shift(busy.id, time(8), time(12))],
    )

    found = finder.find_available(PHARMACY, DAY, time(9), time(17))

    assert [p.id for p in found] == [senior_more_specialties.id, senior.id, junior.id]


def test_equal_seniority_keeps_directory_order():
    a = profile(pharmacy_id=PHARMACY, years=5)
    b = profile(pharmacy_id=PHARMACY, years=5)

    found = _finder([a, b]).find_available(PHARMACY, DAY, time(9), time(17))

    assert [p.id for p in found] == [a.id, b.id]


def test_busy_elsewhere_still_counts_as_busy():
    p = profile(pharmacy_id=PHARMACY)
    finder = _finder([p], shifts=[_shift(p.id, time(9), time(12), pharmacy_id=OTHER_PHARMACY)])

    assert finder.find_available(PHARMACY, DAY, time(10), time(11)) == []


def test_availability_is_scoped_to_pharmacy_unless_none():
    here = profile(pharmacy_id=PHARMACY)
    there = profile(pharmacy_id=OTHER_PHARMACY)
    finder = _finder([here, there])

    assert [p.id for p in finder.find_available(PHARMACY, DAY, time(9), time(17))] == [here.id]
    assert {p.id for p in finder.find_available(None, DAY, time(9), time(17))} == {here.id, there.id}


def test_inactive_pharmacists_are_never_available():
    p = profile(pharmacy_id=PHARMACY)

    assert _finder([p], inactive_ids=[p.id]).find_available(PHARMACY, DAY, time(9), time(17)) == []


def test_empty_roster_returns_empty_list():
    assert _finder([]).find_available(PHARMACY, DAY, time(9), time(17)) == []


def test_narrower_window_never_loses_pharmacists():
    profiles = [profile(pharmacy_id=PHARMACY, years=y) for y in (1, 4, 9)]
    shifts = [_shift(profiles[0].id, time(15), time(18))]
    finder = _finder(profiles, shifts=shifts)

    wide = {p.id for p in finder.find_available(PHARMACY, DAY, time(9), time(17))}
    narrow = {p.id for p in finder.find_available(PHARMACY, DAY, time(10), time(12))}

    assert wide <= narrow


@pytest.mark.parametrize("picked", [0, 2, 4])
def test_new_overlapping_shift_removes_only_that_pharmacist(picked):
    profiles = [profile(pharmacy_id=PHARMACY, years=y) for y in (3, 11, 7, 7, 1)]
    repo = InMemoryShiftRepository([_shift(profiles[1].id, time(6), time(9))])
    finder = AvailabilityFinder(
        directory=InMemoryPharmacistDirectory(profiles),
        conflicts=ConflictDetector(repo),
    )

    before = [p.id for p in finder.find_available(PHARMACY, DAY, time(9), time(17))]
    taken = profiles[picked].id
    repo.create(_shift(taken, time(12), time(14)))
    after = [p.id for p in finder.find_available(PHARMACY, DAY, time(9), time(17))]

    assert taken in before
    assert after == [pid for pid in before if pid != taken]


def test_availability_rejects_inverted_window():
    with pytest.raises(ScheduleValidationError):
        _finder([]).find_available(PHARMACY, DAY, time(17), time(9))
