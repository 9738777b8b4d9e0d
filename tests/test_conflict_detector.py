import pytest

from coachmate.core.exceptions import DuplicateAssignment, ScheduleConflict, ValidationError
from coachmate.models.tenant_specific.timetable import DayOfWeek
from coachmate.services.scheduling import (
    ConflictDetector, EntityStore, QualificationIndex, SlotCandidate, build_time_range, parse_day
)
from coachmate.services.timetable_service import TimetableService


def candidate(seed, start, end, day=DayOfWeek.MONDAY, teacher_id=None, **extra):
    return SlotCandidate(
        tenant_id=seed.tenant.id,
        teacher_id=teacher_id or seed.alice.id,
        day_of_week=day,
        time_range=build_time_range(start, end),
        **extra
    )


@pytest.fixture
async def booked(db, seed, slot_data):
    """Alice: Monday 09:00-10:00 (Class A) and 11:00-12:00 (Class B)."""
    service = TimetableService(db)
    morning = await service.create_slot(seed.tenant.id, slot_data())
    late = await service.create_slot(
        seed.tenant.id, slot_data(class_id=seed.class_b.id, start_time="11:00", end_time="12:00")
    )
    return morning.id, late.id


async def test_finds_every_overlapping_slot_in_start_order(db, seed, booked):
    morning_id, late_id = booked
    detector = ConflictDetector(db)

    conflicts = await detector.find_conflicts(candidate(seed, "09:30", "11:30"))

    assert [slot.id for slot in conflicts] == [morning_id, late_id]


async def test_ignores_adjacent_other_days_other_teachers_and_excluded(db, seed, booked):
    morning_id, _ = booked
    detector = ConflictDetector(db)

    assert await detector.find_conflicts(candidate(seed, "10:00", "11:00")) == []
    assert await detector.find_conflicts(candidate(seed, "09:00", "10:00", day=DayOfWeek.TUESDAY)) == []
    assert await detector.find_conflicts(candidate(seed, "09:00", "10:00", teacher_id=seed.bob.id)) == []
    assert await detector.find_conflicts(candidate(seed, "09:00", "10:00"), exclude_id=morning_id) == []


async def test_other_tenants_are_invisible(db, seed, booked):
    detector = ConflictDetector(db)
    foreign = SlotCandidate(
        tenant_id=seed.other_tenant.id,
        teacher_id=seed.alice.id,
        day_of_week=DayOfWeek.MONDAY,
        time_range=build_time_range("09:00", "10:00"),
    )

    assert await detector.find_conflicts(foreign) == []


async def test_duplicate_is_reported_before_conflict(db, seed, booked):
    morning_id, _ = booked
    detector = ConflictDetector(db)
    same_identity = candidate(
        seed, "09:00", "09:45", class_id=seed.class_a.id, subject_id=seed.math.id
    )

    scan = await detector.scan(same_identity)
    assert scan.duplicate.id == morning_id

    with pytest.raises(DuplicateAssignment):
        await detector.ensure_schedulable(same_identity)

    other_class = candidate(seed, "09:00", "09:45", class_id=seed.class_b.id, subject_id=seed.math.id)
    with pytest.raises(ScheduleConflict) as exc_info:
        await detector.ensure_schedulable(other_class)
    assert exc_info.value.conflicts[0]["id"] == str(morning_id)


def test_parse_day_accepts_any_case():
    assert parse_day("friday") == DayOfWeek.FRIDAY
    assert parse_day(DayOfWeek.SUNDAY) == DayOfWeek.SUNDAY
    with pytest.raises(ValidationError):
        parse_day("Funday")


async def test_qualification_index_is_memoised(db, seed, monkeypatch):
    store = EntityStore(db)
    index = QualificationIndex(store)
    calls = []
    real_lookup = store.get_qualified_subjects

    async def counting_lookup(teacher_id):
        calls.append(teacher_id)
        return await real_lookup(teacher_id)

    monkeypatch.setattr(store, "get_qualified_subjects", counting_lookup)

    assert await index.is_qualified(seed.alice.id, seed.math.id) is True
    assert await index.is_qualified(seed.alice.id, seed.chemistry.id) is False
    assert await index.is_qualified(seed.alice.id, seed.physics.id) is True
    assert len(calls) == 1

    index.clear()
    assert await index.is_qualified(seed.bob.id, seed.physics.id) is False
    assert len(calls) == 2
