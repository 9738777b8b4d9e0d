from datetime import datetime, timedelta, timezone

import pytest

from coachmate.core.exceptions import DuplicateAssignment, NotFound
from coachmate.services.teacher_assignment_service import TeacherAssignmentService
from coachmate.services.timetable_service import TimetableService


@pytest.fixture
def service(db):
    return TeacherAssignmentService(db)


async def test_assign_teacher_to_class(service, seed):
    assignment = await service.assign(seed.tenant.id, seed.class_a.id, {"teacher_id": seed.alice.id})

    assert assignment.class_id == seed.class_a.id
    assert assignment.teacher_id == seed.alice.id
    assert assignment.is_primary is False
    assert assignment.is_active is True
    assert assignment.teacher.full_name == "Alice Rao"
    assert assignment.assigned_at is not None


async def test_assignment_needs_no_qualification_or_free_time(service, db, seed, slot_data):
    # Alice is busy in Class B and not qualified for anything taught in Class A yet
    await TimetableService(db).create_slot(seed.tenant.id, slot_data(class_id=seed.class_b.id))

    assignment = await service.assign(seed.tenant.id, seed.class_a.id, {"teacher_id": seed.alice.id})

    assert assignment.is_active is True


async def test_assigning_twice_is_a_duplicate(service, seed):
    await service.assign(seed.tenant.id, seed.class_a.id, {"teacher_id": seed.alice.id})

    with pytest.raises(DuplicateAssignment) as exc_info:
        await service.assign(seed.tenant.id, seed.class_a.id, {"teacher_id": seed.alice.id})

    assert exc_info.value.message == "Teacher is already assigned to this class"


async def test_inactive_or_foreign_teacher_cannot_be_assigned(service, seed):
    with pytest.raises(NotFound) as exc_info:
        await service.assign(seed.tenant.id, seed.class_a.id, {"teacher_id": seed.carol.id})
    assert exc_info.value.message == "Teacher not found or inactive"

    with pytest.raises(NotFound):
        await service.assign(seed.tenant.id, seed.class_a.id, {"teacher_id": seed.foreign_teacher.id})
    with pytest.raises(NotFound):
        await service.assign(seed.tenant.id, seed.foreign_class.id, {"teacher_id": seed.alice.id})


async def test_one_primary_teacher_per_class(service, seed):
    await service.assign(seed.tenant.id, seed.class_a.id, {"teacher_id": seed.alice.id, "is_primary": True})
    await service.assign(seed.tenant.id, seed.class_a.id, {"teacher_id": seed.bob.id, "is_primary": True})

    roster = await service.list_for_class(seed.tenant.id, seed.class_a.id)

    assert [(a.teacher_id, a.is_primary) for a in roster] == [
        (seed.bob.id, True),
        (seed.alice.id, False),
    ]


async def test_roster_is_primary_first_then_by_assignment_time(service, seed):
    start = datetime(2026, 6, 1, 9, 0, tzinfo=timezone.utc)
    await service.assign(seed.tenant.id, seed.class_a.id, {"teacher_id": seed.bob.id, "assigned_at": start})
    await service.assign(
        seed.tenant.id, seed.class_a.id,
        {"teacher_id": seed.alice.id, "assigned_at": start - timedelta(days=1)}
    )
    await service.update(seed.tenant.id, seed.class_a.id, seed.bob.id, {"is_primary": True})

    roster = await service.list_for_class(seed.tenant.id, seed.class_a.id)

    assert [a.teacher_id for a in roster] == [seed.bob.id, seed.alice.id]


async def test_update_promotes_and_demotes(service, seed):
    await service.assign(seed.tenant.id, seed.class_a.id, {"teacher_id": seed.alice.id, "is_primary": True})
    await service.assign(seed.tenant.id, seed.class_a.id, {"teacher_id": seed.bob.id})

    promoted = await service.update(seed.tenant.id, seed.class_a.id, seed.bob.id, {"is_primary": True})
    assert promoted.is_primary is True
    roster = await service.list_for_class(seed.tenant.id, seed.class_a.id)
    assert [a.teacher_id for a in roster if a.is_primary] == [seed.bob.id]

    demoted = await service.update(seed.tenant.id, seed.class_a.id, seed.bob.id, {"is_primary": False})
    assert demoted.is_primary is False
    roster = await service.list_for_class(seed.tenant.id, seed.class_a.id)
    assert [a for a in roster if a.is_primary] == []


async def test_update_missing_assignment_is_not_found(service, seed):
    with pytest.raises(NotFound) as exc_info:
        await service.update(seed.tenant.id, seed.class_a.id, seed.bob.id, {"is_primary": True})

    assert exc_info.value.message == "Teacher assignment not found"


async def test_remove_soft_deletes_and_unlinks_slots(service, db, seed, slot_data):
    timetable = TimetableService(db)
    assignment = await service.assign(seed.tenant.id, seed.class_a.id, {"teacher_id": seed.alice.id})
    slot = await timetable.create_slot(seed.tenant.id, slot_data())
    assert slot.assignment_id == assignment.id
    slot_id, assignment_id = slot.id, assignment.id

    await service.remove(seed.tenant.id, seed.class_a.id, seed.alice.id)

    assert await service.list_for_class(seed.tenant.id, seed.class_a.id) == []
    assert (await timetable.get_slot(seed.tenant.id, slot_id)).assignment_id is None
    with pytest.raises(NotFound):
        await service.remove(seed.tenant.id, seed.class_a.id, seed.alice.id)

    again = await service.assign(seed.tenant.id, seed.class_a.id, {"teacher_id": seed.alice.id})
    assert again.id != assignment_id
    assert (await timetable.get_slot(seed.tenant.id, slot_id)).assignment_id == again.id
