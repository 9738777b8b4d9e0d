# coachmate/services/scheduling/conflict_detector.py
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from ...core.exceptions import DuplicateAssignment, ScheduleConflict, ValidationError
from ...models.tenant_specific.timetable import DayOfWeek, TimetableSlot
from .interval import TimeRange, format_hhmm


def parse_day(value: Union[str, DayOfWeek]) -> DayOfWeek:
    if isinstance(value, DayOfWeek):
        return value
    try:
        return DayOfWeek(str(value).upper())
    except ValueError:
        raise ValidationError(
            "Invalid day of week. Use one of: " + ", ".join(day.value for day in DayOfWeek),
            field="day_of_week"
        )


@dataclass(frozen=True)
class SlotCandidate:
    """The slot a create/update would leave behind, before it is written."""
    tenant_id: UUID
    teacher_id: UUID
    day_of_week: DayOfWeek
    time_range: TimeRange
    class_id: Optional[UUID] = None
    subject_id: Optional[UUID] = None

    def is_duplicate_of(self, slot: TimetableSlot) -> bool:
        return (
            slot.class_id == self.class_id
            and slot.subject_id == self.subject_id
            and slot.teacher_id == self.teacher_id
            and slot.day_of_week == self.day_of_week
            and slot.start_time == self.time_range.start
        )


@dataclass
class ConflictScan:
    duplicate: Optional[TimetableSlot] = None
    conflicts: List[TimetableSlot] = field(default_factory=list)


def describe_conflict(slot: TimetableSlot) -> Dict[str, Any]:
    return {
        "id": str(slot.id),
        "class_id": str(slot.class_id),
        "class_name": slot.class_ref.class_name if slot.class_ref else None,
        "subject_id": str(slot.subject_id),
        "day_of_week": slot.day_of_week.value,
        "start_time": format_hhmm(slot.start_time),
        "end_time": format_hhmm(slot.end_time),
        "room": slot.room,
    }


class ConflictDetector:
    """Finds active slots that would double-book a teacher.

    The working set is one teacher's day, so a linear scan is enough.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _same_teacher_day(self, candidate: SlotCandidate, exclude_id: Optional[UUID]) -> List[TimetableSlot]:
        stmt = select(TimetableSlot).where(
            TimetableSlot.tenant_id == candidate.tenant_id,
            TimetableSlot.teacher_id == candidate.teacher_id,
            TimetableSlot.day_of_week == candidate.day_of_week,
            TimetableSlot.is_active == True
        ).order_by(TimetableSlot.start_time)
        if exclude_id is not None:
            stmt = stmt.where(TimetableSlot.id != exclude_id)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def scan(self, candidate: SlotCandidate, exclude_id: Optional[UUID] = None) -> ConflictScan:
        report = ConflictScan()
        for slot in await self._same_teacher_day(candidate, exclude_id):
            existing = TimeRange(slot.start_time, slot.end_time)
            if not candidate.time_range.overlaps(existing):
                continue
            if report.duplicate is None and candidate.is_duplicate_of(slot):
                report.duplicate = slot
            report.conflicts.append(slot)
        return report

    async def find_conflicts(self, candidate: SlotCandidate, exclude_id: Optional[UUID] = None) -> List[TimetableSlot]:
        return (await self.scan(candidate, exclude_id)).conflicts

    async def ensure_schedulable(self, candidate: SlotCandidate, exclude_id: Optional[UUID] = None) -> None:
        report = await self.scan(candidate, exclude_id)
        if report.duplicate is not None:
            raise DuplicateAssignment("This timetable entry already exists", existing_id=report.duplicate.id)
        if report.conflicts:
            raise ScheduleConflict([describe_conflict(slot) for slot in report.conflicts])
