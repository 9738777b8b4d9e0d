# coachmate/services/timetable_service.py
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, case
import logging

from .base_service import TenantScopedService
from .scheduling import (
    ConflictDetector, EntityStore, PrimaryInvariantEnforcer, QualificationIndex,
    SlotCandidate, build_time_range, parse_day
)
from ..core.exceptions import NotFound, ValidationError
from ..core.performance_monitor import monitor_performance
from ..models.tenant_specific.class_model import ClassModel
from ..models.tenant_specific.teacher import Teacher
from ..models.tenant_specific.teacher_assignment import TeacherClassAssignment
from ..models.tenant_specific.timetable import DayOfWeek, TimetableSlot

logger = logging.getLogger(__name__)

SCHEDULING_FIELDS = ("class_id", "subject_id", "teacher_id", "day_of_week", "start_time", "end_time")

# Monday first; the enum is stored by name so ORDER BY on the column would sort alphabetically
DAY_ORDER = case(
    *[(TimetableSlot.day_of_week == day, day.sort_order) for day in DayOfWeek],
    else_=len(DayOfWeek)
)


@dataclass
class ConflictCheckResult:
    has_conflict: bool
    conflicts: List[TimetableSlot] = field(default_factory=list)


def _require(data: Dict[str, Any], key: str) -> Any:
    value = data.get(key)
    if value is None:
        raise ValidationError(f"{key} is required", field=key)
    return value


class TimetableService(TenantScopedService[TimetableSlot]):
    """Weekly timetable of a tenant: every write runs the full validation pipeline
    (shape, references, qualification, duplicate, teacher conflict, primary flag)
    inside one retried transaction.
    """

    def __init__(self, db: AsyncSession):
        super().__init__(TimetableSlot, db)
        self.store = EntityStore(db)
        self.qualifications = QualificationIndex(self.store)
        self.detector = ConflictDetector(db)
        self.primary = PrimaryInvariantEnforcer(db, TimetableSlot)

    # LOOKUPS

    async def _get_active_slot(self, tenant_id: UUID, slot_id: UUID, lock: bool = False) -> TimetableSlot:
        stmt = select(TimetableSlot).where(
            TimetableSlot.id == slot_id,
            TimetableSlot.tenant_id == tenant_id,
            TimetableSlot.is_active == True,
            TimetableSlot.is_deleted == False
        )
        if lock:
            stmt = stmt.with_for_update()
        result = await self.db.execute(stmt)
        slot = result.scalar_one_or_none()
        if not slot:
            raise NotFound("Timetable entry")
        return slot

    async def _active_assignment_id(self, tenant_id: UUID, class_id: UUID, teacher_id: UUID) -> Optional[UUID]:
        stmt = select(TeacherClassAssignment.id).where(
            TeacherClassAssignment.tenant_id == tenant_id,
            TeacherClassAssignment.class_id == class_id,
            TeacherClassAssignment.teacher_id == teacher_id,
            TeacherClassAssignment.is_active == True
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    def _ordered_active(self, tenant_id: UUID):
        return (
            select(TimetableSlot)
            .where(
                TimetableSlot.tenant_id == tenant_id,
                TimetableSlot.is_active == True,
                TimetableSlot.is_deleted == False
            )
            .order_by(DAY_ORDER, TimetableSlot.start_time)
        )

    # WRITES

    @monitor_performance("timetable.create_slot")
    async def create_slot(self, tenant_id: UUID, data: Dict[str, Any]) -> TimetableSlot:
        """Validate and persist a new slot; a primary slot demotes the class's previous primary"""
        time_range = build_time_range(_require(data, "start_time"), _require(data, "end_time"))
        day = parse_day(_require(data, "day_of_week"))
        class_id = _require(data, "class_id")
        subject_id = _require(data, "subject_id")
        teacher_id = _require(data, "teacher_id")
        make_primary = data.get("is_primary", True)

        async def work() -> TimetableSlot:
            self.qualifications.clear()
            class_ = await self.store.get_class(class_id, tenant_id)
            subject = await self.store.get_subject(subject_id, tenant_id)
            teacher = await self.store.get_teacher(teacher_id, tenant_id, lock=True, active_only=True)

            await self.qualifications.ensure_qualified(teacher, subject)

            candidate = SlotCandidate(
                tenant_id=tenant_id,
                teacher_id=teacher.id,
                day_of_week=day,
                time_range=time_range,
                class_id=class_.id,
                subject_id=subject.id,
            )
            await self.detector.ensure_schedulable(candidate)

            slot = TimetableSlot(
                tenant_id=tenant_id,
                class_id=class_.id,
                subject_id=subject.id,
                teacher_id=teacher.id,
                assignment_id=await self._active_assignment_id(tenant_id, class_.id, teacher.id),
                day_of_week=day,
                start_time=time_range.start,
                end_time=time_range.end,
                room=data.get("room"),
                is_primary=False,
                is_active=True,
            )
            self.db.add(slot)
            await self.db.flush()

            if make_primary:
                await self.primary.promote_to_primary(tenant_id, class_.id, slot.id)

            return await self.reload(slot)

        slot = await self.run_in_transaction(work, "create_slot")
        logger.info(
            f"Created timetable slot {slot.id}: teacher {slot.teacher_id} "
            f"{slot.day_of_week.value} {time_range}"
        )
        return slot

    @monitor_performance("timetable.update_slot")
    async def update_slot(self, tenant_id: UUID, slot_id: UUID, patch: Dict[str, Any]) -> TimetableSlot:
        """Apply a partial update, re-running only the checks the changed fields affect"""
        # only room may be cleared explicitly
        patch = {key: value for key, value in patch.items() if value is not None or key == "room"}
        if "day_of_week" in patch:
            patch["day_of_week"] = parse_day(patch["day_of_week"])

        async def work() -> TimetableSlot:
            self.qualifications.clear()
            slot = await self._get_active_slot(tenant_id, slot_id, lock=True)

            time_range = build_time_range(
                patch.get("start_time", slot.start_time),
                patch.get("end_time", slot.end_time)
            )
            day = patch.get("day_of_week", slot.day_of_week)
            class_id = patch.get("class_id", slot.class_id)
            subject_id = patch.get("subject_id", slot.subject_id)
            teacher_id = patch.get("teacher_id", slot.teacher_id)

            class_changed = class_id != slot.class_id
            subject_changed = subject_id != slot.subject_id
            teacher_changed = teacher_id != slot.teacher_id
            schedule_changed = (
                class_changed or subject_changed or teacher_changed
                or day != slot.day_of_week
                or time_range.start != slot.start_time
                or time_range.end != slot.end_time
            )

            if class_changed:
                await self.store.get_class(class_id, tenant_id)
            if subject_changed or teacher_changed:
                subject = await self.store.get_subject(subject_id, tenant_id)
                teacher = await self.store.get_teacher(teacher_id, tenant_id, lock=True, active_only=teacher_changed)
                await self.qualifications.ensure_qualified(teacher, subject)
            elif schedule_changed:
                await self.store.get_teacher(teacher_id, tenant_id, lock=True)

            if schedule_changed:
                candidate = SlotCandidate(
                    tenant_id=tenant_id,
                    teacher_id=teacher_id,
                    day_of_week=day,
                    time_range=time_range,
                    class_id=class_id,
                    subject_id=subject_id,
                )
                await self.detector.ensure_schedulable(candidate, exclude_id=slot.id)

            wants_primary = patch.get("is_primary", slot.is_primary)
            needs_promotion = wants_primary and (not slot.is_primary or class_changed)

            slot.class_id = class_id
            slot.subject_id = subject_id
            slot.teacher_id = teacher_id
            slot.day_of_week = day
            slot.start_time = time_range.start
            slot.end_time = time_range.end
            if "room" in patch:
                slot.room = patch["room"]
            if class_changed or teacher_changed:
                slot.assignment_id = await self._active_assignment_id(tenant_id, class_id, teacher_id)
            if needs_promotion or not wants_primary:
                slot.is_primary = False

            if needs_promotion:
                await self.primary.promote_to_primary(tenant_id, class_id, slot.id)

            return await self.reload(slot)

        slot = await self.run_in_transaction(work, "update_slot")
        logger.info(f"Updated timetable slot {slot_id} ({', '.join(sorted(patch)) or 'no changes'})")
        return slot

    @monitor_performance("timetable.delete_slot")
    async def delete_slot(self, tenant_id: UUID, slot_id: UUID) -> TimetableSlot:
        """Soft delete; the slot stops counting for conflicts immediately"""
        async def work() -> TimetableSlot:
            slot = await self._get_active_slot(tenant_id, slot_id, lock=True)
            slot.is_active = False
            slot.is_deleted = True
            return slot

        slot = await self.run_in_transaction(work, "delete_slot")
        logger.info(f"Deleted timetable slot {slot_id}")
        return slot

    @monitor_performance("timetable.promote_to_primary")
    async def promote_to_primary(self, tenant_id: UUID, slot_id: UUID) -> TimetableSlot:
        async def work() -> TimetableSlot:
            slot = await self._get_active_slot(tenant_id, slot_id, lock=True)
            await self.primary.promote_to_primary(tenant_id, slot.class_id, slot.id)
            return await self.reload(slot)

        return await self.run_in_transaction(work, "promote_to_primary")

    # READS

    async def get_slot(self, tenant_id: UUID, slot_id: UUID) -> TimetableSlot:
        return await self._get_active_slot(tenant_id, slot_id)

    @monitor_performance("timetable.list_slots")
    async def list_slots(
        self,
        tenant_id: UUID,
        class_id: Optional[UUID] = None,
        teacher_id: Optional[UUID] = None,
        day_of_week: Optional[Any] = None
    ) -> List[TimetableSlot]:
        stmt = self._ordered_active(tenant_id)
        if class_id:
            stmt = stmt.where(TimetableSlot.class_id == class_id)
        if teacher_id:
            stmt = stmt.where(TimetableSlot.teacher_id == teacher_id)
        if day_of_week:
            stmt = stmt.where(TimetableSlot.day_of_week == parse_day(day_of_week))
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    @monitor_performance("timetable.list_for_teacher")
    async def list_for_teacher(
        self,
        tenant_id: UUID,
        teacher_id: UUID,
        day_of_week: Optional[Any] = None
    ) -> Tuple[Teacher, List[TimetableSlot]]:
        """Weekly grid of one teacher, optionally narrowed to a single day"""
        teacher = await self.store.get_teacher(teacher_id, tenant_id)
        slots = await self.list_slots(tenant_id, teacher_id=teacher.id, day_of_week=day_of_week)
        return teacher, slots

    @monitor_performance("timetable.list_for_class")
    async def list_for_class(self, tenant_id: UUID, class_id: UUID) -> Tuple[ClassModel, List[TimetableSlot]]:
        class_ = await self.store.get_class(class_id, tenant_id)
        slots = await self.list_slots(tenant_id, class_id=class_.id)
        return class_, slots

    @monitor_performance("timetable.check_conflict")
    async def check_conflict(
        self,
        tenant_id: UUID,
        teacher_id: UUID,
        day_of_week: Any,
        start_time: Any,
        end_time: Any,
        exclude_id: Optional[UUID] = None
    ) -> ConflictCheckResult:
        """Dry run of the teacher-overlap rule create/update enforce. Reserves nothing."""
        time_range = build_time_range(start_time, end_time)
        day = parse_day(day_of_week)
        teacher = await self.store.get_teacher(teacher_id, tenant_id)

        candidate = SlotCandidate(
            tenant_id=tenant_id,
            teacher_id=teacher.id,
            day_of_week=day,
            time_range=time_range,
        )
        conflicts = await self.detector.find_conflicts(candidate, exclude_id=exclude_id)
        return ConflictCheckResult(has_conflict=bool(conflicts), conflicts=conflicts)
