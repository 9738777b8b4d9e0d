# coachmate/services/teacher_assignment_service.py
from typing import Any, Dict, List, Optional
from uuid import UUID
from datetime import datetime, timezone
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update
import logging

from .base_service import TenantScopedService
from .scheduling import EntityStore, PrimaryInvariantEnforcer
from ..core.exceptions import DuplicateAssignment, NotFound
from ..core.performance_monitor import monitor_performance
from ..models.tenant_specific.teacher_assignment import TeacherClassAssignment
from ..models.tenant_specific.timetable import TimetableSlot

logger = logging.getLogger(__name__)


class TeacherAssignmentService(TenantScopedService[TeacherClassAssignment]):
    """Class roster: which teachers belong to a class and which one is primary.

    Carries no day or time, so nothing here is checked for qualification or
    schedule conflicts.
    """

    def __init__(self, db: AsyncSession):
        super().__init__(TeacherClassAssignment, db)
        self.store = EntityStore(db)
        self.primary = PrimaryInvariantEnforcer(db, TeacherClassAssignment)

    async def _find_active(self, tenant_id: UUID, class_id: UUID, teacher_id: UUID) -> Optional[TeacherClassAssignment]:
        query = select(self.model).where(
            self.model.tenant_id == tenant_id,
            self.model.class_id == class_id,
            self.model.teacher_id == teacher_id,
            self.model.is_active == True,
            self.model.is_deleted == False
        )
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def _get_active(self, tenant_id: UUID, class_id: UUID, teacher_id: UUID) -> TeacherClassAssignment:
        assignment = await self._find_active(tenant_id, class_id, teacher_id)
        if not assignment:
            raise NotFound("Teacher assignment")
        return assignment

    async def _link_slots(self, tenant_id: UUID, class_id: UUID, teacher_id: UUID, assignment_id: Optional[UUID]):
        """Point the active slots of (class, teacher) at the roster row, or detach them"""
        stmt = (
            update(TimetableSlot)
            .where(
                TimetableSlot.tenant_id == tenant_id,
                TimetableSlot.class_id == class_id,
                TimetableSlot.teacher_id == teacher_id,
                TimetableSlot.is_active == True
            )
            .values(assignment_id=assignment_id)
            .execution_options(synchronize_session="evaluate")
        )
        await self.db.execute(stmt)

    async def list_for_class(self, tenant_id: UUID, class_id: UUID) -> List[TeacherClassAssignment]:
        """Active roster of a class, primary teacher first"""
        class_ = await self.store.get_class(class_id, tenant_id)
        query = select(self.model).where(
            self.model.tenant_id == tenant_id,
            self.model.class_id == class_.id,
            self.model.is_active == True,
            self.model.is_deleted == False
        ).order_by(self.model.is_primary.desc(), self.model.assigned_at)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    @monitor_performance("assignment.assign")
    async def assign(self, tenant_id: UUID, class_id: UUID, data: Dict[str, Any]) -> TeacherClassAssignment:
        teacher_id = data["teacher_id"]

        async def work() -> TeacherClassAssignment:
            class_ = await self.store.get_class(class_id, tenant_id, lock=True)
            teacher = await self.store.get_teacher(teacher_id, tenant_id, active_only=True)

            existing = await self._find_active(tenant_id, class_.id, teacher.id)
            if existing:
                raise DuplicateAssignment("Teacher is already assigned to this class", existing_id=existing.id)

            assignment = TeacherClassAssignment(
                tenant_id=tenant_id,
                class_id=class_.id,
                teacher_id=teacher.id,
                is_primary=False,
                is_active=True,
                assigned_at=data.get("assigned_at") or datetime.now(timezone.utc),
            )
            self.db.add(assignment)
            await self.db.flush()

            if data.get("is_primary"):
                await self.primary.promote_to_primary(tenant_id, class_.id, assignment.id)
            await self._link_slots(tenant_id, class_.id, teacher.id, assignment.id)

            return await self.reload(assignment)

        assignment = await self.run_in_transaction(work, "assign_teacher")
        logger.info(f"Assigned teacher {teacher_id} to class {class_id} (primary={assignment.is_primary})")
        return assignment

    @monitor_performance("assignment.update")
    async def update(self, tenant_id: UUID, class_id: UUID, teacher_id: UUID, data: Dict[str, Any]) -> TeacherClassAssignment:
        async def work() -> TeacherClassAssignment:
            await self.store.get_class(class_id, tenant_id)
            assignment = await self._get_active(tenant_id, class_id, teacher_id)
            if data.get("is_primary"):
                await self.primary.promote_to_primary(tenant_id, class_id, assignment.id)
            elif data.get("is_primary") is False:
                await self.primary.demote(tenant_id, assignment.id)
            return await self.reload(assignment)

        return await self.run_in_transaction(work, "update_assignment")

    @monitor_performance("assignment.remove")
    async def remove(self, tenant_id: UUID, class_id: UUID, teacher_id: UUID) -> TeacherClassAssignment:
        """Soft delete the roster row; timetable slots of the pair stay but lose the link"""
        async def work() -> TeacherClassAssignment:
            await self.store.get_class(class_id, tenant_id)
            assignment = await self._get_active(tenant_id, class_id, teacher_id)
            assignment.is_active = False
            assignment.is_primary = False
            assignment.is_deleted = True
            await self.db.flush()
            await self._link_slots(tenant_id, class_id, teacher_id, None)
            return assignment

        assignment = await self.run_in_transaction(work, "remove_assignment")
        logger.info(f"Removed teacher {teacher_id} from class {class_id}")
        return assignment
