# coachmate/services/scheduling/entity_store.py
from typing import Dict, Optional
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from ...core.exceptions import NotFound
from ...models.tenant_specific.class_model import ClassModel
from ...models.tenant_specific.subject import Subject
from ...models.tenant_specific.teacher import Teacher, TeacherSubject


class EntityStore:
    """Tenant-scoped lookups of the classes, subjects and teachers owned by the CRUD layer.

    A row that exists under another tenant is reported exactly like a missing
    one, so callers cannot probe foreign ids.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_class(self, class_id: UUID, tenant_id: UUID, lock: bool = False) -> Optional[ClassModel]:
        stmt = select(ClassModel).where(
            ClassModel.id == class_id,
            ClassModel.tenant_id == tenant_id,
            ClassModel.is_deleted == False
        )
        if lock:
            stmt = stmt.with_for_update()
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_class(self, class_id: UUID, tenant_id: UUID, lock: bool = False) -> ClassModel:
        class_ = await self.find_class(class_id, tenant_id, lock=lock)
        if not class_:
            raise NotFound("Class")
        return class_

    async def get_subject(self, subject_id: UUID, tenant_id: UUID) -> Subject:
        stmt = select(Subject).where(
            Subject.id == subject_id,
            Subject.tenant_id == tenant_id,
            Subject.is_deleted == False
        )
        result = await self.db.execute(stmt)
        subject = result.scalar_one_or_none()
        if not subject:
            raise NotFound("Subject")
        return subject

    async def get_teacher(
        self,
        teacher_id: UUID,
        tenant_id: UUID,
        lock: bool = False,
        active_only: bool = False
    ) -> Teacher:
        """Fetch a teacher; lock=True serialises writers on that teacher's schedule."""
        stmt = select(Teacher).where(
            Teacher.id == teacher_id,
            Teacher.tenant_id == tenant_id,
            Teacher.is_deleted == False
        )
        if active_only:
            stmt = stmt.where(Teacher.is_active == True)
        if lock:
            stmt = stmt.with_for_update()
        result = await self.db.execute(stmt)
        teacher = result.scalar_one_or_none()
        if not teacher:
            raise NotFound("Teacher", "Teacher not found or inactive" if active_only else None)
        return teacher

    async def get_qualified_subjects(self, teacher_id: UUID) -> Dict[UUID, str]:
        """subject id -> subject name for every subject the teacher is qualified for"""
        stmt = (
            select(Subject.id, Subject.subject_name)
            .join(TeacherSubject, TeacherSubject.subject_id == Subject.id)
            .where(
                TeacherSubject.teacher_id == teacher_id,
                TeacherSubject.is_deleted == False,
                Subject.is_deleted == False
            )
        )
        result = await self.db.execute(stmt)
        return {row.id: row.subject_name for row in result.all()}
