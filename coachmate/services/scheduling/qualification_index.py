# coachmate/services/scheduling/qualification_index.py
from typing import Dict
from uuid import UUID

from ...core.exceptions import QualificationError
from ...models.tenant_specific.subject import Subject
from ...models.tenant_specific.teacher import Teacher
from .entity_store import EntityStore


class QualificationIndex:
    """Read-only teacher -> qualified subjects view, memoised for one request."""

    def __init__(self, store: EntityStore):
        self.store = store
        self._subjects: Dict[UUID, Dict[UUID, str]] = {}

    async def _load(self, teacher_id: UUID) -> Dict[UUID, str]:
        if teacher_id not in self._subjects:
            self._subjects[teacher_id] = await self.store.get_qualified_subjects(teacher_id)
        return self._subjects[teacher_id]

    def clear(self):
        self._subjects = {}

    async def is_qualified(self, teacher_id: UUID, subject_id: UUID) -> bool:
        return subject_id in await self._load(teacher_id)

    async def ensure_qualified(self, teacher: Teacher, subject: Subject) -> None:
        if await self.is_qualified(teacher.id, subject.id):
            return
        subjects = await self._load(teacher.id)
        raise QualificationError(teacher.id, subject.id, sorted(subjects.values()))
