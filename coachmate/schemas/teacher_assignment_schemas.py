# coachmate/schemas/teacher_assignment_schemas.py
from typing import Optional
from datetime import datetime
from uuid import UUID
from pydantic import BaseModel, Field

from ..models.tenant_specific.teacher_assignment import TeacherClassAssignment


class TeacherAssignmentCreate(BaseModel):
    teacher_id: UUID
    is_primary: bool = Field(default=False)
    assigned_at: Optional[datetime] = None


class TeacherAssignmentUpdate(BaseModel):
    is_primary: bool


class TeacherAssignmentResponse(BaseModel):
    id: UUID
    tenant_id: UUID
    class_id: UUID
    class_name: Optional[str] = None
    teacher_id: UUID
    teacher_name: Optional[str] = None
    teacher_email: Optional[str] = None
    is_primary: bool
    is_active: bool
    assigned_at: datetime

    @classmethod
    def from_assignment(cls, assignment: TeacherClassAssignment) -> "TeacherAssignmentResponse":
        teacher = assignment.teacher
        return cls(
            id=assignment.id,
            tenant_id=assignment.tenant_id,
            class_id=assignment.class_id,
            class_name=assignment.class_ref.class_name if assignment.class_ref else None,
            teacher_id=assignment.teacher_id,
            teacher_name=teacher.full_name if teacher else None,
            teacher_email=teacher.email if teacher else None,
            is_primary=assignment.is_primary,
            is_active=assignment.is_active,
            assigned_at=assignment.assigned_at,
        )
