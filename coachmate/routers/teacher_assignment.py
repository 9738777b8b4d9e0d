# coachmate/routers/teacher_assignment.py
from typing import List
from uuid import UUID
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.cache import invalidate_schedule_cache
from ..core.database import get_db
from ..core.tenant_context import TenantContext, get_tenant_context, require_admin
from ..schemas.teacher_assignment_schemas import (
    TeacherAssignmentCreate, TeacherAssignmentResponse, TeacherAssignmentUpdate
)
from ..services.teacher_assignment_service import TeacherAssignmentService

router = APIRouter(prefix="/classes/{class_id}/teachers", tags=["Teacher Assignments"])


@router.get("/", response_model=List[TeacherAssignmentResponse])
async def get_class_teachers(
    class_id: UUID,
    context: TenantContext = Depends(get_tenant_context),
    db: AsyncSession = Depends(get_db)
):
    service = TeacherAssignmentService(db)
    assignments = await service.list_for_class(context.tenant_id, class_id)
    return [TeacherAssignmentResponse.from_assignment(a) for a in assignments]


@router.post("/", response_model=TeacherAssignmentResponse, status_code=status.HTTP_201_CREATED)
async def assign_teacher(
    class_id: UUID,
    assignment: TeacherAssignmentCreate,
    context: TenantContext = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    service = TeacherAssignmentService(db)
    db_assignment = await service.assign(context.tenant_id, class_id, assignment.model_dump())
    await invalidate_schedule_cache(context.tenant_id, [class_id], [db_assignment.teacher_id])
    return TeacherAssignmentResponse.from_assignment(db_assignment)


@router.put("/{teacher_id}", response_model=TeacherAssignmentResponse)
async def update_teacher_assignment(
    class_id: UUID,
    teacher_id: UUID,
    assignment: TeacherAssignmentUpdate,
    context: TenantContext = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    service = TeacherAssignmentService(db)
    db_assignment = await service.update(
        context.tenant_id, class_id, teacher_id, assignment.model_dump(exclude_unset=True)
    )
    await invalidate_schedule_cache(context.tenant_id, [class_id], [teacher_id])
    return TeacherAssignmentResponse.from_assignment(db_assignment)


@router.delete("/{teacher_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_teacher_assignment(
    class_id: UUID,
    teacher_id: UUID,
    context: TenantContext = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    service = TeacherAssignmentService(db)
    await service.remove(context.tenant_id, class_id, teacher_id)
    await invalidate_schedule_cache(context.tenant_id, [class_id], [teacher_id])
