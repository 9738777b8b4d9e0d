# coachmate/routers/timetable.py
from typing import List, Optional
from uuid import UUID
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.cache import cache_manager, class_schedule_key, teacher_schedule_key, invalidate_schedule_cache
from ..core.config import settings
from ..core.database import get_db
from ..core.tenant_context import TenantContext, get_tenant_context, require_admin
from ..models.tenant_specific.timetable import DayOfWeek
from ..schemas.timetable_schemas import (
    ClassSchedule, ConflictCheckRequest, ConflictCheckResponse, ConflictEntry,
    TeacherSchedule, TimetableSlotCreate, TimetableSlotResponse, TimetableSlotUpdate
)
from ..services.scheduling import describe_conflict
from ..services.timetable_service import TimetableService

router = APIRouter(prefix="/timetable", tags=["Timetable"])


@router.get("/", response_model=List[TimetableSlotResponse])
async def list_timetable(
    class_id: Optional[UUID] = Query(None),
    teacher_id: Optional[UUID] = Query(None),
    day_of_week: Optional[DayOfWeek] = Query(None),
    context: TenantContext = Depends(get_tenant_context),
    db: AsyncSession = Depends(get_db)
):
    service = TimetableService(db)
    slots = await service.list_slots(context.tenant_id, class_id, teacher_id, day_of_week)
    return [TimetableSlotResponse.from_slot(slot) for slot in slots]


@router.post("/", response_model=TimetableSlotResponse, status_code=status.HTTP_201_CREATED)
async def create_timetable_entry(
    entry: TimetableSlotCreate,
    context: TenantContext = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    service = TimetableService(db)
    slot = await service.create_slot(context.tenant_id, entry.model_dump())
    await invalidate_schedule_cache(
        context.tenant_id, [slot.class_id], [slot.teacher_id], all_teachers=slot.is_primary
    )
    return TimetableSlotResponse.from_slot(slot)


@router.get("/classes/{class_id}", response_model=ClassSchedule)
async def get_class_timetable(
    class_id: UUID,
    context: TenantContext = Depends(get_tenant_context),
    db: AsyncSession = Depends(get_db)
):
    cache_key = class_schedule_key(context.tenant_id, class_id)
    cached = await cache_manager.get(cache_key)
    if cached:
        return cached

    service = TimetableService(db)
    class_, slots = await service.list_for_class(context.tenant_id, class_id)
    schedule = ClassSchedule(
        class_id=class_.id,
        class_name=class_.class_name,
        slots=[TimetableSlotResponse.from_slot(slot) for slot in slots]
    )
    await cache_manager.set(cache_key, schedule.model_dump(mode="json"), expire=settings.schedule_cache_ttl)
    return schedule


@router.get("/teachers/{teacher_id}", response_model=TeacherSchedule)
async def get_teacher_timetable(
    teacher_id: UUID,
    day_of_week: Optional[DayOfWeek] = Query(None),
    context: TenantContext = Depends(get_tenant_context),
    db: AsyncSession = Depends(get_db)
):
    cache_key = teacher_schedule_key(
        context.tenant_id, teacher_id, day_of_week.value if day_of_week else None
    )
    cached = await cache_manager.get(cache_key)
    if cached:
        return cached

    service = TimetableService(db)
    teacher, slots = await service.list_for_teacher(context.tenant_id, teacher_id, day_of_week)
    schedule = TeacherSchedule(
        teacher_id=teacher.id,
        teacher_name=teacher.full_name,
        day_of_week=day_of_week,
        slots=[TimetableSlotResponse.from_slot(slot) for slot in slots]
    )
    await cache_manager.set(cache_key, schedule.model_dump(mode="json"), expire=settings.schedule_cache_ttl)
    return schedule


@router.post("/conflicts/check", response_model=ConflictCheckResponse)
async def check_timetable_conflict(
    request: ConflictCheckRequest,
    context: TenantContext = Depends(get_tenant_context),
    db: AsyncSession = Depends(get_db)
):
    """Report the slots a proposed teacher time range would collide with. Reserves nothing."""
    service = TimetableService(db)
    result = await service.check_conflict(
        context.tenant_id,
        request.teacher_id,
        request.day_of_week,
        request.start_time,
        request.end_time,
        exclude_id=request.exclude_id
    )
    return ConflictCheckResponse(
        has_conflict=result.has_conflict,
        conflicts=[ConflictEntry(**describe_conflict(slot)) for slot in result.conflicts]
    )


@router.get("/{slot_id}", response_model=TimetableSlotResponse)
async def get_timetable_entry(
    slot_id: UUID,
    context: TenantContext = Depends(get_tenant_context),
    db: AsyncSession = Depends(get_db)
):
    service = TimetableService(db)
    slot = await service.get_slot(context.tenant_id, slot_id)
    return TimetableSlotResponse.from_slot(slot)


@router.put("/{slot_id}", response_model=TimetableSlotResponse)
async def update_timetable_entry(
    slot_id: UUID,
    entry: TimetableSlotUpdate,
    context: TenantContext = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    service = TimetableService(db)
    before = await service.get_slot(context.tenant_id, slot_id)
    old_class_id, old_teacher_id = before.class_id, before.teacher_id

    slot = await service.update_slot(context.tenant_id, slot_id, entry.model_dump(exclude_unset=True))
    await invalidate_schedule_cache(
        context.tenant_id,
        [old_class_id, slot.class_id],
        [old_teacher_id, slot.teacher_id],
        all_teachers=slot.is_primary
    )
    return TimetableSlotResponse.from_slot(slot)


@router.delete("/{slot_id}")
async def delete_timetable_entry(
    slot_id: UUID,
    context: TenantContext = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    service = TimetableService(db)
    slot = await service.delete_slot(context.tenant_id, slot_id)
    await invalidate_schedule_cache(context.tenant_id, [slot.class_id], [slot.teacher_id])
    return {"message": "Timetable entry deleted successfully", "id": str(slot_id)}


@router.post("/{slot_id}/primary", response_model=TimetableSlotResponse)
async def promote_timetable_entry(
    slot_id: UUID,
    context: TenantContext = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    service = TimetableService(db)
    slot = await service.promote_to_primary(context.tenant_id, slot_id)
    await invalidate_schedule_cache(
        context.tenant_id, [slot.class_id], [slot.teacher_id], all_teachers=slot.is_primary
    )
    return TimetableSlotResponse.from_slot(slot)
