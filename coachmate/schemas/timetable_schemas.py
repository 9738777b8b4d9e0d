# coachmate/schemas/timetable_schemas.py
from typing import List, Optional
from datetime import datetime
from uuid import UUID
from pydantic import BaseModel, Field

from ..models.tenant_specific.timetable import DayOfWeek, TimetableSlot
from ..services.scheduling.interval import format_hhmm

TIME_PATTERN = r"^([01]\d|2[0-3]):([0-5]\d)$"


class TimetableSlotCreate(BaseModel):
    class_id: UUID
    subject_id: UUID
    teacher_id: UUID
    day_of_week: DayOfWeek
    start_time: str = Field(..., pattern=TIME_PATTERN, examples=["09:00"])
    end_time: str = Field(..., pattern=TIME_PATTERN, examples=["10:00"])
    room: Optional[str] = Field(default=None, max_length=50)
    is_primary: bool = Field(default=True)


class TimetableSlotUpdate(BaseModel):
    class_id: Optional[UUID] = None
    subject_id: Optional[UUID] = None
    teacher_id: Optional[UUID] = None
    day_of_week: Optional[DayOfWeek] = None
    start_time: Optional[str] = Field(default=None, pattern=TIME_PATTERN)
    end_time: Optional[str] = Field(default=None, pattern=TIME_PATTERN)
    room: Optional[str] = Field(default=None, max_length=50)
    is_primary: Optional[bool] = None


class TimetableSlotResponse(BaseModel):
    id: UUID
    tenant_id: UUID
    class_id: UUID
    class_name: Optional[str] = None
    subject_id: UUID
    subject_name: Optional[str] = None
    subject_code: Optional[str] = None
    teacher_id: UUID
    teacher_name: Optional[str] = None
    assignment_id: Optional[UUID] = None
    day_of_week: DayOfWeek
    start_time: str
    end_time: str
    room: Optional[str] = None
    is_primary: bool
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_slot(cls, slot: TimetableSlot) -> "TimetableSlotResponse":
        return cls(
            id=slot.id,
            tenant_id=slot.tenant_id,
            class_id=slot.class_id,
            class_name=slot.class_ref.class_name if slot.class_ref else None,
            subject_id=slot.subject_id,
            subject_name=slot.subject.subject_name if slot.subject else None,
            subject_code=slot.subject.subject_code if slot.subject else None,
            teacher_id=slot.teacher_id,
            teacher_name=slot.teacher.full_name if slot.teacher else None,
            assignment_id=slot.assignment_id,
            day_of_week=slot.day_of_week,
            start_time=format_hhmm(slot.start_time),
            end_time=format_hhmm(slot.end_time),
            room=slot.room,
            is_primary=slot.is_primary,
            is_active=slot.is_active,
            created_at=slot.created_at,
            updated_at=slot.updated_at,
        )


class ClassSchedule(BaseModel):
    class_id: UUID
    class_name: str
    slots: List[TimetableSlotResponse]


class TeacherSchedule(BaseModel):
    teacher_id: UUID
    teacher_name: str
    day_of_week: Optional[DayOfWeek] = None
    slots: List[TimetableSlotResponse]


class ConflictCheckRequest(BaseModel):
    teacher_id: UUID
    day_of_week: DayOfWeek
    start_time: str = Field(..., pattern=TIME_PATTERN)
    end_time: str = Field(..., pattern=TIME_PATTERN)
    exclude_id: Optional[UUID] = None


class ConflictEntry(BaseModel):
    id: UUID
    class_id: UUID
    class_name: Optional[str] = None
    subject_id: UUID
    day_of_week: DayOfWeek
    start_time: str
    end_time: str
    room: Optional[str] = None


class ConflictCheckResponse(BaseModel):
    has_conflict: bool
    conflicts: List[ConflictEntry]
