# coachmate/models/__init__.py
"""Import all models here so Alembic and metadata.create_all see every table."""
from .base import Base

# Shared models
from .shared.tenant import Tenant

# Tenant-specific models
from .tenant_specific.class_model import ClassModel
from .tenant_specific.subject import Subject
from .tenant_specific.teacher import Teacher, TeacherSubject
from .tenant_specific.teacher_assignment import TeacherClassAssignment
from .tenant_specific.timetable import DayOfWeek, TimetableSlot

__all__ = [
    "Base",
    "Tenant",
    "ClassModel",
    "Subject",
    "Teacher",
    "TeacherSubject",
    "TeacherClassAssignment",
    "DayOfWeek",
    "TimetableSlot",
]
