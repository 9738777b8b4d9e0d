# coachmate/models/tenant_specific/timetable.py
from sqlalchemy import Column, String, Boolean, ForeignKey, Time, Enum, Uuid, Index, CheckConstraint, text
from sqlalchemy.orm import relationship
from ..base import Base
import enum


class DayOfWeek(enum.Enum):
    MONDAY = "MONDAY"
    TUESDAY = "TUESDAY"
    WEDNESDAY = "WEDNESDAY"
    THURSDAY = "THURSDAY"
    FRIDAY = "FRIDAY"
    SATURDAY = "SATURDAY"
    SUNDAY = "SUNDAY"

    @property
    def sort_order(self) -> int:
        return list(DayOfWeek).index(self)


class TimetableSlot(Base):
    """A subject taught by a teacher to a class at a weekly time range."""
    __tablename__ = "timetable_slots"

    # Foreign Keys
    tenant_id = Column(Uuid(as_uuid=True), ForeignKey("tenants.id"), nullable=False, index=True)
    class_id = Column(Uuid(as_uuid=True), ForeignKey("classes.id"), nullable=False, index=True)
    subject_id = Column(Uuid(as_uuid=True), ForeignKey("subjects.id"), nullable=False, index=True)
    teacher_id = Column(Uuid(as_uuid=True), ForeignKey("teachers.id"), nullable=False, index=True)
    assignment_id = Column(Uuid(as_uuid=True), ForeignKey("teacher_class_assignments.id"), nullable=True)

    # Schedule Information
    day_of_week = Column(Enum(DayOfWeek, name="day_of_week"), nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    room = Column(String(50))

    # Status
    is_primary = Column(Boolean, default=False, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)

    __table_args__ = (
        CheckConstraint("start_time < end_time", name="ck_timetable_slot_time_range"),
        Index("ix_timetable_slot_teacher_day", "tenant_id", "teacher_id", "day_of_week"),
        Index(
            "uq_timetable_slot_identity",
            "class_id", "subject_id", "teacher_id", "day_of_week", "start_time",
            unique=True,
            postgresql_where=text("is_active"),
            sqlite_where=text("is_active = 1"),
        ),
        Index(
            "uq_timetable_slot_primary_per_class",
            "class_id",
            unique=True,
            postgresql_where=text("is_primary AND is_active"),
            sqlite_where=text("is_primary = 1 AND is_active = 1"),
        ),
    )

    # Relationships
    class_ref = relationship("ClassModel", lazy="selectin")
    subject = relationship("Subject", lazy="selectin")
    teacher = relationship("Teacher", lazy="selectin")
