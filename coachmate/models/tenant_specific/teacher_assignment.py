# coachmate/models/tenant_specific/teacher_assignment.py
# Roster fact: a teacher belongs to a class, independent of any weekly time slot
from datetime import datetime, timezone
from sqlalchemy import Column, ForeignKey, Boolean, DateTime, Uuid, Index, text
from sqlalchemy.orm import relationship
from ..base import Base

class TeacherClassAssignment(Base):
    __tablename__ = "teacher_class_assignments"

    # Foreign Keys
    tenant_id = Column(Uuid(as_uuid=True), ForeignKey("tenants.id"), nullable=False, index=True)
    teacher_id = Column(Uuid(as_uuid=True), ForeignKey("teachers.id"), nullable=False, index=True)
    class_id = Column(Uuid(as_uuid=True), ForeignKey("classes.id"), nullable=False, index=True)

    # Assignment Details
    is_primary = Column(Boolean, default=False, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    assigned_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False)

    __table_args__ = (
        Index(
            "uq_teacher_class_assignment_active",
            "class_id", "teacher_id",
            unique=True,
            postgresql_where=text("is_active"),
            sqlite_where=text("is_active = 1"),
        ),
        Index(
            "uq_teacher_class_assignment_primary",
            "class_id",
            unique=True,
            postgresql_where=text("is_primary AND is_active"),
            sqlite_where=text("is_primary = 1 AND is_active = 1"),
        ),
    )

    # Relationships
    teacher = relationship("Teacher", lazy="selectin")
    class_ref = relationship("ClassModel", lazy="selectin")
