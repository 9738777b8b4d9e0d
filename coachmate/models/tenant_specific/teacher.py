# coachmate/models/tenant_specific/teacher.py
from sqlalchemy import Column, String, Boolean, ForeignKey, Uuid, UniqueConstraint
from ..base import Base

class Teacher(Base):
    __tablename__ = "teachers"

    # Foreign Keys
    tenant_id = Column(Uuid(as_uuid=True), ForeignKey("tenants.id"), nullable=False, index=True)

    # Basic Information
    employee_id = Column(String(20), index=True)
    first_name = Column(String(50), nullable=False)
    last_name = Column(String(50), nullable=False)
    email = Column(String(100), index=True)
    phone = Column(String(20))

    # Status
    is_active = Column(Boolean, default=True, nullable=False)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class TeacherSubject(Base):
    """Qualification: the teacher may teach the subject."""
    __tablename__ = "teacher_subjects"

    tenant_id = Column(Uuid(as_uuid=True), ForeignKey("tenants.id"), nullable=False, index=True)
    teacher_id = Column(Uuid(as_uuid=True), ForeignKey("teachers.id"), nullable=False, index=True)
    subject_id = Column(Uuid(as_uuid=True), ForeignKey("subjects.id"), nullable=False, index=True)

    __table_args__ = (
        UniqueConstraint("teacher_id", "subject_id", name="uq_teacher_subject"),
    )
