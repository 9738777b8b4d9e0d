# coachmate/models/tenant_specific/subject.py
from sqlalchemy import Column, String, Text, Boolean, ForeignKey, Uuid, UniqueConstraint
from ..base import Base


class Subject(Base):
    __tablename__ = "subjects"

    tenant_id = Column(Uuid(as_uuid=True), ForeignKey("tenants.id"), nullable=False, index=True)

    subject_name = Column(String(100), nullable=False)
    subject_code = Column(String(20), nullable=False)
    description = Column(Text)
    is_active = Column(Boolean, default=True, nullable=False)

    __table_args__ = (
        UniqueConstraint("tenant_id", "subject_code", name="uq_subject_code"),
    )
