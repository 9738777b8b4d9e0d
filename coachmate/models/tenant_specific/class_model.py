# coachmate/models/tenant_specific/class_model.py
from sqlalchemy import Column, String, ForeignKey, Boolean, Uuid, UniqueConstraint
from ..base import Base


class ClassModel(Base):
    __tablename__ = "classes"

    # Foreign Keys
    tenant_id = Column(Uuid(as_uuid=True), ForeignKey("tenants.id"), nullable=False, index=True)

    # Class Information
    class_name = Column(String(100), nullable=False, index=True)
    section = Column(String(10))
    academic_year = Column(String(10))
    classroom = Column(String(50))
    is_active = Column(Boolean, default=True, nullable=False)

    __table_args__ = (
        UniqueConstraint("tenant_id", "class_name", "section", "academic_year", name="uq_class_identity"),
    )
