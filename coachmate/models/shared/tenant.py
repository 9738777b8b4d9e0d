# coachmate/models/shared/tenant.py
"""Tenant (Institute) model definition."""
from sqlalchemy import Column, String, Boolean
from ..base import Base

class Tenant(Base):
    __tablename__ = "tenants"

    institute_code = Column(String(20), unique=True, nullable=False, index=True)
    institute_name = Column(String(200), nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
