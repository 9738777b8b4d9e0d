"""create scheduling tables

Revision ID: 5b1e07c9d2a4
Revises:
Create Date: 2026-10-18 09:12:40.518203

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '5b1e07c9d2a4'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

DAYS = ("MONDAY", "TUESDAY", "WEDNESDAY", "THURSDAY", "FRIDAY", "SATURDAY", "SUNDAY")


def _base_columns():
    return [
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("is_deleted", sa.Boolean(), nullable=False, server_default=sa.false()),
    ]


def _base_indexes(table: str):
    op.create_index(f"ix_{table}_id", table, ["id"])
    op.create_index(f"ix_{table}_created_at", table, ["created_at"])
    op.create_index(f"ix_{table}_is_deleted", table, ["is_deleted"])


def upgrade() -> None:
    op.create_table(
        "tenants",
        *_base_columns(),
        sa.Column("institute_code", sa.String(20), nullable=False),
        sa.Column("institute_name", sa.String(200), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
    )
    _base_indexes("tenants")
    op.create_index("ix_tenants_institute_code", "tenants", ["institute_code"], unique=True)

    op.create_table(
        "classes",
        *_base_columns(),
        sa.Column("tenant_id", sa.Uuid(), sa.ForeignKey("tenants.id"), nullable=False),
        sa.Column("class_name", sa.String(100), nullable=False),
        sa.Column("section", sa.String(10)),
        sa.Column("academic_year", sa.String(10)),
        sa.Column("classroom", sa.String(50)),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.UniqueConstraint("tenant_id", "class_name", "section", "academic_year", name="uq_class_identity"),
    )
    _base_indexes("classes")
    op.create_index("ix_classes_tenant_id", "classes", ["tenant_id"])
    op.create_index("ix_classes_class_name", "classes", ["class_name"])

    op.create_table(
        "subjects",
        *_base_columns(),
        sa.Column("tenant_id", sa.Uuid(), sa.ForeignKey("tenants.id"), nullable=False),
        sa.Column("subject_name", sa.String(100), nullable=False),
        sa.Column("subject_code", sa.String(20), nullable=False),
        sa.Column("description", sa.Text()),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.UniqueConstraint("tenant_id", "subject_code", name="uq_subject_code"),
    )
    _base_indexes("subjects")
    op.create_index("ix_subjects_tenant_id", "subjects", ["tenant_id"])

    op.create_table(
        "teachers",
        *_base_columns(),
        sa.Column("tenant_id", sa.Uuid(), sa.ForeignKey("tenants.id"), nullable=False),
        sa.Column("employee_id", sa.String(20)),
        sa.Column("first_name", sa.String(50), nullable=False),
        sa.Column("last_name", sa.String(50), nullable=False),
        sa.Column("email", sa.String(100)),
        sa.Column("phone", sa.String(20)),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
    )
    _base_indexes("teachers")
    op.create_index("ix_teachers_tenant_id", "teachers", ["tenant_id"])
    op.create_index("ix_teachers_employee_id", "teachers", ["employee_id"])
    op.create_index("ix_teachers_email", "teachers", ["email"])

    op.create_table(
        "teacher_subjects",
        *_base_columns(),
        sa.Column("tenant_id", sa.Uuid(), sa.ForeignKey("tenants.id"), nullable=False),
        sa.Column("teacher_id", sa.Uuid(), sa.ForeignKey("teachers.id"), nullable=False),
        sa.Column("subject_id", sa.Uuid(), sa.ForeignKey("subjects.id"), nullable=False),
        sa.UniqueConstraint("teacher_id", "subject_id", name="uq_teacher_subject"),
    )
    _base_indexes("teacher_subjects")
    for column in ("tenant_id", "teacher_id", "subject_id"):
        op.create_index(f"ix_teacher_subjects_{column}", "teacher_subjects", [column])

    op.create_table(
        "teacher_class_assignments",
        *_base_columns(),
        sa.Column("tenant_id", sa.Uuid(), sa.ForeignKey("tenants.id"), nullable=False),
        sa.Column("teacher_id", sa.Uuid(), sa.ForeignKey("teachers.id"), nullable=False),
        sa.Column("class_id", sa.Uuid(), sa.ForeignKey("classes.id"), nullable=False),
        sa.Column("is_primary", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("assigned_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    _base_indexes("teacher_class_assignments")
    for column in ("tenant_id", "teacher_id", "class_id"):
        op.create_index(f"ix_teacher_class_assignments_{column}", "teacher_class_assignments", [column])
    op.create_index(
        "uq_teacher_class_assignment_active",
        "teacher_class_assignments",
        ["class_id", "teacher_id"],
        unique=True,
        postgresql_where=sa.text("is_active"),
        sqlite_where=sa.text("is_active = 1"),
    )
    op.create_index(
        "uq_teacher_class_assignment_primary",
        "teacher_class_assignments",
        ["class_id"],
        unique=True,
        postgresql_where=sa.text("is_primary AND is_active"),
        sqlite_where=sa.text("is_primary = 1 AND is_active = 1"),
    )

    op.create_table(
        "timetable_slots",
        *_base_columns(),
        sa.Column("tenant_id", sa.Uuid(), sa.ForeignKey("tenants.id"), nullable=False),
        sa.Column("class_id", sa.Uuid(), sa.ForeignKey("classes.id"), nullable=False),
        sa.Column("subject_id", sa.Uuid(), sa.ForeignKey("subjects.id"), nullable=False),
        sa.Column("teacher_id", sa.Uuid(), sa.ForeignKey("teachers.id"), nullable=False),
        sa.Column("assignment_id", sa.Uuid(), sa.ForeignKey("teacher_class_assignments.id"), nullable=True),
        sa.Column("day_of_week", sa.Enum(*DAYS, name="day_of_week"), nullable=False),
        sa.Column("start_time", sa.Time(), nullable=False),
        sa.Column("end_time", sa.Time(), nullable=False),
        sa.Column("room", sa.String(50)),
        sa.Column("is_primary", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.CheckConstraint("start_time < end_time", name="ck_timetable_slot_time_range"),
    )
    _base_indexes("timetable_slots")
    for column in ("tenant_id", "class_id", "subject_id", "teacher_id"):
        op.create_index(f"ix_timetable_slots_{column}", "timetable_slots", [column])
    op.create_index("ix_timetable_slot_teacher_day", "timetable_slots", ["tenant_id", "teacher_id", "day_of_week"])
    op.create_index(
        "uq_timetable_slot_identity",
        "timetable_slots",
        ["class_id", "subject_id", "teacher_id", "day_of_week", "start_time"],
        unique=True,
        postgresql_where=sa.text("is_active"),
        sqlite_where=sa.text("is_active = 1"),
    )
    op.create_index(
        "uq_timetable_slot_primary_per_class",
        "timetable_slots",
        ["class_id"],
        unique=True,
        postgresql_where=sa.text("is_primary AND is_active"),
        sqlite_where=sa.text("is_primary = 1 AND is_active = 1"),
    )


def downgrade() -> None:
    op.drop_table("timetable_slots")
    op.drop_table("teacher_class_assignments")
    op.drop_table("teacher_subjects")
    op.drop_table("teachers")
    op.drop_table("subjects")
    op.drop_table("classes")
    op.drop_table("tenants")
    sa.Enum(name="day_of_week").drop(op.get_bind(), checkfirst=True)
