"""Locations, academic events, certificates and skill attempts

Revision ID: 20261019_0002
Revises: 20261019_0001
Create Date: 2026-10-19 14:10:00
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "20261019_0002"
down_revision: Union[str, None] = "20261019_0001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


event_status_enum = sa.Enum("active", "inactive", name="event_status_enum", native_enum=False)
assessment_status_enum = sa.Enum("draft", "submitted", name="assessment_status_enum", native_enum=False)
certificate_status_enum = sa.Enum("pending", "completed", "failed", name="certificate_status_enum", native_enum=False)
attempt_status_enum = sa.Enum("draft", "submitted", name="attempt_status_enum", native_enum=False)


def _id_col() -> sa.Column:
    return sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False)


def _created_col() -> sa.Column:
    return sa.Column("created_at", sa.DateTime(timezone=True), nullable=False)


def _updated_col() -> sa.Column:
    return sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False)


def upgrade() -> None:
    op.create_table(
        "states",
        _id_col(),
        _created_col(),
        _updated_col(),
        sa.Column("name", sa.String(length=128), nullable=False),
        sa.UniqueConstraint("name", name="uq_states_name"),
    )

    op.add_column("centers", sa.Column("state_id", postgresql.UUID(as_uuid=True), nullable=True))
    op.create_foreign_key("fk_centers_state_id_states", "centers", "states", ["state_id"], ["id"], ondelete="SET NULL")
    op.create_index("ix_centers_state_id", "centers", ["state_id"], unique=False)

    op.add_column("students", sa.Column("state_id", postgresql.UUID(as_uuid=True), nullable=True))
    op.create_foreign_key("fk_students_state_id_states", "students", "states", ["state_id"], ["id"], ondelete="SET NULL")
    op.create_index("ix_students_state_id", "students", ["state_id"], unique=False)

    op.create_table(
        "academic_events",
        _id_col(),
        _created_col(),
        _updated_col(),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("event_type", sa.String(length=64), nullable=True),
        sa.Column("event_start_date", sa.Date(), nullable=False),
        sa.Column("event_end_date", sa.Date(), nullable=True),
        sa.Column("event_start_time", sa.Time(), nullable=True),
        sa.Column("event_end_time", sa.Time(), nullable=True),
        sa.Column("status", event_status_enum, nullable=False),
    )
    op.create_index("ix_academic_events_event_start_date", "academic_events", ["event_start_date"], unique=False)
    op.create_index("ix_academic_events_status", "academic_events", ["status"], unique=False)

    op.create_table(
        "assessment_marks",
        _id_col(),
        _created_col(),
        _updated_col(),
        sa.Column("student_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("batch_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("marks", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column("total_marks", sa.Numeric(precision=6, scale=2), nullable=True),
        sa.Column("max_marks", sa.Numeric(precision=6, scale=2), nullable=True),
        sa.Column("grade", sa.String(length=16), nullable=True),
        sa.Column("remarks", sa.Text(), nullable=True),
        sa.Column("status", assessment_status_enum, nullable=False),
        sa.ForeignKeyConstraint(["student_id"], ["students.id"], name="fk_assessment_marks_student_id_students", ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["batch_id"], ["batches.id"], name="fk_assessment_marks_batch_id_batches", ondelete="CASCADE"),
        sa.UniqueConstraint("student_id", "batch_id", name="uq_assessment_marks_student_id"),
    )
    op.create_index("ix_assessment_marks_student_id", "assessment_marks", ["student_id"], unique=False)
    op.create_index("ix_assessment_marks_batch_id", "assessment_marks", ["batch_id"], unique=False)

    op.create_table(
        "generated_certificates",
        _id_col(),
        _created_col(),
        _updated_col(),
        sa.Column("student_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("batch_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("certificate_number", sa.String(length=64), nullable=False),
        sa.Column("certificate_url", sa.String(length=1024), nullable=True),
        sa.Column("status", certificate_status_enum, nullable=False),
        sa.Column("generated_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(
            ["student_id"],
            ["students.id"],
            name="fk_generated_certificates_student_id_students",
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["batch_id"],
            ["batches.id"],
            name="fk_generated_certificates_batch_id_batches",
            ondelete="CASCADE",
        ),
        sa.UniqueConstraint("certificate_number", name="uq_generated_certificates_certificate_number"),
    )
    op.create_index("ix_generated_certificates_student_id", "generated_certificates", ["student_id"], unique=False)
    op.create_index("ix_generated_certificates_batch_id", "generated_certificates", ["batch_id"], unique=False)

    op.create_table(
        "skill_attempts",
        _id_col(),
        _created_col(),
        _updated_col(),
        sa.Column("student_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("content_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("batch_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("media_url", sa.String(length=1024), nullable=False),
        sa.Column("status", attempt_status_enum, nullable=False),
        sa.Column("submitted_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("feedback", sa.Text(), nullable=True),
        sa.Column("marks", sa.Integer(), nullable=True),
        sa.Column("reviewed_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["student_id"], ["students.id"], name="fk_skill_attempts_student_id_students", ondelete="CASCADE"),
        sa.ForeignKeyConstraint(
            ["content_id"],
            ["skill_contents.id"],
            name="fk_skill_attempts_content_id_skill_contents",
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(["batch_id"], ["batches.id"], name="fk_skill_attempts_batch_id_batches", ondelete="CASCADE"),
    )
    op.create_index("ix_skill_attempts_student_id", "skill_attempts", ["student_id"], unique=False)
    op.create_index("ix_skill_attempts_content_id", "skill_attempts", ["content_id"], unique=False)
    # Enum columns store member names.
    op.create_index(
        "uq_skill_attempts_submitted",
        "skill_attempts",
        ["student_id", "content_id"],
        unique=True,
        postgresql_where=sa.text("status = 'SUBMITTED'"),
    )


def downgrade() -> None:
    op.drop_index("uq_skill_attempts_submitted", table_name="skill_attempts")
    op.drop_index("ix_skill_attempts_content_id", table_name="skill_attempts")
    op.drop_index("ix_skill_attempts_student_id", table_name="skill_attempts")
    op.drop_table("skill_attempts")

    op.drop_index("ix_generated_certificates_batch_id", table_name="generated_certificates")
    op.drop_index("ix_generated_certificates_student_id", table_name="generated_certificates")
    op.drop_table("generated_certificates")

    op.drop_index("ix_assessment_marks_batch_id", table_name="assessment_marks")
    op.drop_index("ix_assessment_marks_student_id", table_name="assessment_marks")
    op.drop_table("assessment_marks")

    op.drop_index("ix_academic_events_status", table_name="academic_events")
    op.drop_index("ix_academic_events_event_start_date", table_name="academic_events")
    op.drop_table("academic_events")

    op.drop_index("ix_students_state_id", table_name="students")
    op.drop_constraint("fk_students_state_id_states", "students", type_="foreignkey")
    op.drop_column("students", "state_id")

    op.drop_index("ix_centers_state_id", table_name="centers")
    op.drop_constraint("fk_centers_state_id_states", "centers", type_="foreignkey")
    op.drop_column("centers", "state_id")

    op.drop_table("states")
