"""Initial schema

Revision ID: 20261019_0001
Revises:
Create Date: 2026-10-19 09:30:00
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "20261019_0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


batch_status_enum = sa.Enum(
    "Pending",
    "Approved",
    "Started",
    "Completed",
    "Cancelled",
    name="batch_status_enum",
    native_enum=False,
)
payment_type_enum = sa.Enum("full", "emi", name="payment_type_enum", native_enum=False)
payment_source_enum = sa.Enum("checkout", "webhook", "manual", "sync", name="payment_source_enum", native_enum=False)
attendance_status_enum = sa.Enum("present", "absent", "late", "excused", name="attendance_status_enum", native_enum=False)
skill_module_enum = sa.Enum("listening", "reading", name="skill_module_enum", native_enum=False)
notification_status_enum = sa.Enum("pending", "sent", "failed", name="notification_status_enum", native_enum=False)
outbox_status_enum = sa.Enum("pending", "processed", "failed", name="outbox_status_enum", native_enum=False)


def _id_col() -> sa.Column:
    return sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False)


def _created_col() -> sa.Column:
    return sa.Column("created_at", sa.DateTime(timezone=True), nullable=False)


def _updated_col() -> sa.Column:
    return sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False)


def upgrade() -> None:
    op.create_table(
        "centers",
        _id_col(),
        _created_col(),
        _updated_col(),
        sa.Column("name", sa.String(length=255), nullable=False),
    )

    op.create_table(
        "courses",
        _id_col(),
        _created_col(),
        _updated_col(),
        sa.Column("course_name", sa.String(length=64), nullable=False),
        sa.Column("type", sa.String(length=64), nullable=True),
        sa.Column("language", sa.String(length=64), nullable=True),
        sa.Column("level", sa.String(length=32), nullable=True),
        sa.Column("mode", sa.String(length=32), nullable=True),
        sa.Column("program", sa.String(length=64), nullable=True),
        sa.UniqueConstraint("course_name", name="uq_courses_course_name"),
    )

    op.create_table(
        "students",
        _id_col(),
        _created_col(),
        _updated_col(),
        sa.Column("registration_number", sa.String(length=64), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("phone", sa.String(length=32), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("center_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.ForeignKeyConstraint(["center_id"], ["centers.id"], name="fk_students_center_id_centers", ondelete="SET NULL"),
        sa.UniqueConstraint("registration_number", name="uq_students_registration_number"),
    )
    op.create_index("ix_students_registration_number", "students", ["registration_number"], unique=False)
    op.create_index("ix_students_email", "students", ["email"], unique=False)
    op.create_index("ix_students_center_id", "students", ["center_id"], unique=False)

    op.create_table(
        "batches",
        _id_col(),
        _created_col(),
        _updated_col(),
        sa.Column("batch_name", sa.String(length=128), nullable=False),
        sa.Column("course_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("center_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("max_students", sa.Integer(), nullable=True),
        sa.Column("status", batch_status_enum, nullable=False),
        sa.Column("start_date", sa.Date(), nullable=True),
        sa.Column("end_date", sa.Date(), nullable=True),
        sa.Column("time_from", sa.Time(), nullable=True),
        sa.Column("time_to", sa.Time(), nullable=True),
        sa.Column("total_sessions", sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(["course_id"], ["courses.id"], name="fk_batches_course_id_courses", ondelete="RESTRICT"),
        sa.ForeignKeyConstraint(["center_id"], ["centers.id"], name="fk_batches_center_id_centers", ondelete="RESTRICT"),
    )
    op.create_index("ix_batches_course_id", "batches", ["course_id"], unique=False)
    op.create_index("ix_batches_center_id", "batches", ["center_id"], unique=False)
    op.create_index("ix_batches_status", "batches", ["status"], unique=False)

    op.create_table(
        "batch_merge_groups",
        _id_col(),
        _created_col(),
        _updated_col(),
        sa.Column("name", sa.String(length=128), nullable=False),
    )

    op.create_table(
        "batch_merge_members",
        _id_col(),
        _created_col(),
        _updated_col(),
        sa.Column("merge_group_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("batch_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.ForeignKeyConstraint(
            ["merge_group_id"],
            ["batch_merge_groups.id"],
            name="fk_batch_merge_members_merge_group_id_batch_merge_groups",
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(["batch_id"], ["batches.id"], name="fk_batch_merge_members_batch_id_batches", ondelete="CASCADE"),
        sa.UniqueConstraint("batch_id", name="uq_batch_merge_members_batch_id"),
    )
    op.create_index("ix_batch_merge_members_merge_group_id", "batch_merge_members", ["merge_group_id"], unique=False)

    op.create_table(
        "enrollments",
        _id_col(),
        _created_col(),
        _updated_col(),
        sa.Column("student_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("batch_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("status", sa.Boolean(), nullable=False),
        sa.Column("is_permanent", sa.Boolean(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=True),
        sa.ForeignKeyConstraint(["student_id"], ["students.id"], name="fk_enrollments_student_id_students", ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["batch_id"], ["batches.id"], name="fk_enrollments_batch_id_batches", ondelete="CASCADE"),
        sa.UniqueConstraint("student_id", "batch_id", name="uq_enrollments_student_id"),
    )
    op.create_index("ix_enrollments_student_id", "enrollments", ["student_id"], unique=False)
    op.create_index("ix_enrollments_batch_id", "enrollments", ["batch_id"], unique=False)

    op.create_table(
        "payment_locks",
        _id_col(),
        _created_col(),
        _updated_col(),
        sa.Column("register_number", sa.String(length=64), nullable=False),
        sa.Column("scope_key", sa.String(length=64), nullable=False),
        sa.Column("batch_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("payment_type", payment_type_enum, nullable=False),
        sa.ForeignKeyConstraint(["batch_id"], ["batches.id"], name="fk_payment_locks_batch_id_batches", ondelete="CASCADE"),
        sa.UniqueConstraint("register_number", "scope_key", name="uq_payment_locks_register_number"),
    )
    op.create_index("ix_payment_locks_register_number", "payment_locks", ["register_number"], unique=False)
    op.create_index("ix_payment_locks_batch_id", "payment_locks", ["batch_id"], unique=False)

    op.create_table(
        "course_payments",
        _id_col(),
        _created_col(),
        _updated_col(),
        sa.Column("registration_number", sa.String(length=64), nullable=False),
        sa.Column("enrollment_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("student_name", sa.String(length=255), nullable=True),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("contact", sa.String(length=32), nullable=True),
        sa.Column("course_name", sa.String(length=128), nullable=True),
        sa.Column("course_duration", sa.Integer(), nullable=False),
        sa.Column("original_fees", sa.Numeric(12, 2), nullable=False),
        sa.Column("discount_percentage", sa.Numeric(5, 2), nullable=False),
        sa.Column("final_fees", sa.Numeric(12, 2), nullable=False),
        sa.Column("payment_type", payment_type_enum, nullable=False),
        sa.Column("emi_duration", sa.Integer(), nullable=True),
        sa.Column("current_emi", sa.Integer(), nullable=True),
        sa.Column("next_emi_due_date", sa.Date(), nullable=True),
        sa.Column("payment_id", sa.String(length=128), nullable=False),
        sa.Column("order_id", sa.String(length=128), nullable=True),
        sa.Column("bank_rrn", sa.String(length=128), nullable=True),
        sa.Column("source", payment_source_enum, nullable=False),
        sa.Column("status", sa.Boolean(), nullable=False),
        sa.ForeignKeyConstraint(
            ["enrollment_id"],
            ["enrollments.id"],
            name="fk_course_payments_enrollment_id_enrollments",
            ondelete="SET NULL",
        ),
        sa.UniqueConstraint("payment_id", name="uq_course_payments_payment_id"),
    )
    op.create_index("ix_course_payments_registration_number", "course_payments", ["registration_number"], unique=False)
    op.create_index("ix_course_payments_enrollment_id", "course_payments", ["enrollment_id"], unique=False)
    op.create_index("ix_course_payments_order_id", "course_payments", ["order_id"], unique=False)
    op.create_index("ix_course_payments_status", "course_payments", ["status"], unique=False)

    op.create_table(
        "class_notes",
        _id_col(),
        _created_col(),
        _updated_col(),
        sa.Column("batch_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("content", sa.Text(), nullable=True),
        sa.Column("file_url", sa.String(length=1024), nullable=True),
        sa.ForeignKeyConstraint(["batch_id"], ["batches.id"], name="fk_class_notes_batch_id_batches", ondelete="CASCADE"),
    )
    op.create_index("ix_class_notes_batch_id", "class_notes", ["batch_id"], unique=False)

    op.create_table(
        "class_meetings",
        _id_col(),
        _created_col(),
        _updated_col(),
        sa.Column("batch_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("meet_link", sa.String(length=1024), nullable=False),
        sa.Column("meeting_date", sa.Date(), nullable=False),
        sa.Column("meeting_time", sa.Time(), nullable=True),
        sa.ForeignKeyConstraint(["batch_id"], ["batches.id"], name="fk_class_meetings_batch_id_batches", ondelete="CASCADE"),
    )
    op.create_index("ix_class_meetings_batch_id", "class_meetings", ["batch_id"], unique=False)

    op.create_table(
        "attendance_sessions",
        _id_col(),
        _created_col(),
        _updated_col(),
        sa.Column("batch_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("session_date", sa.Date(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(["batch_id"], ["batches.id"], name="fk_attendance_sessions_batch_id_batches", ondelete="CASCADE"),
    )
    op.create_index("ix_attendance_sessions_batch_id", "attendance_sessions", ["batch_id"], unique=False)

    op.create_table(
        "attendance_records",
        _id_col(),
        _created_col(),
        _updated_col(),
        sa.Column("session_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("student_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("status", attendance_status_enum, nullable=False),
        sa.Column("marked_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(
            ["session_id"],
            ["attendance_sessions.id"],
            name="fk_attendance_records_session_id_attendance_sessions",
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(["student_id"], ["students.id"], name="fk_attendance_records_student_id_students", ondelete="CASCADE"),
        sa.UniqueConstraint("session_id", "student_id", name="uq_attendance_records_session_id"),
    )
    op.create_index("ix_attendance_records_session_id", "attendance_records", ["session_id"], unique=False)
    op.create_index("ix_attendance_records_student_id", "attendance_records", ["student_id"], unique=False)

    op.create_table(
        "skill_contents",
        _id_col(),
        _created_col(),
        _updated_col(),
        sa.Column("module_type", skill_module_enum, nullable=False),
        sa.Column("course_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("instruction", sa.Text(), nullable=True),
        sa.Column("media_url", sa.String(length=1024), nullable=True),
        sa.Column("session_number", sa.Integer(), nullable=True),
        sa.Column("questions", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column("max_marks", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["course_id"], ["courses.id"], name="fk_skill_contents_course_id_courses", ondelete="CASCADE"),
    )
    op.create_index("ix_skill_contents_module_type", "skill_contents", ["module_type"], unique=False)
    op.create_index("ix_skill_contents_course_id", "skill_contents", ["course_id"], unique=False)

    op.create_table(
        "skill_batch_mappings",
        _id_col(),
        _created_col(),
        _updated_col(),
        sa.Column("content_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("batch_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("student_visible", sa.Boolean(), nullable=False),
        sa.ForeignKeyConstraint(
            ["content_id"],
            ["skill_contents.id"],
            name="fk_skill_batch_mappings_content_id_skill_contents",
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(["batch_id"], ["batches.id"], name="fk_skill_batch_mappings_batch_id_batches", ondelete="CASCADE"),
        sa.UniqueConstraint("content_id", "batch_id", name="uq_skill_batch_mappings_content_id"),
    )
    op.create_index("ix_skill_batch_mappings_content_id", "skill_batch_mappings", ["content_id"], unique=False)
    op.create_index("ix_skill_batch_mappings_batch_id", "skill_batch_mappings", ["batch_id"], unique=False)

    op.create_table(
        "skill_submissions",
        _id_col(),
        _created_col(),
        _updated_col(),
        sa.Column("student_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("content_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("batch_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("answers", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column("score", sa.Integer(), nullable=False),
        sa.Column("max_marks", sa.Integer(), nullable=False),
        sa.Column("correct_answers", sa.Integer(), nullable=False),
        sa.Column("total_questions", sa.Integer(), nullable=False),
        sa.Column("submitted_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("verified", sa.Boolean(), nullable=False),
        sa.Column("verified_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["student_id"], ["students.id"], name="fk_skill_submissions_student_id_students", ondelete="CASCADE"),
        sa.ForeignKeyConstraint(
            ["content_id"],
            ["skill_contents.id"],
            name="fk_skill_submissions_content_id_skill_contents",
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(["batch_id"], ["batches.id"], name="fk_skill_submissions_batch_id_batches", ondelete="CASCADE"),
        sa.UniqueConstraint("student_id", "content_id", name="uq_skill_submissions_student_id"),
    )
    op.create_index("ix_skill_submissions_student_id", "skill_submissions", ["student_id"], unique=False)
    op.create_index("ix_skill_submissions_content_id", "skill_submissions", ["content_id"], unique=False)

    op.create_table(
        "notifications",
        _id_col(),
        _created_col(),
        _updated_col(),
        sa.Column("student_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("channel", sa.String(length=32), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("body", sa.Text(), nullable=False),
        sa.Column("status", notification_status_enum, nullable=False),
        sa.Column("is_read", sa.Boolean(), nullable=False),
        sa.Column("sent_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["student_id"], ["students.id"], name="fk_notifications_student_id_students", ondelete="CASCADE"),
    )
    op.create_index("ix_notifications_student_id", "notifications", ["student_id"], unique=False)
    op.create_index("ix_notifications_status", "notifications", ["status"], unique=False)
    op.create_index("ix_notifications_is_read", "notifications", ["is_read"], unique=False)

    op.create_table(
        "audit_logs",
        _id_col(),
        _created_col(),
        _updated_col(),
        sa.Column("student_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("action", sa.String(length=128), nullable=False),
        sa.Column("entity_type", sa.String(length=128), nullable=False),
        sa.Column("entity_id", sa.String(length=128), nullable=True),
        sa.Column("payload", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.ForeignKeyConstraint(["student_id"], ["students.id"], name="fk_audit_logs_student_id_students", ondelete="SET NULL"),
    )
    op.create_index("ix_audit_logs_student_id", "audit_logs", ["student_id"], unique=False)
    op.create_index("ix_audit_logs_action", "audit_logs", ["action"], unique=False)

    op.create_table(
        "outbox_events",
        _id_col(),
        _created_col(),
        _updated_col(),
        sa.Column("aggregate_type", sa.String(length=128), nullable=False),
        sa.Column("aggregate_id", sa.String(length=128), nullable=False),
        sa.Column("event_type", sa.String(length=128), nullable=False),
        sa.Column("payload", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column("status", outbox_status_enum, nullable=False),
        sa.Column("occurred_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("processed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("retries", sa.Integer(), nullable=False),
        sa.Column("error_message", sa.Text(), nullable=True),
    )
    op.create_index("ix_outbox_events_aggregate_type", "outbox_events", ["aggregate_type"], unique=False)
    op.create_index("ix_outbox_events_aggregate_id", "outbox_events", ["aggregate_id"], unique=False)
    op.create_index("ix_outbox_events_event_type", "outbox_events", ["event_type"], unique=False)
    op.create_index("ix_outbox_events_status", "outbox_events", ["status"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_outbox_events_status", table_name="outbox_events")
    op.drop_index("ix_outbox_events_event_type", table_name="outbox_events")
    op.drop_index("ix_outbox_events_aggregate_id", table_name="outbox_events")
    op.drop_index("ix_outbox_events_aggregate_type", table_name="outbox_events")
    op.drop_table("outbox_events")

    op.drop_index("ix_audit_logs_action", table_name="audit_logs")
    op.drop_index("ix_audit_logs_student_id", table_name="audit_logs")
    op.drop_table("audit_logs")

    op.drop_index("ix_notifications_is_read", table_name="notifications")
    op.drop_index("ix_notifications_status", table_name="notifications")
    op.drop_index("ix_notifications_student_id", table_name="notifications")
    op.drop_table("notifications")

    op.drop_index("ix_skill_submissions_content_id", table_name="skill_submissions")
    op.drop_index("ix_skill_submissions_student_id", table_name="skill_submissions")
    op.drop_table("skill_submissions")

    op.drop_index("ix_skill_batch_mappings_batch_id", table_name="skill_batch_mappings")
    op.drop_index("ix_skill_batch_mappings_content_id", table_name="skill_batch_mappings")
    op.drop_table("skill_batch_mappings")

    op.drop_index("ix_skill_contents_course_id", table_name="skill_contents")
    op.drop_index("ix_skill_contents_module_type", table_name="skill_contents")
    op.drop_table("skill_contents")

    op.drop_index("ix_attendance_records_student_id", table_name="attendance_records")
    op.drop_index("ix_attendance_records_session_id", table_name="attendance_records")
    op.drop_table("attendance_records")

    op.drop_index("ix_attendance_sessions_batch_id", table_name="attendance_sessions")
    op.drop_table("attendance_sessions")

    op.drop_index("ix_class_meetings_batch_id", table_name="class_meetings")
    op.drop_table("class_meetings")

    op.drop_index("ix_class_notes_batch_id", table_name="class_notes")
    op.drop_table("class_notes")

    op.drop_index("ix_course_payments_status", table_name="course_payments")
    op.drop_index("ix_course_payments_order_id", table_name="course_payments")
    op.drop_index("ix_course_payments_enrollment_id", table_name="course_payments")
    op.drop_index("ix_course_payments_registration_number", table_name="course_payments")
    op.drop_table("course_payments")

    op.drop_index("ix_payment_locks_batch_id", table_name="payment_locks")
    op.drop_index("ix_payment_locks_register_number", table_name="payment_locks")
    op.drop_table("payment_locks")

    op.drop_index("ix_enrollments_batch_id", table_name="enrollments")
    op.drop_index("ix_enrollments_student_id", table_name="enrollments")
    op.drop_table("enrollments")

    op.drop_index("ix_batch_merge_members_merge_group_id", table_name="batch_merge_members")
    op.drop_table("batch_merge_members")

    op.drop_table("batch_merge_groups")

    op.drop_index("ix_batches_status", table_name="batches")
    op.drop_index("ix_batches_center_id", table_name="batches")
    op.drop_index("ix_batches_course_id", table_name="batches")
    op.drop_table("batches")

    op.drop_index("ix_students_center_id", table_name="students")
    op.drop_index("ix_students_email", table_name="students")
    op.drop_index("ix_students_registration_number", table_name="students")
    op.drop_table("students")

    op.drop_table("courses")
    op.drop_table("centers")
