"""create remedial attendance tables

Revision ID: 0001
Revises:
Create Date: 2025-08-01 09:00:00

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "subject",
        sa.Column("subject_id", sa.Integer(), primary_key=True),
        sa.Column("subject_name", sa.String(50), nullable=False, unique=True),
    )
    op.create_index("ix_subject_subject_id", "subject", ["subject_id"])

    op.create_table(
        "grade",
        sa.Column("grade_id", sa.Integer(), primary_key=True),
        sa.Column("grade_level", sa.String(20), nullable=False, unique=True),
    )
    op.create_index("ix_grade_grade_id", "grade", ["grade_id"])

    op.create_table(
        "remedial_quarter",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("school_year", sa.String(9), nullable=False),
        sa.Column("quarter_name", sa.String(50), nullable=True),
        sa.Column("start_month", sa.Integer(), nullable=False),
        sa.Column("end_month", sa.Integer(), nullable=False),
        sa.CheckConstraint("start_month BETWEEN 1 AND 12", name="ck_remedial_quarter_start_month"),
        sa.CheckConstraint("end_month BETWEEN 1 AND 12", name="ck_remedial_quarter_end_month"),
    )
    op.create_index("ix_remedial_quarter_id", "remedial_quarter", ["id"])
    op.create_index("ix_remedial_quarter_school_year", "remedial_quarter", ["school_year"])

    op.create_table(
        "weekly_subject_schedule",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("subject_id", sa.Integer(), sa.ForeignKey("subject.subject_id"), nullable=False),
        sa.Column("day_of_week", sa.String(10), nullable=False),
    )
    op.create_index("ix_weekly_subject_schedule_id", "weekly_subject_schedule", ["id"])
    op.create_index("ix_weekly_subject_schedule_subject_id", "weekly_subject_schedule", ["subject_id"])

    op.create_table(
        "teacher",
        sa.Column("teacher_id", sa.String(20), primary_key=True),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("first_name", sa.String(100), nullable=True),
        sa.Column("last_name", sa.String(100), nullable=True),
    )
    op.create_index("ix_teacher_user_id", "teacher", ["user_id"], unique=True)

    op.create_table(
        "student",
        sa.Column("student_id", sa.String(20), primary_key=True),
        sa.Column("first_name", sa.String(100), nullable=True),
        sa.Column("middle_name", sa.String(100), nullable=True),
        sa.Column("last_name", sa.String(100), nullable=True),
        sa.Column("suffix", sa.String(20), nullable=True),
        sa.Column("grade_id", sa.Integer(), sa.ForeignKey("grade.grade_id"), nullable=True),
    )

    op.create_table(
        "student_teacher_assignment",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("student_id", sa.String(20), sa.ForeignKey("student.student_id"), nullable=True),
        sa.Column("teacher_id", sa.String(20), sa.ForeignKey("teacher.teacher_id"), nullable=False),
        sa.Column("subject_id", sa.Integer(), sa.ForeignKey("subject.subject_id"), nullable=False),
        sa.Column("grade_id", sa.Integer(), sa.ForeignKey("grade.grade_id"), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
    )
    op.create_index("ix_student_teacher_assignment_id", "student_teacher_assignment", ["id"])
    op.create_index("ix_student_teacher_assignment_teacher_id", "student_teacher_assignment", ["teacher_id"])

    op.create_table(
        "attendance_session",
        sa.Column("session_id", sa.Integer(), primary_key=True),
        sa.Column("session_date", sa.Date(), nullable=False),
        sa.Column("subject_id", sa.Integer(), sa.ForeignKey("subject.subject_id"), nullable=False),
        sa.Column("grade_id", sa.Integer(), sa.ForeignKey("grade.grade_id"), nullable=True),
        sa.Column("week_id", sa.Integer(), nullable=True),
        sa.Column("activity_id", sa.Integer(), nullable=True),
        sa.Column("created_by_user_id", sa.String(20), nullable=True),
        sa.Column("approved_schedule_id", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint(
            "session_date", "subject_id", "grade_id",
            name="uq_attendance_session_date_subject_grade"
        ),
    )
    op.create_index("ix_attendance_session_session_id", "attendance_session", ["session_id"])
    op.create_index(
        "uq_attendance_session_date_subject_no_grade",
        "attendance_session",
        ["session_date", "subject_id"],
        unique=True,
        sqlite_where=sa.text("grade_id IS NULL"),
        postgresql_where=sa.text("grade_id IS NULL"),
    )

    op.create_table(
        "attendance_record",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "session_id", sa.Integer(),
            sa.ForeignKey("attendance_session.session_id"), nullable=False
        ),
        sa.Column("student_id", sa.String(20), nullable=False),
        sa.Column("status", sa.String(10), nullable=False),
        sa.Column("remarks", sa.String(255), nullable=True),
        sa.Column("recorded_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint("session_id", "student_id", name="uq_attendance_record_session_student"),
    )
    op.create_index("ix_attendance_record_id", "attendance_record", ["id"])
    op.create_index("ix_attendance_record_student_id", "attendance_record", ["student_id"])

    op.create_table(
        "parent_notifications",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("student_id", sa.String(20), nullable=False),
        sa.Column("subject", sa.String(100), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("status", sa.String(10), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint("student_id", "subject", "date", name="uq_parent_notification"),
    )
    op.create_index("ix_parent_notifications_id", "parent_notifications", ["id"])
    op.create_index("ix_parent_notifications_student_id", "parent_notifications", ["student_id"])
    op.create_index("ix_parent_notifications_status", "parent_notifications", ["status"])


def downgrade() -> None:
    op.drop_table("parent_notifications")
    op.drop_table("attendance_record")
    op.drop_index("uq_attendance_session_date_subject_no_grade", table_name="attendance_session")
    op.drop_table("attendance_session")
    op.drop_table("student_teacher_assignment")
    op.drop_table("student")
    op.drop_table("teacher")
    op.drop_table("weekly_subject_schedule")
    op.drop_table("remedial_quarter")
    op.drop_table("grade")
    op.drop_table("subject")
