import enum

from sqlalchemy import (
    Column, Date, DateTime, ForeignKey, Index, Integer, String, UniqueConstraint, text
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .base import Base


class AttendanceStatus(str, enum.Enum):
    PRESENT = "Present"
    ABSENT = "Absent"


class AttendanceSession(Base):
    """
    One remedial session per (date, subject, grade). Sessions without a grade
    are unique per (date, subject) through the partial index below.
    """
    __tablename__ = "attendance_session"
    __table_args__ = (
        UniqueConstraint(
            "session_date", "subject_id", "grade_id",
            name="uq_attendance_session_date_subject_grade"
        ),
        Index(
            "uq_attendance_session_date_subject_no_grade",
            "session_date", "subject_id",
            unique=True,
            sqlite_where=text("grade_id IS NULL"),
            postgresql_where=text("grade_id IS NULL"),
        ),
    )

    session_id = Column(Integer, primary_key=True, index=True)
    session_date = Column(Date, nullable=False)
    subject_id = Column(Integer, ForeignKey("subject.subject_id"), nullable=False)
    grade_id = Column(Integer, ForeignKey("grade.grade_id"), nullable=True)
    week_id = Column(Integer, nullable=True)
    activity_id = Column(Integer, nullable=True)
    created_by_user_id = Column(String(20), nullable=True)
    approved_schedule_id = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    records = relationship("AttendanceRecord", back_populates="session")

    def __repr__(self):
        return (
            f"<AttendanceSession(id={self.session_id}, date={self.session_date}, "
            f"subject={self.subject_id}, grade={self.grade_id})>"
        )


class AttendanceRecord(Base):
    __tablename__ = "attendance_record"
    __table_args__ = (
        UniqueConstraint("session_id", "student_id", name="uq_attendance_record_session_student"),
    )

    id = Column(Integer, primary_key=True, index=True)
    session_id = Column(Integer, ForeignKey("attendance_session.session_id"), nullable=False)
    student_id = Column(String(20), nullable=False, index=True)
    status = Column(String(10), nullable=False)  # AttendanceStatus value
    remarks = Column(String(255), nullable=True)
    recorded_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    session = relationship("AttendanceSession", back_populates="records")

    def __repr__(self):
        return f"<AttendanceRecord(session={self.session_id}, student={self.student_id}, status={self.status})>"
