from sqlalchemy import CheckConstraint, Column, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from .base import Base


class RemedialQuarter(Base):
    """
    Month range during which remedial instruction runs in a school year.
    Several rows per school year are unioned by the schedule resolver.
    """
    __tablename__ = "remedial_quarter"
    __table_args__ = (
        CheckConstraint("start_month BETWEEN 1 AND 12", name="ck_remedial_quarter_start_month"),
        CheckConstraint("end_month BETWEEN 1 AND 12", name="ck_remedial_quarter_end_month"),
    )

    id = Column(Integer, primary_key=True, index=True)
    school_year = Column(String(9), nullable=False, index=True)  # "2025-2026"
    quarter_name = Column(String(50), nullable=True)
    start_month = Column(Integer, nullable=False)
    end_month = Column(Integer, nullable=False)

    def __repr__(self):
        return (
            f"<RemedialQuarter(school_year={self.school_year}, "
            f"months={self.start_month}-{self.end_month})>"
        )


class WeeklySubjectSchedule(Base):
    __tablename__ = "weekly_subject_schedule"

    id = Column(Integer, primary_key=True, index=True)
    subject_id = Column(Integer, ForeignKey("subject.subject_id"), nullable=False, index=True)
    day_of_week = Column(String(10), nullable=False)  # "Monday"

    subject = relationship("Subject", back_populates="weekly_schedules")
