from sqlalchemy import Column, Integer, String
from sqlalchemy.orm import relationship

from .base import Base


class Subject(Base):
    __tablename__ = "subject"

    subject_id = Column(Integer, primary_key=True, index=True)
    subject_name = Column(String(50), unique=True, nullable=False)

    weekly_schedules = relationship("WeeklySubjectSchedule", back_populates="subject")

    def __repr__(self):
        return f"<Subject(id={self.subject_id}, name={self.subject_name})>"


class Grade(Base):
    __tablename__ = "grade"

    grade_id = Column(Integer, primary_key=True, index=True)
    grade_level = Column(String(20), unique=True, nullable=False)  # e.g. "Grade 3"
