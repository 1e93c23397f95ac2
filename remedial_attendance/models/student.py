from sqlalchemy import Boolean, Column, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from .base import Base


class Teacher(Base):
    __tablename__ = "teacher"

    teacher_id = Column(String(20), primary_key=True)
    user_id = Column(Integer, unique=True, nullable=False, index=True)
    first_name = Column(String(100), nullable=True)
    last_name = Column(String(100), nullable=True)

    assignments = relationship("StudentTeacherAssignment", back_populates="teacher")


class Student(Base):
    __tablename__ = "student"

    student_id = Column(String(20), primary_key=True)  # "S-00001"
    first_name = Column(String(100), nullable=True)
    middle_name = Column(String(100), nullable=True)
    last_name = Column(String(100), nullable=True)
    suffix = Column(String(20), nullable=True)
    grade_id = Column(Integer, ForeignKey("grade.grade_id"), nullable=True)

    @property
    def full_name(self) -> str:
        parts = [self.first_name, self.middle_name, self.last_name, self.suffix]
        return " ".join(p.strip() for p in parts if p and p.strip())

    def __repr__(self):
        return f"<Student(id={self.student_id})>"


class StudentTeacherAssignment(Base):
    __tablename__ = "student_teacher_assignment"

    id = Column(Integer, primary_key=True, index=True)
    student_id = Column(String(20), ForeignKey("student.student_id"), nullable=True)
    teacher_id = Column(String(20), ForeignKey("teacher.teacher_id"), nullable=False, index=True)
    subject_id = Column(Integer, ForeignKey("subject.subject_id"), nullable=False)
    grade_id = Column(Integer, ForeignKey("grade.grade_id"), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)

    teacher = relationship("Teacher", back_populates="assignments")
