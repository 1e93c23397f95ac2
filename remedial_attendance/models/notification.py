import enum

from sqlalchemy import Column, Date, Integer, String, Text, UniqueConstraint

from .base import Base, TimestampMixin


class NotificationStatus(str, enum.Enum):
    UNREAD = "unread"
    READ = "read"


class ParentNotification(TimestampMixin, Base):
    __tablename__ = "parent_notifications"
    __table_args__ = (
        UniqueConstraint("student_id", "subject", "date", name="uq_parent_notification"),
    )

    id = Column(Integer, primary_key=True, index=True)
    student_id = Column(String(20), nullable=False, index=True)
    subject = Column(String(100), nullable=False)
    date = Column(Date, nullable=False)
    message = Column(Text, nullable=False)
    status = Column(String(10), nullable=False, default=NotificationStatus.UNREAD.value, index=True)

    def __repr__(self):
        return f"<ParentNotification(student={self.student_id}, subject={self.subject}, date={self.date})>"
