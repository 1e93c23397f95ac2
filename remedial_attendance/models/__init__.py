from .base import Base, TimestampMixin
from .subject import Subject, Grade
from .schedule import RemedialQuarter, WeeklySubjectSchedule
from .student import Student, Teacher, StudentTeacherAssignment
from .attendance import AttendanceSession, AttendanceRecord, AttendanceStatus
from .notification import ParentNotification, NotificationStatus

__all__ = [
    'Base',
    'TimestampMixin',
    'Subject',
    'Grade',
    'RemedialQuarter',
    'WeeklySubjectSchedule',
    'Student',
    'Teacher',
    'StudentTeacherAssignment',
    'AttendanceSession',
    'AttendanceRecord',
    'AttendanceStatus',
    'ParentNotification',
    'NotificationStatus'
]
