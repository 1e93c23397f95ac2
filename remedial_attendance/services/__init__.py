from .schedule_service import ScheduleResolver, RemedialWindow
from .student_service import StudentDirectory
from .notification_service import ParentNotifier
from .reconciler import SessionReconciler, SessionScope, NormalizedEntry
from .attendance_service import RemedialAttendanceService
