# remedial_attendance/schemas/__init__.py

from .auth.tokens import UserRole, TokenData, CurrentUser
from .attendance import (
    AttendanceBatchRequest,
    AttendanceRecordOut,
    AttendanceListResponse,
    AttendanceBatchResponse
)
