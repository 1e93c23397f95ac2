# remedial_attendance/schemas/attendance/__init__.py
from .requests import AttendanceBatchRequest
from .responses import (
    AttendanceRecordOut,
    AttendanceListResponse,
    AttendanceBatchResponse
)

__all__ = [
    'AttendanceBatchRequest',
    'AttendanceRecordOut',
    'AttendanceListResponse',
    'AttendanceBatchResponse'
]
