from typing import Optional

from fastapi import APIRouter, Depends, Query

from remedial_attendance.core.dependencies import get_attendance_service, get_current_master_teacher
from remedial_attendance.schemas.attendance import (
    AttendanceBatchRequest,
    AttendanceBatchResponse,
    AttendanceListResponse,
)
from remedial_attendance.schemas.auth import CurrentUser
from remedial_attendance.services.attendance_service import RemedialAttendanceService

router = APIRouter(prefix="/master-teacher/remedial", tags=["Master Teacher Remedial Attendance"])


@router.get("/attendance", response_model=AttendanceListResponse)
async def get_remedial_attendance(
    subject: Optional[str] = Query(None),
    start: Optional[str] = Query(None),
    end: Optional[str] = Query(None),
    student_ids: Optional[str] = Query(None, alias="studentIds"),
    service: RemedialAttendanceService = Depends(get_attendance_service),
    current_user: CurrentUser = Depends(get_current_master_teacher),
) -> AttendanceListResponse:
    records = await service.list_records(subject, start, end, student_ids)
    return AttendanceListResponse(records=records)


@router.put(
    "/attendance",
    response_model=AttendanceBatchResponse,
    response_model_exclude_none=True,
)
async def save_remedial_attendance(
    payload: AttendanceBatchRequest,
    service: RemedialAttendanceService = Depends(get_attendance_service),
    current_user: CurrentUser = Depends(get_current_master_teacher),
) -> AttendanceBatchResponse:
    """
    Save a batch of marks. Master teachers run subject-wide sessions, so
    sessions are shared per (date, subject) and carry no grade.
    """
    return await service.save_batch(payload, current_user, grade_scoped=False)
