# remedial_attendance/schemas/attendance/responses.py
from pydantic import BaseModel, ConfigDict, Field
from typing import List, Literal, Optional


class AttendanceRecordOut(BaseModel):
    student_id: str = Field(alias="studentId")
    date: str
    present: Literal["Yes", "No"]

    model_config = ConfigDict(populate_by_name=True)


class AttendanceListResponse(BaseModel):
    success: bool = True
    records: List[AttendanceRecordOut] = Field(default_factory=list)


class AttendanceBatchResponse(BaseModel):
    success: bool = True
    updated: int = 0
    sessions_created: int = Field(default=0, alias="sessionsCreated")
    sessions_existing: int = Field(default=0, alias="sessionsExisting")
    skipped_not_allowed: int = Field(default=0, alias="skippedNotAllowed")
    skipped_no_session: int = Field(default=0, alias="skippedNoSession")
    grade_id: Optional[int] = Field(default=None, alias="gradeId")
    reason: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True)
