# remedial_attendance/schemas/attendance/requests.py
from pydantic import BaseModel, ConfigDict
from typing import Any


class AttendanceBatchRequest(BaseModel):
    # Loosely typed: malformed entries are dropped one by one instead of failing the batch
    subject: Any = None
    entries: Any = None

    model_config = ConfigDict(
        extra="ignore",
        json_schema_extra={
            "example": {
                "subject": "Math",
                "entries": [
                    {"studentId": "S-00001", "date": "2025-09-08", "present": "No"},
                    {"studentId": 2, "date": "2025-09-08", "present": "Yes"},
                    {"studentId": "S-00003", "date": "2025-09-08", "present": None},
                ],
            }
        },
    )
