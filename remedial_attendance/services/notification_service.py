from datetime import date
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import func

from remedial_attendance.core.logging import logger
from remedial_attendance.models import NotificationStatus, ParentNotification
from remedial_attendance.utils.dates import format_absence_date
from remedial_attendance.utils.upsert import upsert


def absence_message(absence_date: date) -> str:
    return f"Dear Parent, your child was marked absent on {format_absence_date(absence_date)}."


class ParentNotifier:
    """
    Records a parent notification for each absence. One row per
    (student, subject, date); a repeated absence refreshes the message and
    marks the notification unread again.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def notify_absence(
        self,
        student_id: str,
        subject: str,
        absence_date: date,
        student_name: Optional[str] = None,
    ) -> None:
        message = absence_message(absence_date)
        await upsert(
            self.db,
            ParentNotification.__table__,
            {
                "student_id": student_id,
                "subject": subject,
                "date": absence_date,
                "message": message,
                "status": NotificationStatus.UNREAD.value,
            },
            conflict_columns=("student_id", "subject", "date"),
            update_values={
                "message": message,
                "status": NotificationStatus.UNREAD.value,
                "updated_at": func.now(),
            },
        )
        logger.info(
            f"Absence notification queued for {student_name or student_id} "
            f"({subject}, {absence_date.isoformat()})"
        )
