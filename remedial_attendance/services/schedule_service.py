from dataclasses import dataclass, field
from datetime import date
from typing import Any, Optional, Set

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from remedial_attendance.core.config import settings
from remedial_attendance.core.logging import logger
from remedial_attendance.models import RemedialQuarter, Subject, WeeklySubjectSchedule

SUBJECT_ALIASES = {
    "math": "Math",
    "mathematics": "Math",
    "english": "English",
    "filipino": "Filipino",
}


def normalize_subject(value: Any) -> Optional[str]:
    """Map a user supplied subject label to its canonical name, or None."""
    if not isinstance(value, str):
        return None
    key = value.strip().lower()
    if not key:
        return None
    label = SUBJECT_ALIASES.get(key)
    if label is None or label not in settings.REMEDIAL_SUBJECTS:
        return None
    return label


def resolve_school_year(today: date, start_month: Optional[int] = None) -> str:
    """
    The school year runs from ``start_month`` (June by default) to the month
    before it in the following calendar year.

    >>> resolve_school_year(date(2025, 5, 31))
    '2024-2025'
    >>> resolve_school_year(date(2025, 6, 1))
    '2025-2026'
    """
    if start_month is None:
        start_month = settings.SCHOOL_YEAR_START_MONTH
    if today.month >= start_month:
        return f"{today.year}-{today.year + 1}"
    return f"{today.year - 1}-{today.year}"


def current_school_year(today: date) -> str:
    return settings.SCHOOL_YEAR or resolve_school_year(today)


@dataclass
class RemedialWindow:
    """Where remedial sessions may fall for one subject in one school year."""
    subject: str
    school_year: str
    subject_id: Optional[int] = None
    allowed_months: Set[int] = field(default_factory=set)
    allowed_weekdays: Set[str] = field(default_factory=set)

    @property
    def is_configured(self) -> bool:
        return bool(self.subject_id and self.allowed_months and self.allowed_weekdays)


class ScheduleResolver:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def resolve_subject_id(self, subject: str) -> Optional[int]:
        result = await self.db.execute(
            select(Subject.subject_id)
            .where(func.lower(func.trim(Subject.subject_name)) == subject.strip().lower())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def load_remedial_months(self, school_year: str) -> Set[int]:
        result = await self.db.execute(
            select(RemedialQuarter.start_month, RemedialQuarter.end_month)
            .where(RemedialQuarter.school_year == school_year)
        )
        months: Set[int] = set()
        for start, end in result.all():
            if start is None or end is None:
                continue
            start, end = int(start), int(end)
            if start < 1 or end > 12 or start > end:
                logger.warning(f"Ignoring remedial quarter {start}-{end} for {school_year}")
                continue
            months.update(range(start, end + 1))
        return months

    async def load_allowed_weekdays(self, subject_id: int) -> Set[str]:
        result = await self.db.execute(
            select(WeeklySubjectSchedule.day_of_week)
            .where(WeeklySubjectSchedule.subject_id == subject_id)
        )
        return {day.strip() for day in result.scalars().all() if day and day.strip()}

    async def resolve(self, subject: str, school_year: str) -> RemedialWindow:
        """
        Build the remedial window for ``subject``. Missing configuration
        yields an unconfigured window rather than an error.
        """
        window = RemedialWindow(subject=subject, school_year=school_year)
        window.subject_id = await self.resolve_subject_id(subject)
        if not window.subject_id:
            logger.info(f"Subject {subject} is not registered")
            return window

        window.allowed_months = await self.load_remedial_months(school_year)
        window.allowed_weekdays = await self.load_allowed_weekdays(window.subject_id)

        if not window.is_configured:
            logger.info(
                f"Remedial schedule for {subject} ({school_year}) is not configured: "
                f"months={sorted(window.allowed_months)}, weekdays={sorted(window.allowed_weekdays)}"
            )
        return window
