"""
Seed reference data for local development:

    python -m remedial_attendance.seed

Creates the remedial subjects, one remedial quarter for the current school
year and a weekly schedule per subject. Existing rows are left untouched.
"""
import asyncio
from datetime import date
from typing import Dict, List, Tuple

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from remedial_attendance.core.config import settings
from remedial_attendance.core.database import close_db, get_db_context, init_db
from remedial_attendance.core.logging import log_function_call, logger
from remedial_attendance.models import RemedialQuarter, Subject, WeeklySubjectSchedule
from remedial_attendance.services.schedule_service import current_school_year

DEFAULT_QUARTERS: List[Tuple[str, int, int]] = [
    ("Remedial Period 1", 9, 10),
    ("Remedial Period 2", 1, 2),
]

DEFAULT_WEEKDAYS: Dict[str, List[str]] = {
    "Math": ["Monday", "Wednesday"],
    "English": ["Tuesday", "Thursday"],
    "Filipino": ["Friday"],
}


async def seed_subjects(db: AsyncSession) -> Dict[str, int]:
    subject_ids = {}
    for name in settings.REMEDIAL_SUBJECTS:
        result = await db.execute(select(Subject).where(Subject.subject_name == name))
        subject = result.scalar_one_or_none()
        if not subject:
            subject = Subject(subject_name=name)
            db.add(subject)
            await db.flush()
            logger.info(f"Created subject {name}")
        subject_ids[name] = subject.subject_id
    return subject_ids


async def seed_quarters(db: AsyncSession, school_year: str) -> None:
    result = await db.execute(
        select(RemedialQuarter.id).where(RemedialQuarter.school_year == school_year).limit(1)
    )
    if result.scalar_one_or_none():
        return
    for name, start_month, end_month in DEFAULT_QUARTERS:
        db.add(RemedialQuarter(
            school_year=school_year,
            quarter_name=name,
            start_month=start_month,
            end_month=end_month,
        ))
    logger.info(f"Created remedial quarters for {school_year}")


async def seed_weekly_schedules(db: AsyncSession, subject_ids: Dict[str, int]) -> None:
    for name, subject_id in subject_ids.items():
        result = await db.execute(
            select(WeeklySubjectSchedule.id).where(WeeklySubjectSchedule.subject_id == subject_id).limit(1)
        )
        if result.scalar_one_or_none():
            continue
        for day in DEFAULT_WEEKDAYS.get(name, []):
            db.add(WeeklySubjectSchedule(subject_id=subject_id, day_of_week=day))


@log_function_call(logger)
async def seed_reference_data() -> None:
    await init_db()
    async with get_db_context() as db:
        subject_ids = await seed_subjects(db)
        await seed_quarters(db, current_school_year(date.today()))
        await seed_weekly_schedules(db, subject_ids)
    await close_db()


if __name__ == "__main__":
    asyncio.run(seed_reference_data())
