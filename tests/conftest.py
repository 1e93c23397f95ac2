import os

# Keep the module-level engine away from any local database file
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")

from datetime import date  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from remedial_attendance import create_app  # noqa: E402
from remedial_attendance.core.database import get_db  # noqa: E402
from remedial_attendance.core.dependencies import get_today  # noqa: E402
from remedial_attendance.core.security import create_access_token  # noqa: E402
from remedial_attendance.models import (  # noqa: E402
    Base,
    Grade,
    RemedialQuarter,
    Student,
    StudentTeacherAssignment,
    Subject,
    Teacher,
    WeeklySubjectSchedule,
)

# 2025-09-01 falls in the 2025-2026 school year
TODAY = date(2025, 9, 1)
SCHOOL_YEAR = "2025-2026"

MONDAY = "2025-09-08"
TUESDAY = "2025-09-09"
WEDNESDAY = "2025-09-10"
NOVEMBER_MONDAY = "2025-11-03"


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest_asyncio.fixture
async def seeded(session_factory):
    """
    Math runs Monday/Wednesday in September-October 2025. English is
    registered without a weekly schedule. Teacher T-001 teaches Math to
    grade 1; teacher T-002 has no grade assignment.
    """
    async with session_factory() as db:
        db.add_all([
            Subject(subject_id=1, subject_name="Math"),
            Subject(subject_id=2, subject_name="English"),
            Grade(grade_id=1, grade_level="Grade 3"),
            RemedialQuarter(school_year=SCHOOL_YEAR, quarter_name="Q1", start_month=9, end_month=10),
            RemedialQuarter(school_year="2024-2025", quarter_name="Q3", start_month=1, end_month=2),
            WeeklySubjectSchedule(subject_id=1, day_of_week="Monday"),
            WeeklySubjectSchedule(subject_id=1, day_of_week=" Wednesday "),
            Teacher(teacher_id="T-001", user_id=10, first_name="Maria", last_name="Santos"),
            Teacher(teacher_id="T-002", user_id=11, first_name="Jose", last_name="Reyes"),
            Student(student_id="S-00001", first_name="Juan", middle_name="Santos", last_name="Dela Cruz", grade_id=1),
            Student(student_id="S-00002", first_name="Ana", last_name="Lim", grade_id=1),
            Student(student_id="S-00003", first_name="Ben", last_name="Tan", suffix="Jr.", grade_id=1),
            Student(student_id="S-00042", first_name="Lea", last_name="Cruz", grade_id=1),
        ])
        await db.flush()
        db.add(StudentTeacherAssignment(teacher_id="T-001", subject_id=1, grade_id=1, is_active=True))
        await db.commit()
    return {"math_id": 1, "english_id": 2, "grade_id": 1}


@pytest_asyncio.fixture
async def app(session_factory):
    app = create_app()

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_today] = lambda: TODAY
    yield app
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def client(app, seeded):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client


def auth_headers(user_id: int, role: str, **claims) -> dict:
    token = create_access_token(user_id, role, extra_claims=claims or None)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def teacher_headers():
    return auth_headers(10, "teacher", teacher_id="T-001")


@pytest.fixture
def master_teacher_headers():
    return auth_headers(20, "master_teacher", master_teacher_id="MT-001")
