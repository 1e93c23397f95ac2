"""
Maps a batch of per-student attendance entries onto remedial sessions.

For every admissible date in a batch exactly one ``AttendanceSession`` is
found or created, and each entry is written against it: ``present`` of
"Yes"/"No" upserts the student's record, ``None`` deletes it. The reconciler
never commits; the caller wraps a whole batch in one transaction.
"""
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import TYPE_CHECKING, Dict, Iterable, Optional, Set

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import func

from remedial_attendance.core.logging import logger
from remedial_attendance.models import AttendanceRecord, AttendanceSession, AttendanceStatus
from remedial_attendance.utils.dates import is_admissible_date
from remedial_attendance.utils.upsert import insert_ignore, upsert

if TYPE_CHECKING:
    from remedial_attendance.services.notification_service import ParentNotifier
    from remedial_attendance.services.schedule_service import RemedialWindow


class EntryOutcome(str, Enum):
    APPLIED = "applied"
    SKIPPED_NOT_ALLOWED = "skipped_not_allowed"
    SKIPPED_NO_SESSION = "skipped_no_session"


@dataclass(frozen=True)
class NormalizedEntry:
    student_id: str
    date: str                       # YYYY-MM-DD
    present: Optional[str] = None   # "Yes" | "No" | None


@dataclass(frozen=True)
class SessionScope:
    """
    Which sessions a batch writes to. Grade scoped batches key sessions by
    (date, subject, grade); the others by (date, subject) and create
    sessions without a grade.
    """
    subject_id: int
    grade_id: Optional[int] = None
    created_by: Optional[str] = None
    grade_scoped: bool = True


@dataclass
class ReconcileSummary:
    updated: int = 0
    skipped_not_allowed: int = 0
    skipped_no_session: int = 0
    sessions_created: int = 0
    sessions_existing: int = 0
    grade_id: Optional[int] = None

    def record(self, outcome: EntryOutcome) -> None:
        if outcome is EntryOutcome.APPLIED:
            self.updated += 1
        elif outcome is EntryOutcome.SKIPPED_NOT_ALLOWED:
            self.skipped_not_allowed += 1
        else:
            self.skipped_no_session += 1


class SessionReconciler:
    def __init__(
        self,
        db: AsyncSession,
        window: "RemedialWindow",
        scope: SessionScope,
        notifier: Optional["ParentNotifier"] = None,
        student_names: Optional[Dict[str, str]] = None,
    ):
        self.db = db
        self.window = window
        self.scope = scope
        self.notifier = notifier
        self.student_names = student_names or {}
        self._session_ids: Dict[str, int] = {}
        self._dates_without_session: Set[str] = set()
        self.sessions_created = 0
        self.sessions_existing = 0

    async def _find_session(self, session_date: date) -> Optional[int]:
        query = select(AttendanceSession.session_id).where(
            AttendanceSession.session_date == session_date,
            AttendanceSession.subject_id == self.scope.subject_id,
        )
        if self.scope.grade_scoped:
            query = query.where(AttendanceSession.grade_id == self.scope.grade_id)
        result = await self.db.execute(query.order_by(AttendanceSession.session_id).limit(1))
        return result.scalar_one_or_none()

    async def _create_session(self, session_date: date) -> bool:
        """Insert the session unless a concurrent batch already did. True when this call inserted it."""
        inserted = await insert_ignore(
            self.db,
            AttendanceSession.__table__,
            {
                "session_date": session_date,
                "subject_id": self.scope.subject_id,
                "grade_id": self.scope.grade_id if self.scope.grade_scoped else None,
                "week_id": None,
                "activity_id": None,
                "created_by_user_id": self.scope.created_by,
                "approved_schedule_id": None,
            },
        )
        return inserted > 0

    async def resolve_session(self, iso: str) -> Optional[int]:
        """Find or create the session for ``iso``, once per date per batch."""
        if iso in self._session_ids:
            return self._session_ids[iso]
        if iso in self._dates_without_session:
            return None

        session_date = date.fromisoformat(iso)
        session_id = await self._find_session(session_date)
        if session_id is not None:
            self.sessions_existing += 1
        else:
            created = await self._create_session(session_date)
            # Re-read: the row is either ours or the one that beat us to the constraint
            session_id = await self._find_session(session_date)
            if session_id is not None:
                if created:
                    self.sessions_created += 1
                else:
                    self.sessions_existing += 1

        if session_id is None:
            logger.warning(f"No attendance session could be resolved for {iso}")
            self._dates_without_session.add(iso)
            return None

        self._session_ids[iso] = session_id
        return session_id

    async def _write_record(self, session_id: int, entry: NormalizedEntry) -> None:
        if entry.present is None:
            await self.db.execute(
                delete(AttendanceRecord).where(
                    AttendanceRecord.session_id == session_id,
                    AttendanceRecord.student_id == entry.student_id,
                )
            )
            return

        status = AttendanceStatus.PRESENT if entry.present == "Yes" else AttendanceStatus.ABSENT
        await upsert(
            self.db,
            AttendanceRecord.__table__,
            {
                "session_id": session_id,
                "student_id": entry.student_id,
                "status": status.value,
                "remarks": None,
                "recorded_at": func.now(),
            },
            conflict_columns=("session_id", "student_id"),
            update_values={"status": status.value, "remarks": None, "recorded_at": func.now()},
        )

        if status is AttendanceStatus.ABSENT and self.notifier is not None:
            await self.notifier.notify_absence(
                student_id=entry.student_id,
                subject=self.window.subject,
                absence_date=date.fromisoformat(entry.date),
                student_name=self.student_names.get(entry.student_id),
            )

    async def apply_entry(self, entry: NormalizedEntry) -> EntryOutcome:
        if not is_admissible_date(entry.date, self.window.allowed_months, self.window.allowed_weekdays):
            logger.debug(f"Skipping {entry.student_id} on {entry.date}: outside the remedial schedule")
            return EntryOutcome.SKIPPED_NOT_ALLOWED

        session_id = await self.resolve_session(entry.date)
        if session_id is None:
            return EntryOutcome.SKIPPED_NO_SESSION

        await self._write_record(session_id, entry)
        return EntryOutcome.APPLIED

    async def reconcile(self, entries: Iterable[NormalizedEntry]) -> ReconcileSummary:
        """Apply ``entries`` in order. Storage errors propagate to the caller's transaction."""
        summary = ReconcileSummary(grade_id=self.scope.grade_id)
        for entry in entries:
            summary.record(await self.apply_entry(entry))
        summary.sessions_created = self.sessions_created
        summary.sessions_existing = self.sessions_existing
        return summary
