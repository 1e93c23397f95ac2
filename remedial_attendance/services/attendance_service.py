from datetime import date
from typing import Iterable, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from remedial_attendance.core.errors import ConfigurationError, DatabaseError, ValidationError
from remedial_attendance.core.logging import log_function_call, logger
from remedial_attendance.models import (
    AttendanceRecord,
    AttendanceSession,
    AttendanceStatus,
    StudentTeacherAssignment,
    Teacher,
)
from remedial_attendance.schemas.attendance import (
    AttendanceBatchRequest,
    AttendanceBatchResponse,
    AttendanceRecordOut,
)
from remedial_attendance.schemas.auth import CurrentUser
from remedial_attendance.services.notification_service import ParentNotifier
from remedial_attendance.services.reconciler import ReconcileSummary, SessionReconciler, SessionScope
from remedial_attendance.services.schedule_service import (
    RemedialWindow,
    ScheduleResolver,
    current_school_year,
    normalize_subject,
)
from remedial_attendance.services.student_service import StudentDirectory
from remedial_attendance.utils.dates import is_admissible_date, parse_iso_date

REASON_NOT_ALLOWED = "Some dates are outside the allowed remedial schedule."
REASON_NO_SESSION = "Some sessions could not be created or found."


def summarize_reason(summary: ReconcileSummary) -> Optional[str]:
    parts = []
    if summary.skipped_not_allowed:
        parts.append(REASON_NOT_ALLOWED)
    if summary.skipped_no_session:
        parts.append(REASON_NO_SESSION)
    return " ".join(parts) or None


class RemedialAttendanceService:
    def __init__(self, db: AsyncSession, today: date):
        self.db = db
        self.today = today
        self.schedules = ScheduleResolver(db)
        self.students = StudentDirectory(db)

    @property
    def school_year(self) -> str:
        return current_school_year(self.today)

    async def _window_for(self, subject: str) -> RemedialWindow:
        return await self.schedules.resolve(subject, self.school_year)

    async def list_records(
        self,
        subject: Optional[str],
        start: Optional[str],
        end: Optional[str],
        student_ids: Optional[str] = None,
    ) -> List[AttendanceRecordOut]:
        """
        Stored marks for ``subject`` between ``start`` and ``end`` inclusive,
        limited to dates that are still on the remedial schedule.
        """
        label = normalize_subject(subject)
        if not label:
            raise ValidationError("Invalid subject.")
        start_date = parse_iso_date(start)
        if start_date is None:
            raise ValidationError("Invalid start date.")
        end_date = parse_iso_date(end)
        if end_date is None:
            raise ValidationError("Invalid end date.")

        window = await self._window_for(label)
        if not window.is_configured:
            return []

        query = (
            select(AttendanceRecord.student_id, AttendanceSession.session_date, AttendanceRecord.status)
            .join(AttendanceSession, AttendanceSession.session_id == AttendanceRecord.session_id)
            .where(
                AttendanceSession.subject_id == window.subject_id,
                AttendanceSession.session_date.between(start_date, end_date),
            )
            .order_by(AttendanceSession.session_date, AttendanceRecord.student_id)
        )

        if student_ids:
            resolved = await self.students.resolve_filter_ids(student_ids.split(","))
            if resolved:
                query = query.where(AttendanceRecord.student_id.in_(resolved))

        result = await self.db.execute(query)
        records = []
        for student_id, session_date, status in result.all():
            iso = session_date.isoformat()
            if not is_admissible_date(iso, window.allowed_months, window.allowed_weekdays):
                continue
            absent = (status or "").lower() == AttendanceStatus.ABSENT.value.lower()
            records.append(
                AttendanceRecordOut(
                    student_id=str(student_id or ""),
                    date=iso,
                    present="No" if absent else "Yes",
                )
            )
        return records

    async def resolve_teacher_id(self, user: CurrentUser) -> Optional[str]:
        if user.teacher_id:
            return user.teacher_id
        if not user.user_id:
            return None
        result = await self.db.execute(
            select(Teacher.teacher_id).where(Teacher.user_id == user.user_id).limit(1)
        )
        teacher_id = result.scalar_one_or_none()
        return teacher_id.strip() if teacher_id and teacher_id.strip() else None

    async def resolve_teacher_grade_id(self, subject_id: int, teacher_id: str) -> Optional[int]:
        result = await self.db.execute(
            select(StudentTeacherAssignment.grade_id)
            .where(
                StudentTeacherAssignment.subject_id == subject_id,
                StudentTeacherAssignment.teacher_id == teacher_id,
                StudentTeacherAssignment.is_active.is_(True),
                StudentTeacherAssignment.grade_id.isnot(None),
            )
            .order_by(StudentTeacherAssignment.id)
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def _scope_for(self, window: RemedialWindow, user: CurrentUser, grade_scoped: bool) -> SessionScope:
        if not grade_scoped:
            created_by = user.master_teacher_id or (str(user.user_id) if user.user_id else None)
            return SessionScope(subject_id=window.subject_id, created_by=created_by, grade_scoped=False)

        teacher_id = await self.resolve_teacher_id(user)
        if not teacher_id:
            raise ConfigurationError("Teacher assignment is missing.")
        grade_id = await self.resolve_teacher_grade_id(window.subject_id, teacher_id)
        if not grade_id:
            raise ConfigurationError("Grade assignment is missing for this teacher.")
        return SessionScope(subject_id=window.subject_id, grade_id=grade_id, created_by=teacher_id)

    @log_function_call(logger)
    async def _reconcile(
        self, window: RemedialWindow, scope: SessionScope, entries: Iterable
    ) -> ReconcileSummary:
        entries = list(entries)
        try:
            names = await self.students.load_names(entry.student_id for entry in entries)
            reconciler = SessionReconciler(
                self.db,
                window,
                scope,
                notifier=ParentNotifier(self.db),
                student_names=names,
            )
            summary = await reconciler.reconcile(entries)
            await self.db.commit()
            return summary
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.exception(f"Attendance batch for {window.subject} rolled back")
            raise DatabaseError("Failed to save attendance.", details={"reason": type(e).__name__})

    async def save_batch(
        self,
        payload: AttendanceBatchRequest,
        user: CurrentUser,
        grade_scoped: bool = True,
    ) -> AttendanceBatchResponse:
        label = normalize_subject(payload.subject)
        if not label:
            raise ValidationError("Invalid subject.")

        entries = await self.students.normalize_entries(payload.entries)
        if not entries:
            return AttendanceBatchResponse(reason="No valid entries to process.")

        window = await self._window_for(label)
        if not window.subject_id:
            return AttendanceBatchResponse(reason="Subject not found.")
        if not window.is_configured:
            return AttendanceBatchResponse(reason="Remedial schedule is not configured for this subject.")

        scope = await self._scope_for(window, user, grade_scoped)
        summary = await self._reconcile(window, scope, entries)

        logger.info(
            f"Saved {summary.updated} remedial {label} marks "
            f"(created={summary.sessions_created}, existing={summary.sessions_existing}, "
            f"not_allowed={summary.skipped_not_allowed}, no_session={summary.skipped_no_session})"
        )
        return AttendanceBatchResponse(
            updated=summary.updated,
            sessions_created=summary.sessions_created,
            sessions_existing=summary.sessions_existing,
            skipped_not_allowed=summary.skipped_not_allowed,
            skipped_no_session=summary.skipped_no_session,
            grade_id=summary.grade_id,
            reason=summarize_reason(summary),
        )
