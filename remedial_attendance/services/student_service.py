from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from remedial_attendance.models import Student
from remedial_attendance.services.reconciler import NormalizedEntry
from remedial_attendance.utils.dates import parse_iso_date

STUDENT_ID_PREFIX = "S-"
STUDENT_ID_WIDTH = 5


def padded_student_id(number: int) -> str:
    """42 -> 'S-00042'"""
    return f"{STUDENT_ID_PREFIX}{number:0{STUDENT_ID_WIDTH}d}"


def _as_positive_int(value: str) -> Optional[int]:
    if value.isascii() and value.isdigit():
        number = int(value)
        if number > 0:
            return number
    return None


def _coerce_present(value: Any) -> Optional[str]:
    return value if value in ("Yes", "No") else None


class StudentDirectory:
    """Maps the student ids a client sends onto the ids stored in the student table."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _existing_ids(self, candidates: Iterable[str]) -> List[str]:
        candidates = list(dict.fromkeys(candidates))
        if not candidates:
            return []
        result = await self.db.execute(
            select(Student.student_id).where(Student.student_id.in_(candidates))
        )
        return [sid.strip() for sid in result.scalars().all() if sid and sid.strip()]

    async def resolve_numeric_ids(self, numbers: Iterable[int]) -> Dict[int, str]:
        """
        Resolve bare numbers to stored ids. The padded ``S-00042`` form wins
        over an exact ``"42"`` match when both exist.
        """
        numbers = list(dict.fromkeys(numbers))
        resolved: Dict[int, str] = {}
        if not numbers:
            return resolved

        for sid in await self._existing_ids(str(n) for n in numbers):
            resolved[int(sid)] = sid

        padded = {padded_student_id(n): n for n in numbers}
        for sid in await self._existing_ids(padded):
            resolved[padded[sid]] = sid

        return resolved

    async def normalize_entries(self, raw_entries: Any) -> List[NormalizedEntry]:
        """
        Turn the raw ``entries`` payload into normalized entries. Entries that
        are not objects, lack a student id, or carry an unparseable date are
        dropped; ``present`` other than "Yes"/"No" means "clear the mark".
        """
        if not isinstance(raw_entries, list):
            return []

        candidates = []
        for entry in raw_entries:
            if not isinstance(entry, dict):
                continue
            student_text = str(entry.get("studentId") or "").strip()
            parsed = parse_iso_date(entry.get("date"))
            if not student_text or parsed is None:
                continue
            candidates.append((student_text, parsed.isoformat(), _coerce_present(entry.get("present"))))

        numeric = [n for n in (_as_positive_int(text) for text, _, _ in candidates) if n]
        id_map = await self.resolve_numeric_ids(numeric)

        normalized = []
        for student_text, iso, present in candidates:
            number = _as_positive_int(student_text)
            student_id = id_map.get(number, str(number)) if number else student_text
            normalized.append(NormalizedEntry(student_id=student_id, date=iso, present=present))
        return normalized

    async def resolve_filter_ids(self, raw_ids: Iterable[str]) -> List[str]:
        """Resolve a studentIds query filter; unknown numeric ids are kept as given."""
        cleaned = [value.strip() for value in raw_ids if value and value.strip()]
        direct = [value for value in cleaned if _as_positive_int(value) is None]
        numbers = [n for n in (_as_positive_int(value) for value in cleaned) if n]

        resolved = list(dict.fromkeys(direct))
        if not numbers:
            return resolved

        candidates = [str(n) for n in numbers] + [padded_student_id(n) for n in numbers]
        found = await self._existing_ids(candidates)
        if not found:
            found = [str(n) for n in numbers]
        for sid in found:
            if sid not in resolved:
                resolved.append(sid)
        return resolved

    async def load_names(self, student_ids: Iterable[str]) -> Dict[str, str]:
        ids = list(dict.fromkeys(sid for sid in student_ids if sid))
        if not ids:
            return {}
        result = await self.db.execute(select(Student).where(Student.student_id.in_(ids)))
        return {
            student.student_id: student.full_name
            for student in result.scalars().all()
            if student.full_name
        }
