from datetime import date

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from remedial_attendance.models import AttendanceRecord, AttendanceSession, ParentNotification
from remedial_attendance.services.attendance_service import REASON_NO_SESSION, REASON_NOT_ALLOWED
from remedial_attendance.services.notification_service import ParentNotifier
from tests.conftest import MONDAY, NOVEMBER_MONDAY, TUESDAY, WEDNESDAY, auth_headers

TEACHER_URL = "/api/v1/teacher/remedial/attendance"
MASTER_URL = "/api/v1/master-teacher/remedial/attendance"


async def count_rows(session_factory, model):
    async with session_factory() as db:
        result = await db.execute(select(model))
        return len(result.scalars().all())


async def test_health(client):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"
    assert response.headers["X-Request-ID"]


async def test_three_marks_on_one_date(client, teacher_headers, session_factory):
    response = await client.put(TEACHER_URL, headers=teacher_headers, json={
        "subject": "math",
        "entries": [
            {"studentId": "S-00001", "date": MONDAY, "present": "Yes"},
            {"studentId": "S-00002", "date": MONDAY, "present": "No"},
            {"studentId": "S-00003", "date": MONDAY, "present": "Yes"},
        ],
    })

    assert response.status_code == 200
    assert response.json() == {
        "success": True,
        "updated": 3,
        "sessionsCreated": 1,
        "sessionsExisting": 0,
        "skippedNotAllowed": 0,
        "skippedNoSession": 0,
        "gradeId": 1,
    }
    assert await count_rows(session_factory, AttendanceSession) == 1
    assert await count_rows(session_factory, AttendanceRecord) == 3
    assert await count_rows(session_factory, ParentNotification) == 1


async def test_resubmission_reuses_sessions(client, teacher_headers, session_factory):
    body = {
        "subject": "Math",
        "entries": [
            {"studentId": "S-00001", "date": MONDAY, "present": "Yes"},
            {"studentId": "S-00001", "date": WEDNESDAY, "present": "No"},
        ],
    }
    await client.put(TEACHER_URL, headers=teacher_headers, json=body)
    response = await client.put(TEACHER_URL, headers=teacher_headers, json=body)

    data = response.json()
    assert data["updated"] == 2
    assert data["sessionsCreated"] == 0
    assert data["sessionsExisting"] == 2
    assert await count_rows(session_factory, AttendanceSession) == 2
    assert await count_rows(session_factory, AttendanceRecord) == 2


async def test_inadmissible_dates_are_reported(client, teacher_headers, session_factory):
    response = await client.put(TEACHER_URL, headers=teacher_headers, json={
        "subject": "Math",
        "entries": [
            {"studentId": "S-00001", "date": MONDAY, "present": "Yes"},
            {"studentId": "S-00001", "date": TUESDAY, "present": "Yes"},
            {"studentId": "S-00001", "date": NOVEMBER_MONDAY, "present": "Yes"},
        ],
    })

    data = response.json()
    assert data["success"] is True
    assert data["updated"] == 1
    assert data["skippedNotAllowed"] == 2
    assert data["reason"] == REASON_NOT_ALLOWED
    assert await count_rows(session_factory, AttendanceSession) == 1


async def test_clear_round_trip(client, teacher_headers):
    query = {"subject": "Math", "start": "2025-09-01", "end": "2025-09-30"}
    await client.put(TEACHER_URL, headers=teacher_headers, json={
        "subject": "Math",
        "entries": [{"studentId": "S-00001", "date": MONDAY, "present": "No"}],
    })
    listed = await client.get(TEACHER_URL, headers=teacher_headers, params=query)
    assert listed.json() == {
        "success": True,
        "records": [{"studentId": "S-00001", "date": MONDAY, "present": "No"}],
    }

    await client.put(TEACHER_URL, headers=teacher_headers, json={
        "subject": "Math",
        "entries": [{"studentId": "S-00001", "date": MONDAY, "present": None}],
    })
    listed = await client.get(TEACHER_URL, headers=teacher_headers, params=query)
    assert listed.json() == {"success": True, "records": []}


async def test_numeric_student_ids_resolve_to_stored_ids(client, teacher_headers):
    await client.put(TEACHER_URL, headers=teacher_headers, json={
        "subject": "Math",
        "entries": [
            {"studentId": 42, "date": MONDAY, "present": "Yes"},
            {"studentId": "S-00002", "date": MONDAY, "present": "Yes"},
        ],
    })

    response = await client.get(TEACHER_URL, headers=teacher_headers, params={
        "subject": "Math", "start": MONDAY, "end": MONDAY, "studentIds": "42",
    })
    assert response.json()["records"] == [{"studentId": "S-00042", "date": MONDAY, "present": "Yes"}]


async def test_malformed_entries_are_dropped(client, teacher_headers):
    response = await client.put(TEACHER_URL, headers=teacher_headers, json={
        "subject": "Math",
        "entries": [
            "not-an-entry",
            {"date": MONDAY, "present": "Yes"},
            {"studentId": "S-00001", "date": "2025-02-30", "present": "Yes"},
            {"studentId": "S-00001", "date": MONDAY, "present": "Maybe"},
        ],
    })
    # "Maybe" clears the mark; nothing to delete, but the entry is applied
    assert response.json()["updated"] == 1


async def test_list_hides_records_no_longer_on_schedule(client, teacher_headers, session_factory):
    async with session_factory() as db:
        session = AttendanceSession(session_date=date(2025, 9, 9), subject_id=1, grade_id=1)
        db.add(session)
        await db.flush()
        db.add(AttendanceRecord(session_id=session.session_id, student_id="S-00001", status="Present"))
        await db.commit()

    response = await client.get(TEACHER_URL, headers=teacher_headers, params={
        "subject": "Math", "start": "2025-09-01", "end": "2025-09-30",
    })
    assert response.json() == {"success": True, "records": []}


async def test_no_valid_entries(client, teacher_headers):
    response = await client.put(TEACHER_URL, headers=teacher_headers, json={
        "subject": "Math", "entries": "nope",
    })
    assert response.status_code == 200
    assert response.json()["reason"] == "No valid entries to process."
    assert response.json()["updated"] == 0


async def test_unconfigured_subject_is_not_an_error(client, teacher_headers, session_factory):
    entries = [{"studentId": "S-00001", "date": MONDAY, "present": "Yes"}]

    english = await client.put(TEACHER_URL, headers=teacher_headers, json={
        "subject": "English", "entries": entries,
    })
    assert english.status_code == 200
    assert english.json()["success"] is True
    assert english.json()["reason"] == "Remedial schedule is not configured for this subject."

    filipino = await client.put(TEACHER_URL, headers=teacher_headers, json={
        "subject": "Filipino", "entries": entries,
    })
    assert filipino.json()["reason"] == "Subject not found."

    listed = await client.get(TEACHER_URL, headers=teacher_headers, params={
        "subject": "English", "start": "2025-09-01", "end": "2025-09-30",
    })
    assert listed.json() == {"success": True, "records": []}
    assert await count_rows(session_factory, AttendanceSession) == 0


async def test_invalid_subject(client, teacher_headers):
    put = await client.put(TEACHER_URL, headers=teacher_headers, json={"subject": "Science", "entries": []})
    assert put.status_code == 400
    assert put.json()["success"] is False
    assert put.json()["error"] == "Invalid subject."

    get = await client.get(TEACHER_URL, headers=teacher_headers, params={
        "subject": "Science", "start": "2025-09-01", "end": "2025-09-30",
    })
    assert get.status_code == 400
    assert get.json()["error"] == "Invalid subject."


async def test_invalid_range_dates(client, teacher_headers):
    start = await client.get(TEACHER_URL, headers=teacher_headers, params={
        "subject": "Math", "start": "yesterday", "end": "2025-09-30",
    })
    assert start.status_code == 400
    assert start.json()["error"] == "Invalid start date."

    end = await client.get(TEACHER_URL, headers=teacher_headers, params={
        "subject": "Math", "start": "2025-09-01",
    })
    assert end.status_code == 400
    assert end.json()["error"] == "Invalid end date."


async def test_malformed_body(client, teacher_headers):
    response = await client.put(
        TEACHER_URL,
        headers={**teacher_headers, "Content-Type": "application/json"},
        content="{not json",
    )
    assert response.status_code == 400
    assert response.json()["error"] == "Invalid payload."

    response = await client.put(TEACHER_URL, headers=teacher_headers, json=["Math"])
    assert response.status_code == 400
    assert response.json()["error"] == "Invalid payload."


async def test_teacher_resolved_from_user_id(client):
    # No teacher_id claim: the teacher row is looked up by user id
    headers = auth_headers(10, "teacher")
    response = await client.put(TEACHER_URL, headers=headers, json={
        "subject": "Math",
        "entries": [{"studentId": "S-00001", "date": MONDAY, "present": "Yes"}],
    })
    assert response.status_code == 200
    assert response.json()["gradeId"] == 1


async def test_missing_teacher_assignment(client, session_factory):
    headers = auth_headers(99, "teacher")
    response = await client.put(TEACHER_URL, headers=headers, json={
        "subject": "Math",
        "entries": [{"studentId": "S-00001", "date": MONDAY, "present": "Yes"}],
    })
    assert response.status_code == 400
    assert response.json()["success"] is False
    assert response.json()["error"] == "Teacher assignment is missing."
    assert await count_rows(session_factory, AttendanceSession) == 0


async def test_missing_grade_assignment(client, session_factory):
    headers = auth_headers(11, "teacher", teacher_id="T-002")
    response = await client.put(TEACHER_URL, headers=headers, json={
        "subject": "Math",
        "entries": [{"studentId": "S-00001", "date": MONDAY, "present": "Yes"}],
    })
    assert response.status_code == 400
    assert response.json()["error"] == "Grade assignment is missing for this teacher."
    assert await count_rows(session_factory, AttendanceSession) == 0


async def test_failure_mid_batch_rolls_everything_back(client, teacher_headers, session_factory, monkeypatch):
    async def failing_notify(self, **kwargs):
        raise SQLAlchemyError("notification table unavailable")

    monkeypatch.setattr(ParentNotifier, "notify_absence", failing_notify)

    response = await client.put(TEACHER_URL, headers=teacher_headers, json={
        "subject": "Math",
        "entries": [
            {"studentId": "S-00001", "date": MONDAY, "present": "Yes"},
            {"studentId": "S-00002", "date": WEDNESDAY, "present": "Yes"},
            {"studentId": "S-00003", "date": WEDNESDAY, "present": "No"},
        ],
    })

    assert response.status_code == 500
    assert response.json()["success"] is False
    assert await count_rows(session_factory, AttendanceSession) == 0
    assert await count_rows(session_factory, AttendanceRecord) == 0
    assert await count_rows(session_factory, ParentNotification) == 0


async def test_no_session_reason(client, teacher_headers, monkeypatch):
    from remedial_attendance.services.reconciler import SessionReconciler

    async def no_session(self, iso):
        return None

    monkeypatch.setattr(SessionReconciler, "resolve_session", no_session)
    response = await client.put(TEACHER_URL, headers=teacher_headers, json={
        "subject": "Math",
        "entries": [
            {"studentId": "S-00001", "date": MONDAY, "present": "Yes"},
            {"studentId": "S-00001", "date": TUESDAY, "present": "Yes"},
        ],
    })
    data = response.json()
    assert data["skippedNoSession"] == 1
    assert data["skippedNotAllowed"] == 1
    assert data["reason"] == f"{REASON_NOT_ALLOWED} {REASON_NO_SESSION}"


async def test_master_teacher_sessions_are_subject_wide(client, master_teacher_headers, session_factory):
    response = await client.put(MASTER_URL, headers=master_teacher_headers, json={
        "subject": "Mathematics",
        "entries": [
            {"studentId": "S-00001", "date": MONDAY, "present": "No"},
            {"studentId": "S-00002", "date": MONDAY, "present": "Yes"},
        ],
    })

    data = response.json()
    assert response.status_code == 200
    assert data["updated"] == 2
    assert data["sessionsCreated"] == 1
    assert "gradeId" not in data

    async with session_factory() as db:
        session = (await db.execute(select(AttendanceSession))).scalar_one()
    assert session.grade_id is None
    assert session.created_by_user_id == "MT-001"
    assert await count_rows(session_factory, ParentNotification) == 1

    listed = await client.get(MASTER_URL, headers=master_teacher_headers, params={
        "subject": "Math", "start": MONDAY, "end": MONDAY,
    })
    assert [r["studentId"] for r in listed.json()["records"]] == ["S-00001", "S-00002"]


async def test_authentication_required(client):
    response = await client.get(TEACHER_URL, params={"subject": "Math"})
    assert response.status_code == 401
    assert response.json()["success"] is False


async def test_role_is_enforced(client, master_teacher_headers, teacher_headers):
    assert (await client.put(TEACHER_URL, headers=master_teacher_headers, json={})).status_code == 403
    assert (await client.put(MASTER_URL, headers=teacher_headers, json={})).status_code == 403


async def test_token_in_cookie(client):
    token = auth_headers(10, "teacher", teacher_id="T-001")["Authorization"].split(" ", 1)[1]
    client.cookies.set("access_token", token)
    response = await client.get(TEACHER_URL, params={
        "subject": "Math", "start": "2025-09-01", "end": "2025-09-30",
    })
    assert response.status_code == 200


async def test_non_ascii_student_ids_are_stored_as_given(client, teacher_headers, session_factory):
    response = await client.put(TEACHER_URL, headers=teacher_headers, json={
        "subject": "Math",
        "entries": [
            {"studentId": "²", "date": MONDAY, "present": "Yes"},
            {"studentId": "٤٢", "date": MONDAY, "present": "No"},
        ],
    })
    assert response.status_code == 200
    assert response.json()["updated"] == 2

    async with session_factory() as db:
        stored = set((await db.execute(select(AttendanceRecord.student_id))).scalars().all())
    assert stored == {"²", "٤٢"}

    listed = await client.get(TEACHER_URL, headers=teacher_headers, params={
        "subject": "Math", "start": MONDAY, "end": MONDAY, "studentIds": "²",
    })
    assert listed.status_code == 200
    assert listed.json()["records"] == [{"studentId": "²", "date": MONDAY, "present": "Yes"}]
