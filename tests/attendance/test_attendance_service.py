import csv
import io
from datetime import date, datetime, time

import pytest

from school_attendance.attendance.session_codes import SessionCodeAllocator
from school_attendance.attendance.service import AttendanceService
from school_attendance.core.enums import AttendanceStatus
from school_attendance.core.exceptions import InvalidCodeError, NotFoundError, ValidationError, WrongDateError

DAY = date(2024, 1, 10)


def at(hh, mm, ss=0, day=DAY):
    return datetime(day.year, day.month, day.day, hh, mm, ss)


@pytest.fixture
def service(container):
    return container.attendance_service


@pytest.fixture
def code(service, cs101):
    course, _ = cs101
    return service.open_session(course_id=course.course_id, day=DAY, start_time="09:00", end_time="10:00")


def test_open_session_returns_same_code_for_same_course_and_date(service, db, cs101, code):
    course, _ = cs101

    again = service.open_session(course_id=course.course_id, day="2024-01-10", start_time="09:30", end_time="10:30")

    assert again == code
    assert len(db.sessions) == 1
    session = next(iter(db.sessions.values()))
    assert (session.start_time, session.end_time) == (time(9, 30), time(10, 30))


def test_open_session_for_unknown_course(service):
    with pytest.raises(NotFoundError):
        service.open_session(course_id=999, day=DAY, start_time="09:00")


def test_open_session_draws_a_fresh_code_on_collision(repos, db, cs101):
    course, _ = cs101
    other = db.add_course("CS102")
    tokens = iter(["ABC123", "ABC123", "DEF456"])
    svc = AttendanceService(
        repos.attendance,
        repos.sessions,
        repos.courses,
        repos.students,
        repos.excuses,
        session_codes=SessionCodeAllocator(token_factory=lambda: next(tokens)),
    )

    first = svc.open_session(course_id=course.course_id, day=DAY, start_time="09:00")
    second = svc.open_session(course_id=other.course_id, day=DAY, start_time="11:00")

    assert (first, second) == ("ABC123", "DEF456")


def test_mark_unknown_code(service, cs101, code):
    _, (alice, _, _) = cs101

    with pytest.raises(InvalidCodeError):
        service.mark_by_code(user_id=alice.user_id, code="ZZZZZZ", now=at(9, 5))


def test_mark_on_other_day_is_rejected(service, cs101, code):
    _, (alice, _, _) = cs101

    with pytest.raises(WrongDateError):
        service.mark_by_code(user_id=alice.user_id, code=code, now=at(9, 5, day=date(2024, 1, 11)))


def test_code_is_case_insensitive(service, db, cs101, code):
    course, (alice, _, _) = cs101

    status = service.mark_by_code(user_id=alice.user_id, code=f" {code.lower()} ", now=at(9, 1))

    assert status == AttendanceStatus.PRESENT
    assert db.record(alice.user_id, course.course_id, DAY).time == "09:01"


@pytest.mark.parametrize(
    "now, expected",
    [
        (at(9, 15, 0), AttendanceStatus.PRESENT),
        (at(9, 15, 30), AttendanceStatus.LATE),
        (at(9, 20), AttendanceStatus.LATE),
    ],
)
def test_grace_boundary(service, cs101, code, now, expected):
    _, (alice, _, _) = cs101

    assert service.mark_by_code(user_id=alice.user_id, code=code, now=now) == expected


def test_marking_twice_overwrites(service, db, cs101, code):
    course, (alice, _, _) = cs101

    service.mark_by_code(user_id=alice.user_id, code=code, now=at(9, 2))
    service.mark_by_code(user_id=alice.user_id, code=code, now=at(9, 40))

    rows = [r for r in db.attendance.values() if r.user_id == alice.user_id]
    assert len(rows) == 1
    assert (rows[0].status, rows[0].time) == (AttendanceStatus.LATE, "09:40")


def test_cs101_walkthrough(service, container, db, cs101, code):
    course, (alice, bob, carol) = cs101

    assert service.mark_by_code(user_id=alice.user_id, code=code, now=at(9, 20)) == AttendanceStatus.LATE
    assert service.mark_by_code(user_id=bob.user_id, code=code, now=at(9, 10)) == AttendanceStatus.PRESENT

    swept = container.auto_absent_sweep.run_once(now=at(10, 5))

    assert swept == {"CS101": 1}
    assert db.record(alice.user_id, course.course_id, DAY).time == "09:20"
    carol_rec = db.record(carol.user_id, course.course_id, DAY)
    assert (carol_rec.status, carol_rec.time) == (AttendanceStatus.ABSENT, "--")


def test_update_record_promotes_same_day_present(service, db, cs101):
    course, (alice, _, _) = cs101
    service.roster_for(DAY, course_id=course.course_id)

    stored = service.update_record(
        day=DAY, student_code="2024-001", course_id=course.course_id, status="Present", now=at(9, 30)
    )

    assert stored == AttendanceStatus.LATE
    assert db.record(alice.user_id, course.course_id, DAY).time == "09:30"


def test_update_record_uses_session_start_override(service, cs101):
    course, _ = cs101
    service.roster_for(DAY, course_id=course.course_id)

    stored = service.update_record(
        day=DAY,
        student_code="2024-001",
        course_id=course.course_id,
        status="Present",
        session_start_time="09:20",
        now=at(9, 30),
    )

    assert stored == AttendanceStatus.PRESENT


def test_update_record_past_date_keeps_status_and_clears_time(service, db, cs101):
    course, (alice, _, _) = cs101
    service.roster_for(DAY, course_id=course.course_id)
    later = at(15, 0, day=date(2024, 1, 12))

    assert service.update_record(
        day=DAY, student_code="2024-001", course_id=course.course_id, status="Present", now=later
    ) == AttendanceStatus.PRESENT
    service.update_record(day=DAY, student_code="2024-001", course_id=course.course_id, status="Excused", now=later)

    rec = db.record(alice.user_id, course.course_id, DAY)
    assert (rec.status, rec.time) == (AttendanceStatus.EXCUSED, "--")


def test_update_record_needs_existing_row(service, cs101):
    course, _ = cs101

    with pytest.raises(NotFoundError):
        service.update_record(day=DAY, student_code="2024-001", course_id=course.course_id, status="Absent", now=at(9, 0))
    with pytest.raises(NotFoundError):
        service.update_record(day=DAY, student_code="nope", course_id=course.course_id, status="Absent", now=at(9, 0))
    with pytest.raises(ValidationError):
        service.update_record(day=DAY, student_code="2024-001", course_id=course.course_id, status="Gone", now=at(9, 0))


def test_roster_reconciles_and_orders_by_student_code(service, cs101):
    course, _ = cs101

    rows = service.roster_for(DAY, course_id=course.course_id)

    assert [r["student_code"] for r in rows] == ["2024-001", "2024-002", "2024-003"]
    assert {r["status"] for r in rows} == {"Absent"}
    assert [r["student_code"] for r in service.roster_for(DAY, course_id=course.course_id, year_level="2")] == ["2024-003"]


def test_roster_requires_course_or_room(service):
    with pytest.raises(ValidationError):
        service.roster_for(DAY)


def test_delete_session_removes_its_attendance(service, db, cs101, code):
    course, (alice, _, _) = cs101
    service.mark_by_code(user_id=alice.user_id, code=code, now=at(9, 1))
    service.roster_for(DAY, course_id=course.course_id)
    session_id = next(iter(db.sessions))

    service.delete_session(session_id)

    assert db.sessions == {}
    assert not [r for r in db.attendance.values() if r.course_id == course.course_id and r.day == DAY]

    service.open_session(course_id=course.course_id, day=DAY, start_time="09:00")
    assert len(db.sessions) == 1
    assert {r["status"] for r in service.roster_for(DAY, course_id=course.course_id)} == {"Absent"}

    with pytest.raises(NotFoundError):
        service.delete_session(session_id)


def test_export_csv_quotes_every_field(service, cs101, code):
    course, (alice, _, _) = cs101
    service.mark_by_code(user_id=alice.user_id, code=code, now=at(9, 3))
    service.roster_for(DAY, course_id=course.course_id)

    text = service.export_csv("2024-01-10", course.course_id)

    lines = text.splitlines()
    assert lines[0] == '"Code","Name","Time","Status","Room Name","Room Number"'
    assert lines[1] == '"2024-001","Alice","09:03","Present","Lab","101"'
    assert len(list(csv.reader(io.StringIO(text)))) == 4


def test_dashboard_summary_counts_today(service, db, cs101, code):
    _, (alice, bob, _) = cs101
    service.mark_by_code(user_id=alice.user_id, code=code, now=at(9, 3))
    service.mark_by_code(user_id=bob.user_id, code=code, now=at(9, 30))

    summary = service.dashboard_summary(today=DAY)

    assert summary["totalStudents"] == 3
    assert summary["pendingExcuses"] == 0
    assert summary["todaysSummary"] == {"Present": 1, "Late": 1, "Absent": 0, "Excused": 0}


def test_session_qr_png(service, code):
    png = service.session_qr_png(code.lower())

    assert png.startswith(b"\x89PNG")
    with pytest.raises(InvalidCodeError):
        service.session_qr_png("NOPE00")
