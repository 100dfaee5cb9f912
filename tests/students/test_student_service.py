from datetime import date

import pytest

from school_attendance.core.enums import AttendanceStatus
from school_attendance.core.exceptions import AuthorizationError, ConflictError, NotFoundError


def test_import_csv_creates_rows_and_collects_errors(container, db):
    db.add_student("Existing", "2025-900")
    text = (
        "name,age,gender,student_code\n"
        "Ann,17,F,\n"
        ",18,M,\n"
        "Dup,18,M,2025-900\n"
        "Bad Age,old,M,\n"
        "Ben,18,M,B-7\n"
    )

    result = container.student_service.import_csv(text)

    assert result.total_rows == 5
    assert [c["student_code"] for c in result.created] == ["2025-001", "B-7"]
    assert [e["student"] for e in result.errors] == ["Unknown Row", "Dup", "Bad Age"]
    assert "2025-900" in result.errors[1]["error"]


def test_update_can_change_code_unless_taken(container, db):
    svc = container.student_service
    db.add_student("Ann", "A-1")
    db.add_student("Ben", "B-1")

    with pytest.raises(ConflictError):
        svc.update("A-1", {"name": "Ann", "age": 17, "gender": "F", "student_code": "B-1"})

    svc.update("A-1", {"name": "Annie", "age": 17, "gender": "F", "student_code": "A-2"})
    student = container.repos.students.get_by_code("A-2")
    assert student.name == "Annie"


def test_update_and_delete_unknown_student(container):
    with pytest.raises(NotFoundError):
        container.student_service.update("nope", {"name": "X", "age": 1, "gender": "F"})
    with pytest.raises(NotFoundError):
        container.student_service.delete("nope")


def test_search_paginates(container, db):
    for i in range(12):
        db.add_student(f"Student {i:02d}", f"S-{i:02d}")

    page = container.student_service.search(page=2, limit=5)

    assert [s["student_code"] for s in page["students"]] == ["S-05", "S-06", "S-07", "S-08", "S-09"]
    assert page["pagination"]["totalPages"] == 3
    assert page["pagination"]["totalStudents"] == 12


def test_summary_counts_each_status(container, db, cs101):
    course, (alice, _, _) = cs101
    repo = container.repos.attendance
    repo.upsert_mark(user_id=alice.user_id, course_id=course.course_id, day=date(2024, 1, 8), status=AttendanceStatus.LATE, time_str="09:30")
    repo.upsert_mark(user_id=alice.user_id, course_id=course.course_id, day=date(2024, 1, 10), status=AttendanceStatus.PRESENT, time_str="09:01")

    out = container.student_service.summary("2024-001", start=date(2024, 1, 1), end=date(2024, 1, 31))

    assert out["name"] == "Alice"
    assert out["summary"] == {"Present": 1, "Late": 1, "Absent": 0, "Excused": 0}


def test_self_setup_sets_credentials_once(container, db):
    db.add_student("Ann", "A-1")
    svc = container.student_service

    assert svc.validate_setup("A-1") == "Ann"
    svc.complete_setup(student_code="A-1", username="ann", password="pw")

    assert container.repos.users.get_by_username("ann").student_code == "A-1"
    with pytest.raises(ConflictError):
        svc.validate_setup("A-1")
    with pytest.raises(AuthorizationError):
        svc.complete_setup(student_code="A-1", username="ann2", password="pw")


def test_public_lookup_unknown_code(container):
    with pytest.raises(NotFoundError):
        container.student_service.public_lookup("missing")


def test_summary_lists_every_status_even_when_unseen(container, db, cs101):
    course, (alice, _, _) = cs101
    container.repos.attendance.upsert_mark(
        user_id=alice.user_id, course_id=course.course_id, day=date(2024, 1, 10), status=AttendanceStatus.PRESENT, time_str="09:00"
    )

    out = container.student_service.summary("2024-001", start=date(2024, 1, 1), end=date(2024, 1, 31))

    assert out["summary"] == {"Present": 1, "Late": 0, "Absent": 0, "Excused": 0}
