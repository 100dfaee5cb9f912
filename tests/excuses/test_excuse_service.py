from datetime import date

import pytest

from school_attendance.core.enums import AttendanceStatus, ExcuseStatus, Role
from school_attendance.core.exceptions import AuthorizationError, NotFoundError, ValidationError

DAY = date(2024, 1, 10)


@pytest.fixture
def excuses(container):
    return container.excuse_service


def test_past_dates_are_rejected(excuses, cs101):
    _, (alice, _, _) = cs101

    with pytest.raises(ValidationError):
        excuses.submit(user_id=alice.user_id, day="2024-01-09", reason="sick", today=DAY)


def test_resubmitting_while_pending_replaces_reason(excuses, db, cs101):
    _, (alice, _, _) = cs101

    excuses.submit(user_id=alice.user_id, day=DAY, reason="sick", today=DAY)
    excuses.submit(user_id=alice.user_id, day=DAY, reason="doctor", today=DAY)

    assert [e.reason for e in db.excuses.values()] == ["doctor"]


def test_processed_excuse_cannot_be_resubmitted(excuses, db, cs101):
    _, (alice, _, _) = cs101
    excuses.submit(user_id=alice.user_id, day=DAY, reason="sick", today=DAY)
    excuse_id = next(iter(db.excuses))
    excuses.deny(excuse_id, processed_by=None)

    with pytest.raises(AuthorizationError):
        excuses.submit(user_id=alice.user_id, day=DAY, reason="really sick", today=DAY)
    assert db.excuses[excuse_id].reason == "sick"


def test_approval_excuses_every_course_that_day(container, excuses, db, cs101):
    course, (alice, bob, _) = cs101
    other = db.add_course("ART1")
    db.enroll(alice.user_id, other.course_id)
    container.reconciler.ensure_rows(DAY, course_id=course.course_id)
    container.reconciler.ensure_rows(DAY, course_id=other.course_id)
    container.repos.attendance.upsert_mark(
        user_id=alice.user_id, course_id=course.course_id, day=DAY, status=AttendanceStatus.LATE, time_str="09:30"
    )
    registrar = db.add_user(username="reg", role=Role.REGISTRAR, name="Reg")
    excuses.submit(user_id=alice.user_id, day=DAY, reason="sick", today=DAY)
    excuse_id = next(iter(db.excuses))

    approved = excuses.approve(excuse_id, processed_by=registrar.user_id)

    assert approved.status == ExcuseStatus.APPROVED
    for cid in (course.course_id, other.course_id):
        rec = db.record(alice.user_id, cid, DAY)
        assert (rec.status, rec.time) == (AttendanceStatus.EXCUSED, "--")
    assert db.record(bob.user_id, course.course_id, DAY).status == AttendanceStatus.ABSENT
    assert excuses.list_history()[0].processor_name == "Reg"


def test_approving_twice_is_safe(container, excuses, db, cs101):
    course, (alice, _, _) = cs101
    excuses.submit(user_id=alice.user_id, day=DAY, reason="sick", today=DAY)
    excuse_id = next(iter(db.excuses))
    excuses.approve(excuse_id, processed_by=None)

    # A row created after the first approval is excused by the second
    container.reconciler.ensure_rows(DAY, course_id=course.course_id)
    excuses.approve(excuse_id, processed_by=None)

    assert db.excuses[excuse_id].status == ExcuseStatus.APPROVED
    assert db.record(alice.user_id, course.course_id, DAY).status == AttendanceStatus.EXCUSED


def test_update_only_while_pending(excuses, db, cs101):
    _, (alice, _, _) = cs101
    excuses.submit(user_id=alice.user_id, day=DAY, reason="sick", today=DAY)
    excuse_id = next(iter(db.excuses))

    excuses.update(excuse_id, reason="flu", day="2024-01-11")
    assert db.excuses[excuse_id].day == date(2024, 1, 11)

    excuses.approve(excuse_id, processed_by=None)
    with pytest.raises(NotFoundError):
        excuses.update(excuse_id, reason="late edit", day=DAY)


def test_unknown_excuse(excuses):
    with pytest.raises(NotFoundError):
        excuses.approve(404, processed_by=None)
    with pytest.raises(NotFoundError):
        excuses.delete(404)
