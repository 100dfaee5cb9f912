from datetime import datetime, timedelta

import pytest
from werkzeug.security import generate_password_hash

from school_attendance.core.enums import Role
from school_attendance.core.exceptions import AuthenticationError, AuthorizationError, ValidationError

NOW = datetime(2024, 1, 10, 8, 0)


@pytest.fixture
def auth(container):
    return container.auth_service


def test_authenticate_returns_session_payload(auth, db):
    db.add_user(username="teacher", role=Role.TEACHER, name="Tea", password_hash=generate_password_hash("1234"))

    user = auth.authenticate("teacher", "1234")

    assert user.to_session()["role"] == "teacher"
    with pytest.raises(AuthenticationError):
        auth.authenticate("teacher", "wrong")
    with pytest.raises(AuthenticationError):
        auth.authenticate("ghost", "1234")


def test_student_without_password_cannot_log_in(auth, db):
    db.add_student("Ann", "A-1", username="ann")

    with pytest.raises(AuthenticationError):
        auth.authenticate("ann", "")


def test_reset_token_expires(auth, db):
    db.add_user(username="reg", role=Role.REGISTRAR, name="Reg", password_hash=generate_password_hash("old"))

    ticket = auth.request_password_reset("reg", now=NOW)
    assert len(ticket.token) == 64

    with pytest.raises(ValidationError):
        auth.reset_password(token=ticket.token, new_password="new", now=NOW + timedelta(minutes=61))

    auth.reset_password(token=ticket.token, new_password="new", now=NOW + timedelta(minutes=30))
    assert auth.authenticate("reg", "new").username == "reg"
    with pytest.raises(ValidationError):
        auth.reset_password(token=ticket.token, new_password="again", now=NOW + timedelta(minutes=31))


def test_reset_request_for_unknown_user_is_silent(auth):
    assert auth.request_password_reset("nobody", now=NOW) is None


def test_change_password_checks_current(auth, db):
    user = db.add_user(username="t", role=Role.TEACHER, name="T", password_hash=generate_password_hash("a"))

    with pytest.raises(AuthorizationError):
        auth.change_password(user_id=user.user_id, current_password="b", new_password="c")

    auth.change_password(user_id=user.user_id, current_password="a", new_password="c")
    assert auth.authenticate("t", "c").user_id == user.user_id


def test_staff_roles_are_limited(container, db):
    staff = container.staff_service

    with pytest.raises(ValidationError):
        staff.create_staff(name="X", username="x", password="pw", role="admin")

    staff.create_staff(name="T", username="t", password="pw", role="teacher")
    assert [s["username"] for s in staff.list_staff()] == ["t"]
