import pytest
from werkzeug.security import check_password_hash

from school_attendance.core.enums import Role
from school_attendance.core.exceptions import ConflictError, NotFoundError, ValidationError


def signup(**overrides):
    data = {
        "name": "Nina",
        "username": "nina",
        "password": "pw",
        "age": "16",
        "gender": "F",
        "course_id": 0,
        "year_level": "1",
    }
    data.update(overrides)
    return data


@pytest.fixture
def registrations(container):
    return container.registration_service


def test_signup_requires_every_field(registrations):
    with pytest.raises(ValidationError):
        registrations.submit_student(signup(year_level=""))


def test_username_must_be_free_across_accounts_and_pending(registrations, db):
    db.add_user(username="taken", role=Role.TEACHER, name="T")
    registrations.submit_student(signup())

    with pytest.raises(ConflictError):
        registrations.submit_student(signup(username="taken"))
    with pytest.raises(ConflictError):
        registrations.submit_staff({"name": "N2", "username": "nina", "password": "pw"})


def test_approve_student_creates_account_and_enrolls(registrations, db, cs101):
    course, _ = cs101
    reg_id = registrations.submit_student(signup(course_id=course.course_id))

    code = registrations.approve_student(reg_id)

    assert code == "2025-001"
    user = next(u for u in db.users.values() if u.username == "nina")
    assert check_password_hash(user.password_hash, "pw")
    assert (user.user_id, course.course_id) in db.enrollments
    assert db.student_regs == {}


def test_approve_student_rolls_back_when_username_was_claimed(registrations, db):
    reg_id = registrations.submit_student(signup())
    db.add_user(username="nina", role=Role.TEACHER, name="Other")

    with pytest.raises(ConflictError):
        registrations.approve_student(reg_id)

    assert reg_id in db.student_regs
    assert db.meta == {}


def test_staff_signup_becomes_teacher(registrations, db):
    reg_id = registrations.submit_staff({"name": "Sam", "username": "sam", "password": "pw"})

    registrations.approve_staff(reg_id)

    assert user_named(db, "sam").role == Role.TEACHER
    with pytest.raises(NotFoundError):
        registrations.approve_staff(reg_id)


def user_named(db, username):
    return next(u for u in db.users.values() if u.username == username)
