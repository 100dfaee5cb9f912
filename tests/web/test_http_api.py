from datetime import datetime

import pytest
from werkzeug.security import generate_password_hash

from school_attendance.core.enums import Role
from school_attendance.main import create_app


@pytest.fixture
def app(container):
    return create_app("school_attendance.config.testing", container=container)


@pytest.fixture
def client(app):
    return app.test_client()


def login_as(client, user, *, student_code=None):
    with client.session_transaction() as sess:
        sess["user"] = {
            "id": user.user_id,
            "username": user.username,
            "name": user.name,
            "role": user.role.value,
            "student_code": student_code,
        }


def test_session_reports_needs_setup_until_admin_exists(client, db):
    assert client.get("/api/session").get_json() == {"authenticated": False, "needsSetup": True}

    resp = client.post("/api/setup", json={"name": "Root", "username": "root", "password": "pw"})
    assert resp.status_code == 201

    assert client.get("/api/session").get_json() == {"authenticated": False}
    assert client.post("/api/setup", json={"name": "X", "username": "x", "password": "pw"}).status_code == 403


def test_login_success_and_failure_are_audited(client, db):
    db.add_user(username="teacher", role=Role.TEACHER, name="Tea", password_hash=generate_password_hash("1234"))

    bad = client.post("/api/login", json={"username": "teacher", "password": "nope"})
    assert bad.status_code == 401
    assert bad.get_json() == {"error": "Invalid credentials."}

    ok = client.post("/api/login", json={"username": "teacher", "password": "1234"})
    assert ok.get_json() == {"success": True}
    assert [e.action for e in db.audit] == ["LOGIN_FAIL", "LOGIN_SUCCESS"]


def test_guards(client, db):
    assert client.get("/api/students").status_code == 401

    student = db.add_student("Ann", "A-1", username="ann")
    login_as(client, student, student_code="A-1")

    resp = client.post("/api/attendance/session", json={"course_id": 1, "date": "2024-01-10", "start_time": "09:00"})
    assert resp.status_code == 403
    assert resp.get_json() == {"error": "Forbidden: Insufficient permissions"}


def test_domain_errors_map_to_status_codes(client, db, cs101):
    teacher = db.add_user(username="t", role=Role.TEACHER, name="T")
    login_as(client, teacher)

    missing = client.post("/api/attendance/session", json={"course_id": 999, "date": "2024-01-10", "start_time": "09:00"})
    assert missing.status_code == 404
    assert missing.get_json() == {"error": "Course not found."}

    invalid = client.get("/api/attendance/2024-01-10")
    assert invalid.status_code == 400
    assert invalid.get_json() == {"error": "Course ID or Room ID is required."}


def test_unknown_code_is_404_for_students(client, db, cs101):
    _, (alice, _, _) = cs101
    login_as(client, alice, student_code="2024-001")

    resp = client.post("/api/student/attendance/mark", json={"code": "nope00"})

    assert resp.status_code == 404
    assert resp.get_json() == {"error": "Invalid attendance code."}


def test_teacher_opens_session_and_student_marks(client, db, cs101):
    course, (alice, _, _) = cs101
    teacher = db.add_user(username="t", role=Role.TEACHER, name="T")
    today = datetime.now().date().isoformat()

    login_as(client, teacher)
    opened = client.post("/api/attendance/session", json={"course_id": course.course_id, "date": today, "start_time": "00:00"})
    code = opened.get_json()["code"]
    assert opened.get_json()["success"] is True
    assert db.audit[-1].action == "CREATE_ATTENDANCE_SESSION"

    login_as(client, alice, student_code="2024-001")
    marked = client.post("/api/student/attendance/mark", json={"code": code})

    assert marked.status_code == 200
    assert marked.get_json()["status"] in ("Present", "Late")


def test_roster_and_csv_export(client, db, cs101):
    course, _ = cs101
    teacher = db.add_user(username="t", role=Role.TEACHER, name="T")
    login_as(client, teacher)

    roster = client.get(f"/api/attendance/2024-01-10?course_id={course.course_id}").get_json()
    assert [r["student_code"] for r in roster["data"]] == ["2024-001", "2024-002", "2024-003"]

    export = client.get(f"/api/attendance/2024-01-10/csv?course_id={course.course_id}")
    assert export.mimetype == "text/csv"
    assert export.get_data(as_text=True).startswith('"Code","Name","Time","Status","Room Name","Room Number"')


def test_unexpected_errors_are_hidden(app, client, db):
    @app.route("/boom")
    def boom():
        raise RuntimeError("secret detail")

    resp = client.get("/boom")

    assert resp.status_code == 500
    assert resp.get_json() == {"error": "An internal server error occurred."}


def test_unknown_route_is_json_404(client):
    resp = client.get("/api/does-not-exist")

    assert resp.status_code == 404
    assert "error" in resp.get_json()


def test_dashboard_summary(client, db, cs101):
    teacher = db.add_user(username="t", role=Role.TEACHER, name="T")
    login_as(client, teacher)

    data = client.get("/api/dashboard-summary").get_json()["data"]

    assert data["totalStudents"] == 3
    assert set(data["todaysSummary"]) == {"Present", "Late", "Absent", "Excused"}


def test_announcements_are_staff_posted_and_visible_to_students(client, db):
    teacher = db.add_user(username="t", role=Role.TEACHER, name="T")
    student = db.add_student("Ann", "A-1", username="ann")

    login_as(client, student, student_code="A-1")
    denied = client.post("/api/announcements", json={"title": "Hi", "content": "There"})
    assert denied.status_code == 403

    login_as(client, teacher)
    assert client.post("/api/announcements", json={"title": "Hi", "content": "There"}).status_code == 201
    assert client.post("/api/announcements", json={"title": "", "content": "x"}).status_code == 400

    login_as(client, student, student_code="A-1")
    listed = client.get("/api/announcements").get_json()["data"]
    assert [a["title"] for a in listed] == ["Hi"]
    assert db.audit[-1].action == "CREATE_ANNOUNCEMENT"


def test_summary_by_code_is_zero_filled(client, db, cs101):
    teacher = db.add_user(username="t", role=Role.TEACHER, name="T")
    login_as(client, teacher)

    resp = client.get("/api/summary/2024-001?start=2024-01-01&end=2024-01-31")

    assert resp.get_json()["data"]["summary"] == {"Present": 0, "Late": 0, "Absent": 0, "Excused": 0}
