from __future__ import annotations

from datetime import date, datetime, time

import pytest

from fakes import (
    InMemoryAnnouncements,
    InMemoryAttendance,
    InMemoryAuditLogs,
    InMemoryCourses,
    InMemoryDB,
    InMemoryEnrollments,
    InMemoryExcuses,
    InMemoryRegistrations,
    InMemoryRooms,
    InMemorySessions,
    InMemoryStudents,
    InMemoryUsers,
)
from school_attendance.container import Repositories, assemble
from school_attendance.students.codes import StudentCodeAllocator

CLASS_DAY = date(2024, 1, 10)


@pytest.fixture
def db() -> InMemoryDB:
    return InMemoryDB()


@pytest.fixture
def repos(db) -> Repositories:
    return Repositories(
        users=InMemoryUsers(db),
        audit_logs=InMemoryAuditLogs(db),
        students=InMemoryStudents(db),
        rooms=InMemoryRooms(db),
        courses=InMemoryCourses(db),
        enrollments=InMemoryEnrollments(db),
        attendance=InMemoryAttendance(db),
        sessions=InMemorySessions(db),
        excuses=InMemoryExcuses(db),
        registrations=InMemoryRegistrations(db),
        announcements=InMemoryAnnouncements(db),
    )


@pytest.fixture
def container(repos):
    return assemble(repos, student_codes=StudentCodeAllocator(clock=lambda: datetime(2025, 3, 1, 8, 0)))


@pytest.fixture
def cs101(db):
    """CS101 meets Mon and Wed 09:00-10:00 in Lab 101 with three enrolled students."""
    room = db.add_room("Lab", "101")
    course = db.add_course(
        "CS101",
        "Intro to Programming",
        room_id=room.room_id,
        start_time=time(9, 0),
        end_time=time(10, 0),
        days="Mon,Wed",
    )
    students = [
        db.add_student("Alice", "2024-001", year_level="1"),
        db.add_student("Bob", "2024-002", year_level="1"),
        db.add_student("Carol", "2024-003", year_level="2"),
    ]
    for s in students:
        db.enroll(s.user_id, course.course_id)
    return course, students
