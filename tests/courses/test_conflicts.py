from datetime import time

import pytest

from school_attendance.core.exceptions import ConflictError
from school_attendance.courses.conflicts import find_conflict, overlaps
from school_attendance.courses.model import Course, CourseInput


def existing(**kwargs):
    defaults = dict(course_id=1, code="CS101", name="Intro", room_id=7, start_time=time(9, 0), end_time=time(10, 0), days="Mon,Wed")
    defaults.update(kwargs)
    return Course(**defaults)


def candidate(**kwargs):
    defaults = dict(code="CS102", name="Data", room_id=7, start_time=time(9, 30), end_time=time(10, 30), days="Wed,Fri")
    defaults.update(kwargs)
    return CourseInput(**defaults)


def test_same_room_shared_day_overlapping_times_conflict():
    assert overlaps(candidate(), existing())


@pytest.mark.parametrize(
    "change",
    [
        dict(room_id=8),
        dict(days="Tue,Thu"),
        dict(start_time=time(10, 0), end_time=time(11, 0)),
        dict(start_time=time(8, 0), end_time=time(9, 0)),
        dict(days=None),
    ],
)
def test_no_conflict_when_any_dimension_differs(change):
    assert not overlaps(candidate(**change), existing())


def test_find_conflict_skips_the_course_being_edited():
    courses = [existing()]

    assert find_conflict(candidate(), courses, exclude_course_id=1) is None
    assert find_conflict(candidate(), courses).code == "CS101"


def test_course_service_rejects_double_booking(container, db):
    room = db.add_room("Lab", "101")
    svc = container.course_service
    svc.create({"code": "CS101", "name": "Intro", "room_id": room.room_id, "start_time": "09:00", "end_time": "10:00", "days": ["Mon", "Wed"]})

    with pytest.raises(ConflictError):
        svc.create({"code": "CS102", "name": "Data", "room_id": room.room_id, "start_time": "09:59", "end_time": "11:00", "days": "Wed"})
    with pytest.raises(ConflictError):
        svc.create({"code": "CS101", "name": "Again"})

    later = svc.create({"code": "CS103", "name": "Algo", "room_id": room.room_id, "start_time": "10:00", "end_time": "11:00", "days": "Wed"})
    assert later.days == "Wed"


def test_room_service_rejects_duplicate_name_and_number(container):
    rooms = container.room_service
    rooms.create(name="Lab", room_number="101")

    with pytest.raises(ConflictError):
        rooms.create(name="Lab", room_number=101)
