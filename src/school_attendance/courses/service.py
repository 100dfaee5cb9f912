from __future__ import annotations

import logging
from typing import Optional

from ..common.datetime_utils import parse_optional_hhmm
from ..common.validators import optional_int, require_int
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from .conflicts import find_conflict
from .model import Course, CourseInput, Room
from .repository import CourseRepository, EnrollmentRepository, RoomRepository

logger = logging.getLogger(__name__)


class RoomService:
    def __init__(self, rooms: RoomRepository, courses: CourseRepository):
        self._rooms = rooms
        self._courses = courses

    @staticmethod
    def _clean(name, room_number) -> tuple[str, str]:
        name = (name or "").strip() if isinstance(name, str) else name
        room_number = (str(room_number).strip() if room_number is not None else "")
        if not name or not room_number:
            raise ValidationError("Room name and number are required.")
        return name, room_number

    def list_rooms(self) -> list[Room]:
        return list(self._rooms.list_all())

    def schedule(self, room_id: int) -> list[dict]:
        return [
            {k: v for k, v in c.to_dict().items() if k in ("code", "name", "start_time", "end_time", "days")}
            for c in self._courses.list_in_room(room_id)
        ]

    def create(self, *, name, room_number) -> Room:
        name, room_number = self._clean(name, room_number)
        if self._rooms.find_by_name_and_number(name=name, room_number=room_number):
            raise ConflictError("A room with this name and number already exists.")
        room_id = self._rooms.create(name=name, room_number=room_number)
        return Room(room_id=room_id, name=name, room_number=room_number)

    def update(self, room_id: int, *, name, room_number) -> None:
        name, room_number = self._clean(name, room_number)
        existing = self._rooms.find_by_name_and_number(name=name, room_number=room_number)
        if existing and existing.room_id != int(room_id):
            raise ConflictError("A room with this name and number already exists.")
        if not self._rooms.update(room_id=int(room_id), name=name, room_number=room_number):
            raise NotFoundError("Room not found.")

    def delete(self, room_id: int) -> None:
        if not self._rooms.delete(int(room_id)):
            raise NotFoundError("Room not found.")


class CourseService:
    """Course catalogue with room double-booking protection."""

    def __init__(self, courses: CourseRepository):
        self._courses = courses

    @staticmethod
    def parse(data: dict) -> CourseInput:
        code = (data.get("code") or "").strip()
        name = (data.get("name") or "").strip()
        if not code or not name:
            raise ValidationError("Course code and name are required.")
        days = data.get("days")
        if isinstance(days, (list, tuple)):
            days = ",".join(days)
        return CourseInput(
            code=code,
            name=name,
            room_id=optional_int(data.get("room_id")),
            start_time=parse_optional_hhmm(data.get("start_time")),
            end_time=parse_optional_hhmm(data.get("end_time")),
            days=(days or "").strip() or None,
        )

    def list_courses(self) -> list[Course]:
        return list(self._courses.list_all())

    def public_list(self) -> list[dict]:
        return [{"id": c.course_id, "code": c.code, "name": c.name} for c in self._courses.list_all()]

    def get(self, course_id: int) -> Course:
        course = self._courses.get_by_id(int(course_id))
        if not course:
            raise NotFoundError("Course not found.")
        return course

    def _check(self, data: CourseInput, *, exclude_course_id: Optional[int] = None) -> None:
        existing = self._courses.get_by_code(data.code)
        if existing and existing.course_id != exclude_course_id:
            raise ConflictError("A course with this code already exists.")

        if data.room_id and data.start_time and data.end_time and data.days:
            clash = find_conflict(data, self._courses.list_in_room(data.room_id), exclude_course_id=exclude_course_id)
            if clash:
                logger.info("Room %s already booked by %s", data.room_id, clash.code)
                raise ConflictError("Schedule conflict: The selected room is already booked for this time.")

    def create(self, data: dict) -> Course:
        course = self.parse(data)
        self._check(course)
        course_id = self._courses.create(course)
        return Course(
            course_id=course_id,
            code=course.code,
            name=course.name,
            room_id=course.room_id,
            start_time=course.start_time,
            end_time=course.end_time,
            days=course.days,
        )

    def update(self, course_id: int, data: dict) -> None:
        course = self.parse(data)
        self._check(course, exclude_course_id=int(course_id))
        if not self._courses.update(int(course_id), course):
            raise NotFoundError("Course not found.")

    def delete(self, course_id: int) -> None:
        if not self._courses.delete(int(course_id)):
            raise NotFoundError("Course not found.")


class EnrollmentService:
    def __init__(self, enrollments: EnrollmentRepository, courses: CourseRepository):
        self._enrollments = enrollments
        self._courses = courses

    def roster(self, course_id: int, *, search: str = "") -> list[dict]:
        return [row.to_dict() for row in self._enrollments.list_for_course(int(course_id), search=search)]

    def enroll(self, course_id: int, student_id) -> None:
        if not self._courses.get_by_id(int(course_id)):
            raise NotFoundError("Course not found.")
        self._enrollments.enroll(user_id=require_int(student_id, "Student"), course_id=int(course_id))

    def unenroll(self, course_id: int, student_id) -> None:
        self._enrollments.unenroll(user_id=require_int(student_id, "Student"), course_id=int(course_id))
