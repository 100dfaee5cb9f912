from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Course, CourseInput, EnrollmentRow, Room


class RoomRepository(Protocol):
    def list_all(self) -> Sequence[Room]:
        raise NotImplementedError

    def get_by_id(self, room_id: int) -> Optional[Room]:
        raise NotImplementedError

    def find_by_name_and_number(self, *, name: str, room_number: str) -> Optional[Room]:
        raise NotImplementedError

    def create(self, *, name: str, room_number: str) -> int:
        raise NotImplementedError

    def update(self, *, room_id: int, name: str, room_number: str) -> bool:
        raise NotImplementedError

    def delete(self, room_id: int) -> bool:
        raise NotImplementedError


class CourseRepository(Protocol):
    def list_all(self) -> Sequence[Course]:
        raise NotImplementedError

    def list_in_room(self, room_id: int) -> Sequence[Course]:
        raise NotImplementedError

    def get_by_id(self, course_id: int) -> Optional[Course]:
        raise NotImplementedError

    def get_by_code(self, code: str) -> Optional[Course]:
        raise NotImplementedError

    def create(self, data: CourseInput) -> int:
        raise NotImplementedError

    def update(self, course_id: int, data: CourseInput) -> bool:
        raise NotImplementedError

    def delete(self, course_id: int) -> bool:
        """Delete the course; enrollments, sessions and attendance go with it."""
        raise NotImplementedError


class EnrollmentRepository(Protocol):
    def list_for_course(self, course_id: int, *, search: str = "") -> Sequence[EnrollmentRow]:
        """Every student, flagged by whether they take the course."""
        raise NotImplementedError

    def enroll(self, *, user_id: int, course_id: int) -> None:
        raise NotImplementedError

    def unenroll(self, *, user_id: int, course_id: int) -> None:
        raise NotImplementedError
