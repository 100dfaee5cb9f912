from __future__ import annotations

from dataclasses import dataclass
from datetime import time
from typing import Optional

from ..common.datetime_utils import format_hhmm


@dataclass(frozen=True)
class Room:
    room_id: int
    name: str
    room_number: str

    def to_dict(self) -> dict:
        return {"id": self.room_id, "name": self.name, "room_number": self.room_number}


@dataclass(frozen=True)
class Course:
    course_id: int
    code: str
    name: str
    room_id: Optional[int] = None
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    days: Optional[str] = None
    room_name: Optional[str] = None
    room_number: Optional[str] = None

    @property
    def day_tags(self) -> tuple[str, ...]:
        """Weekday tags the course meets on, e.g. ``("Mon", "Wed")``."""
        if not self.days:
            return ()
        return tuple(d.strip() for d in self.days.split(",") if d.strip())

    def to_dict(self) -> dict:
        return {
            "id": self.course_id,
            "code": self.code,
            "name": self.name,
            "room_id": self.room_id,
            "start_time": format_hhmm(self.start_time) if self.start_time else None,
            "end_time": format_hhmm(self.end_time) if self.end_time else None,
            "days": self.days,
            "room_name": self.room_name,
            "room_number": self.room_number,
        }


@dataclass(frozen=True)
class CourseInput:
    code: str
    name: str
    room_id: Optional[int] = None
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    days: Optional[str] = None


@dataclass(frozen=True)
class EnrollmentRow:
    user_id: int
    name: str
    student_code: str
    is_enrolled: bool

    def to_dict(self) -> dict:
        return {
            "user_id": self.user_id,
            "name": self.name,
            "student_code": self.student_code,
            "is_enrolled": 1 if self.is_enrolled else 0,
        }
