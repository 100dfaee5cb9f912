from __future__ import annotations

from dataclasses import dataclass
from datetime import date, time
from typing import Optional

from ..common.datetime_utils import format_hhmm
from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class AttendanceRecord:
    """One student's status in one course on one day."""

    record_id: int
    user_id: int
    course_id: int
    day: date
    time: str
    status: AttendanceStatus


@dataclass(frozen=True)
class AttendanceSession:
    """A course meeting on a given date, redeemable by its short code."""

    session_id: int
    course_id: int
    day: date
    code: str
    start_time: time
    end_time: Optional[time] = None
    room_id: Optional[int] = None
    created_by: Optional[int] = None


@dataclass(frozen=True)
class SessionListRow:
    """Read-model for the recent sessions table."""

    session: AttendanceSession
    course_code: str
    course_name: str
    room_name: Optional[str]
    room_number: Optional[str]
    creator_name: Optional[str]
    present_count: int
    absent_count: int

    def to_dict(self) -> dict:
        s = self.session
        return {
            "id": s.session_id,
            "date": s.day.isoformat(),
            "start_time": format_hhmm(s.start_time),
            "end_time": format_hhmm(s.end_time) if s.end_time else None,
            "code": s.code,
            "room_id": s.room_id,
            "course_id": s.course_id,
            "course_name": self.course_name,
            "course_code": self.course_code,
            "room_name": self.room_name,
            "room_number": self.room_number,
            "creator_name": self.creator_name,
            "present_count": self.present_count,
            "absent_count": self.absent_count,
        }


@dataclass(frozen=True)
class RosterRow:
    record_id: int
    day: date
    time: str
    status: AttendanceStatus
    student_code: str
    name: str
    year_level: Optional[str]
    room_id: Optional[int]
    course_code: str

    def to_dict(self) -> dict:
        return {
            "id": self.record_id,
            "date": self.day.isoformat(),
            "time": self.time,
            "status": self.status.value,
            "student_code": self.student_code,
            "name": self.name,
            "year_level": self.year_level,
            "room_id": self.room_id,
            "course_code": self.course_code,
        }


@dataclass(frozen=True)
class ExportRow:
    student_code: str
    name: str
    time: str
    status: AttendanceStatus
    room_name: Optional[str]
    room_number: Optional[str]


@dataclass(frozen=True)
class HistoryRow:
    day: date
    time: str
    status: AttendanceStatus


@dataclass(frozen=True)
class StudentHistoryRow:
    """A student's own record, with the course and where it met."""

    day: date
    time: str
    status: AttendanceStatus
    course_code: Optional[str]
    course_name: Optional[str]
    teacher_name: Optional[str]
    room_name: Optional[str]
    room_number: Optional[str]

    def to_dict(self) -> dict:
        return {
            "date": self.day.isoformat(),
            "time": self.time,
            "status": self.status.value,
            "code": self.course_code,
            "name": self.course_name,
            "teacher_name": self.teacher_name,
            "room_name": self.room_name,
            "room_number": self.room_number,
        }


def empty_summary() -> dict[str, int]:
    return {s.value: 0 for s in AttendanceStatus}


def summarize_counts(counts: dict[str, int]) -> dict[str, int]:
    """Per-status counts with every status present, zero when unseen."""
    summary = empty_summary()
    for status, n in counts.items():
        if status in summary:
            summary[status] = int(n)
    return summary
