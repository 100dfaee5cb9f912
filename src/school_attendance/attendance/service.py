from __future__ import annotations

import csv
import io
import logging
from datetime import date, datetime, time
from typing import Optional

import qrcode

from ..common.datetime_utils import format_hhmm, now_local, parse_hhmm, parse_iso_date
from ..core.constants import NO_TIME, RECENT_SESSIONS_LIMIT
from ..core.enums import AttendanceStatus
from ..core.exceptions import ConflictError, InvalidCodeError, NotFoundError, ValidationError, WrongDateError
from ..courses.repository import CourseRepository
from ..excuses.repository import ExcuseRepository
from ..students.repository import StudentRepository
from .factory import AttendanceStrategyFactory
from .model import SessionListRow, StudentHistoryRow, summarize_counts
from .reconciliation import AttendanceReconciler
from .repository import AttendanceRepository, SessionRepository
from .session_codes import SessionCodeAllocator

logger = logging.getLogger(__name__)

EXPORT_HEADER = ("Code", "Name", "Time", "Status", "Room Name", "Room Number")


def _as_date(value) -> date:
    return value if isinstance(value, date) else parse_iso_date(value)


def _as_time(value) -> time:
    return value if isinstance(value, time) else parse_hhmm(value)


class AttendanceService:
    """Class sessions, self-marking by code, staff edits and rosters."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        sessions: SessionRepository,
        courses: CourseRepository,
        students: StudentRepository,
        excuses: ExcuseRepository,
        *,
        reconciler: AttendanceReconciler | None = None,
        strategy_factory: AttendanceStrategyFactory | None = None,
        session_codes: SessionCodeAllocator | None = None,
    ):
        self._attendance = attendance
        self._sessions = sessions
        self._courses = courses
        self._students = students
        self._excuses = excuses
        self._reconciler = reconciler or AttendanceReconciler(attendance)
        self._factory = strategy_factory or AttendanceStrategyFactory()
        self._codes = session_codes or SessionCodeAllocator()

    # -------- Sessions --------
    def open_session(
        self,
        *,
        course_id: int,
        day,
        start_time,
        end_time=None,
        room_id: Optional[int] = None,
        created_by: Optional[int] = None,
    ) -> str:
        """Open (or re-open) the session for a course on a date and return its code.

        Re-opening keeps the code and only moves the time window and room.
        """
        if not course_id or not day or not start_time:
            raise ValidationError("Course, date, and start time are required.")
        day = _as_date(day)
        start = _as_time(start_time)
        end = _as_time(end_time) if end_time else None

        if not self._courses.get_by_id(int(course_id)):
            raise NotFoundError("Course not found.")

        try:
            with self._sessions.transaction() as tx:
                existing = tx.get_for_course_and_date(int(course_id), day)
                if existing:
                    tx.update_window(existing.session_id, start_time=start, end_time=end, room_id=room_id)
                    return existing.code

                code = self._codes.allocate(tx)
                tx.insert(
                    course_id=int(course_id),
                    day=day,
                    code=code,
                    start_time=start,
                    end_time=end,
                    room_id=room_id,
                    created_by=created_by,
                )
        except ConflictError:
            # Lost a race with a concurrent open for the same course and date
            existing = self._sessions.get_for_course_and_date(int(course_id), day)
            if not existing:
                raise
            return existing.code

        logger.info("Opened session %s for course %s on %s", code, course_id, day.isoformat())
        return code

    def list_sessions(self, *, limit: int = RECENT_SESSIONS_LIMIT) -> list[SessionListRow]:
        return list(self._sessions.list_recent(limit))

    def update_session(self, session_id: int, *, start_time, end_time=None) -> None:
        if not start_time:
            raise ValidationError("Start time is required.")
        if not self._sessions.update_times(
            int(session_id),
            start_time=_as_time(start_time),
            end_time=_as_time(end_time) if end_time else None,
        ):
            raise NotFoundError("Session not found.")

    def delete_session(self, session_id: int):
        """Delete a session together with that course's attendance for its date."""
        session = self._sessions.delete_with_attendance(int(session_id))
        if not session:
            raise NotFoundError("Session not found.")
        logger.info("Deleted session %s (course %s, %s)", session.code, session.course_id, session.day.isoformat())
        return session

    def session_qr_png(self, code: str) -> bytes:
        session = self._sessions.get_by_code((code or "").strip().upper())
        if not session:
            raise InvalidCodeError("Invalid attendance code.")

        qr = qrcode.QRCode(
            version=1,
            error_correction=qrcode.constants.ERROR_CORRECT_L,
            box_size=10,
            border=2,
        )
        qr.add_data(session.code)
        qr.make(fit=True)
        img = qr.make_image(fill_color="black", back_color="white")

        buf = io.BytesIO()
        img.save(buf, format="PNG")
        return buf.getvalue()

    # -------- Marking --------
    def mark_by_code(self, *, user_id: int, code: str, now: datetime | None = None) -> AttendanceStatus:
        if not code:
            raise ValidationError("Code is required.")
        now = now or now_local()

        session = self._sessions.get_by_code(code.strip().upper())
        if not session:
            raise InvalidCodeError("Invalid attendance code.")
        if session.day != now.date():
            raise WrongDateError("This attendance code is not for today.")

        strategy = self._factory.for_mark(now=now, day=session.day, start_time=session.start_time)
        decision = strategy.decide(now=now)

        self._attendance.upsert_mark(
            user_id=int(user_id),
            course_id=session.course_id,
            day=session.day,
            status=decision.status,
            time_str=format_hhmm(now),
        )
        return decision.status

    def update_record(
        self,
        *,
        day,
        student_code: str,
        course_id: int,
        status,
        session_start_time=None,
        now: datetime | None = None,
    ) -> AttendanceStatus:
        """Staff edit of one record; returns the status actually stored.

        A same-day "Present" past start + grace is stored as Late.
        """
        if not day or not student_code or not status or not course_id:
            raise ValidationError("Date, student code, course ID, and status are required.")
        day = _as_date(day)
        try:
            requested = AttendanceStatus(status)
        except ValueError:
            raise ValidationError(f"Invalid status: {status!r}")
        now = now or now_local()

        start: Optional[time] = None
        if requested == AttendanceStatus.PRESENT:
            if session_start_time:
                start = _as_time(session_start_time)
            else:
                course = self._courses.get_by_id(int(course_id))
                start = course.start_time if course else None

        strategy = self._factory.for_manual_edit(now=now, day=day, requested=requested, start_time=start)
        effective = strategy.decide(now=now).status

        # Clock time is taken from the requested status
        time_str = format_hhmm(now) if requested in (AttendanceStatus.PRESENT, AttendanceStatus.LATE) else NO_TIME

        student = self._students.get_by_code(student_code)
        if not student:
            raise NotFoundError("Student not found.")

        if not self._attendance.update_record(
            user_id=student.user_id,
            course_id=int(course_id),
            day=day,
            status=effective,
            time_str=time_str,
        ):
            raise NotFoundError("Attendance record not found.")
        return effective

    # -------- Reads --------
    def roster_for(
        self,
        day,
        *,
        course_id: Optional[int] = None,
        room_id: Optional[int] = None,
        year_level: Optional[str] = None,
    ) -> list[dict]:
        day = _as_date(day)
        if course_id is None and room_id is None:
            raise ValidationError("Course ID or Room ID is required.")

        self._reconciler.ensure_rows(day, course_id=course_id, room_id=room_id)
        rows = self._attendance.roster(day, course_id=course_id, room_id=room_id, year_level=year_level)
        return [r.to_dict() for r in rows]

    def export_csv(self, day, course_id: int) -> str:
        if not course_id:
            raise ValidationError("Course ID is required")
        day = _as_date(day)

        buf = io.StringIO()
        writer = csv.writer(buf, quoting=csv.QUOTE_ALL, lineterminator="\n")
        writer.writerow(EXPORT_HEADER)
        for r in self._attendance.export_rows(day, int(course_id)):
            writer.writerow([r.student_code, r.name, r.time, r.status.value, r.room_name or "", r.room_number or ""])
        return buf.getvalue()

    def dashboard_summary(self, *, today: date) -> dict:
        return {
            "totalStudents": self._students.count(),
            "pendingExcuses": self._excuses.count_pending(),
            "todaysSummary": summarize_counts(self._attendance.status_counts(day=today)),
        }

    def student_history(self, user_id: int) -> list[StudentHistoryRow]:
        return list(self._attendance.course_history_for_user(int(user_id)))

    def student_summary(self, user_id: int, *, start, end) -> dict[str, int]:
        if not start or not end:
            raise ValidationError("Start and end dates are required.")
        counts = self._attendance.status_counts(user_id=int(user_id), start=_as_date(start), end=_as_date(end))
        return summarize_counts(counts)
