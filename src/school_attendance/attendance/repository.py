from __future__ import annotations

from datetime import date, time
from typing import ContextManager, Iterable, Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus
from .model import AttendanceSession, ExportRow, HistoryRow, RosterRow, SessionListRow, StudentHistoryRow


class ReconciliationBatch(Protocol):
    """Reads and inserts sharing one transaction."""

    def enrolled_user_ids(self, course_id: int) -> set[int]:
        raise NotImplementedError

    def recorded_user_ids(self, course_id: int, day: date) -> set[int]:
        raise NotImplementedError

    def insert_absent(self, course_id: int, day: date, user_ids: Iterable[int]) -> int:
        """Insert Absent placeholders, skipping rows that already exist. Returns rows inserted."""
        raise NotImplementedError


class AttendanceRepository(Protocol):
    def reconciliation(self) -> ContextManager[ReconciliationBatch]:
        raise NotImplementedError

    def course_ids_in_room(self, day: date, room_id: int) -> list[int]:
        """Courses whose effective room on ``day`` is ``room_id`` (session room first, else course room)."""
        raise NotImplementedError

    def roster(
        self,
        day: date,
        *,
        course_id: Optional[int] = None,
        room_id: Optional[int] = None,
        year_level: Optional[str] = None,
    ) -> Sequence[RosterRow]:
        raise NotImplementedError

    def update_record(
        self,
        *,
        user_id: int,
        course_id: int,
        day: date,
        status: AttendanceStatus,
        time_str: str,
    ) -> bool:
        """Update an existing row; False when there is none."""
        raise NotImplementedError

    def upsert_mark(
        self,
        *,
        user_id: int,
        course_id: int,
        day: date,
        status: AttendanceStatus,
        time_str: str,
    ) -> None:
        raise NotImplementedError

    def history_for_user(
        self,
        user_id: int,
        *,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> Sequence[HistoryRow]:
        raise NotImplementedError

    def course_history_for_user(self, user_id: int) -> Sequence[StudentHistoryRow]:
        raise NotImplementedError

    def status_counts(
        self,
        *,
        day: Optional[date] = None,
        user_id: Optional[int] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> dict[str, int]:
        raise NotImplementedError

    def export_rows(self, day: date, course_id: int) -> Sequence[ExportRow]:
        raise NotImplementedError


class SessionTransaction(Protocol):
    def get_for_course_and_date(self, course_id: int, day: date) -> Optional[AttendanceSession]:
        """Read and lock the (course, date) session row, if any."""
        raise NotImplementedError

    def code_exists(self, code: str) -> bool:
        raise NotImplementedError

    def insert(
        self,
        *,
        course_id: int,
        day: date,
        code: str,
        start_time: time,
        end_time: Optional[time],
        room_id: Optional[int],
        created_by: Optional[int],
    ) -> int:
        raise NotImplementedError

    def update_window(
        self,
        session_id: int,
        *,
        start_time: time,
        end_time: Optional[time],
        room_id: Optional[int],
    ) -> None:
        raise NotImplementedError


class SessionRepository(Protocol):
    def transaction(self) -> ContextManager[SessionTransaction]:
        raise NotImplementedError

    def get_by_id(self, session_id: int) -> Optional[AttendanceSession]:
        raise NotImplementedError

    def get_by_code(self, code: str) -> Optional[AttendanceSession]:
        raise NotImplementedError

    def get_for_course_and_date(self, course_id: int, day: date) -> Optional[AttendanceSession]:
        raise NotImplementedError

    def list_for_date(self, day: date) -> Sequence[AttendanceSession]:
        raise NotImplementedError

    def list_recent(self, limit: int) -> Sequence[SessionListRow]:
        raise NotImplementedError

    def update_times(self, session_id: int, *, start_time: time, end_time: Optional[time]) -> bool:
        raise NotImplementedError

    def delete_with_attendance(self, session_id: int) -> Optional[AttendanceSession]:
        """Remove the session and every attendance row for its course and date together.

        Returns the deleted session, or None when it did not exist.
        """
        raise NotImplementedError
