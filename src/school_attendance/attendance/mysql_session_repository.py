from __future__ import annotations

from contextlib import contextmanager
from datetime import date, time
from typing import Iterator, Optional, Sequence

from ..core.enums import AttendanceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, db_transaction, fetchall, fetchone, normalize_mysql_time
from .model import AttendanceSession, SessionListRow
from .repository import SessionRepository, SessionTransaction

_SESSION_COLUMNS = "id, course_id, date, code, start_time, end_time, room_id, created_by"


def _to_session(r: dict) -> AttendanceSession:
    return AttendanceSession(
        session_id=int(r["id"]),
        course_id=int(r["course_id"]),
        day=r["date"],
        code=r["code"],
        start_time=normalize_mysql_time(r["start_time"]),
        end_time=normalize_mysql_time(r.get("end_time")),
        room_id=int(r["room_id"]) if r.get("room_id") is not None else None,
        created_by=int(r["created_by"]) if r.get("created_by") is not None else None,
    )


class MySQLSessionTransaction:
    def __init__(self, cur):
        self._cur = cur

    def get_for_course_and_date(self, course_id: int, day: date) -> Optional[AttendanceSession]:
        self._cur.execute(
            f"SELECT {_SESSION_COLUMNS} FROM attendance_sessions WHERE course_id=%s AND date=%s FOR UPDATE",
            (int(course_id), day),
        )
        r = fetchone(self._cur)
        return _to_session(r) if r else None

    def code_exists(self, code: str) -> bool:
        self._cur.execute("SELECT 1 AS found FROM attendance_sessions WHERE code=%s", (code,))
        return fetchone(self._cur) is not None

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
        self._cur.execute(
            """
            INSERT INTO attendance_sessions (course_id, date, code, start_time, end_time, room_id, created_by)
            VALUES (%s, %s, %s, %s, %s, %s, %s)
            """,
            (int(course_id), day, code, start_time, end_time, room_id, created_by),
        )
        return int(self._cur.lastrowid)

    def update_window(
        self,
        session_id: int,
        *,
        start_time: time,
        end_time: Optional[time],
        room_id: Optional[int],
    ) -> None:
        self._cur.execute(
            "UPDATE attendance_sessions SET start_time=%s, end_time=%s, room_id=%s WHERE id=%s",
            (start_time, end_time, room_id, int(session_id)),
        )


class MySQLSessionRepository(SessionRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @contextmanager
    def transaction(self) -> Iterator[SessionTransaction]:
        with db_transaction(self._conn_factory) as (_, cur):
            yield MySQLSessionTransaction(cur)

    def get_by_id(self, session_id: int) -> Optional[AttendanceSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_SESSION_COLUMNS} FROM attendance_sessions WHERE id=%s", (int(session_id),))
            r = fetchone(cur)
            return _to_session(r) if r else None

    def get_by_code(self, code: str) -> Optional[AttendanceSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_SESSION_COLUMNS} FROM attendance_sessions WHERE code=%s", (code,))
            r = fetchone(cur)
            return _to_session(r) if r else None

    def get_for_course_and_date(self, course_id: int, day: date) -> Optional[AttendanceSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_SESSION_COLUMNS} FROM attendance_sessions WHERE course_id=%s AND date=%s",
                (int(course_id), day),
            )
            r = fetchone(cur)
            return _to_session(r) if r else None

    def list_for_date(self, day: date) -> Sequence[AttendanceSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_SESSION_COLUMNS} FROM attendance_sessions WHERE date=%s", (day,))
            return [_to_session(r) for r in fetchall(cur)]

    def list_recent(self, limit: int) -> Sequence[SessionListRow]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT s.id, s.course_id, s.date, s.code, s.start_time, s.end_time, s.room_id, s.created_by,
                       c.name AS course_name, c.code AS course_code,
                       r.name AS room_name, r.room_number,
                       u.name AS creator_name,
                       (SELECT COUNT(*) FROM attendance a
                        WHERE a.course_id = s.course_id AND a.date = s.date AND a.status IN (%s, %s)) AS present_count,
                       (SELECT COUNT(*) FROM attendance a
                        WHERE a.course_id = s.course_id AND a.date = s.date AND a.status = %s) AS absent_count
                FROM attendance_sessions s
                JOIN courses c ON c.id = s.course_id
                LEFT JOIN rooms r ON r.id = s.room_id
                LEFT JOIN users u ON u.id = s.created_by
                ORDER BY s.date DESC, s.start_time DESC
                LIMIT %s
                """,
                (
                    AttendanceStatus.PRESENT.value,
                    AttendanceStatus.LATE.value,
                    AttendanceStatus.ABSENT.value,
                    int(limit),
                ),
            )
            return [
                SessionListRow(
                    session=_to_session(r),
                    course_code=r["course_code"],
                    course_name=r["course_name"],
                    room_name=r.get("room_name"),
                    room_number=r.get("room_number"),
                    creator_name=r.get("creator_name"),
                    present_count=int(r["present_count"] or 0),
                    absent_count=int(r["absent_count"] or 0),
                )
                for r in fetchall(cur)
            ]

    def update_times(self, session_id: int, *, start_time: time, end_time: Optional[time]) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT id FROM attendance_sessions WHERE id=%s", (int(session_id),))
            if fetchone(cur) is None:
                return False
            cur.execute(
                "UPDATE attendance_sessions SET start_time=%s, end_time=%s WHERE id=%s",
                (start_time, end_time, int(session_id)),
            )
            return True

    def delete_with_attendance(self, session_id: int) -> Optional[AttendanceSession]:
        with db_transaction(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_SESSION_COLUMNS} FROM attendance_sessions WHERE id=%s FOR UPDATE",
                (int(session_id),),
            )
            r = fetchone(cur)
            if not r:
                return None
            session = _to_session(r)
            cur.execute("DELETE FROM attendance_sessions WHERE id=%s", (session.session_id,))
            cur.execute(
                "DELETE FROM attendance WHERE course_id=%s AND date=%s",
                (session.course_id, session.day),
            )
            return session
