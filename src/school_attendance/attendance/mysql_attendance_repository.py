from __future__ import annotations

from contextlib import contextmanager
from datetime import date
from typing import Iterable, Iterator, Optional, Sequence

from ..core.constants import NO_TIME
from ..core.enums import AttendanceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, db_transaction, fetchall
from .model import ExportRow, HistoryRow, RosterRow, StudentHistoryRow
from .repository import AttendanceRepository, ReconciliationBatch

# Session room overrides the course room for that date
_EFFECTIVE_ROOM = "(s.room_id = %s OR (s.room_id IS NULL AND c.room_id = %s))"


class MySQLReconciliationBatch:
    def __init__(self, cur):
        self._cur = cur

    def enrolled_user_ids(self, course_id: int) -> set[int]:
        self._cur.execute("SELECT user_id FROM student_courses WHERE course_id=%s", (int(course_id),))
        return {int(r["user_id"]) for r in fetchall(self._cur)}

    def recorded_user_ids(self, course_id: int, day: date) -> set[int]:
        self._cur.execute("SELECT user_id FROM attendance WHERE course_id=%s AND date=%s", (int(course_id), day))
        return {int(r["user_id"]) for r in fetchall(self._cur)}

    def insert_absent(self, course_id: int, day: date, user_ids: Iterable[int]) -> int:
        rows = [(int(uid), int(course_id), day, NO_TIME, AttendanceStatus.ABSENT.value) for uid in sorted(user_ids)]
        if not rows:
            return 0
        self._cur.executemany(
            "INSERT IGNORE INTO attendance (user_id, course_id, date, time, status) VALUES (%s, %s, %s, %s, %s)",
            rows,
        )
        return max(int(self._cur.rowcount), 0)


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @contextmanager
    def reconciliation(self) -> Iterator[ReconciliationBatch]:
        with db_transaction(self._conn_factory) as (_, cur):
            yield MySQLReconciliationBatch(cur)

    def course_ids_in_room(self, day: date, room_id: int) -> list[int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT c.id
                FROM courses c
                LEFT JOIN attendance_sessions s ON s.course_id = c.id AND s.date = %s
                WHERE {_EFFECTIVE_ROOM}
                ORDER BY c.code
                """,
                (day, int(room_id), int(room_id)),
            )
            return [int(r["id"]) for r in fetchall(cur)]

    def roster(
        self,
        day: date,
        *,
        course_id: Optional[int] = None,
        room_id: Optional[int] = None,
        year_level: Optional[str] = None,
    ) -> Sequence[RosterRow]:
        clauses = ["a.date = %s"]
        params: list[object] = [day]
        if course_id is not None:
            clauses.append("a.course_id = %s")
            params.append(int(course_id))
        if room_id is not None:
            clauses.append(_EFFECTIVE_ROOM)
            params.extend([int(room_id), int(room_id)])
        if year_level:
            clauses.append("sd.year_level = %s")
            params.append(year_level)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT a.id, a.date, a.time, a.status, sd.student_code, u.name, sd.year_level,
                       COALESCE(s.room_id, c.room_id) AS room_id,
                       c.code AS course_code
                FROM attendance a
                JOIN users u ON u.id = a.user_id
                JOIN student_details sd ON sd.user_id = u.id
                JOIN courses c ON c.id = a.course_id
                LEFT JOIN attendance_sessions s ON s.course_id = a.course_id AND s.date = a.date
                WHERE {" AND ".join(clauses)}
                ORDER BY c.code, sd.student_code
                """,
                tuple(params),
            )
            return [
                RosterRow(
                    record_id=int(r["id"]),
                    day=r["date"],
                    time=r["time"],
                    status=AttendanceStatus(r["status"]),
                    student_code=r["student_code"],
                    name=r["name"],
                    year_level=r.get("year_level"),
                    room_id=int(r["room_id"]) if r.get("room_id") is not None else None,
                    course_code=r["course_code"],
                )
                for r in fetchall(cur)
            ]

    def update_record(
        self,
        *,
        user_id: int,
        course_id: int,
        day: date,
        status: AttendanceStatus,
        time_str: str,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT id FROM attendance WHERE user_id=%s AND course_id=%s AND date=%s",
                (int(user_id), int(course_id), day),
            )
            if not fetchall(cur):
                return False
            cur.execute(
                "UPDATE attendance SET status=%s, time=%s WHERE user_id=%s AND course_id=%s AND date=%s",
                (status.value, time_str, int(user_id), int(course_id), day),
            )
            return True

    def upsert_mark(
        self,
        *,
        user_id: int,
        course_id: int,
        day: date,
        status: AttendanceStatus,
        time_str: str,
    ) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance (user_id, course_id, date, time, status)
                VALUES (%s, %s, %s, %s, %s)
                ON DUPLICATE KEY UPDATE time=VALUES(time), status=VALUES(status)
                """,
                (int(user_id), int(course_id), day, time_str, status.value),
            )

    def history_for_user(
        self,
        user_id: int,
        *,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> Sequence[HistoryRow]:
        clauses = ["user_id = %s"]
        params: list[object] = [int(user_id)]
        if start is not None and end is not None:
            clauses.append("date BETWEEN %s AND %s")
            params.extend([start, end])

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT date, time, status FROM attendance WHERE {' AND '.join(clauses)} ORDER BY date DESC",
                tuple(params),
            )
            return [
                HistoryRow(day=r["date"], time=r["time"], status=AttendanceStatus(r["status"]))
                for r in fetchall(cur)
            ]

    def course_history_for_user(self, user_id: int) -> Sequence[StudentHistoryRow]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT a.date, a.time, a.status, c.code AS course_code, c.name AS course_name,
                       u.name AS teacher_name,
                       COALESCE(sr.name, cr.name) AS room_name,
                       COALESCE(sr.room_number, cr.room_number) AS room_number
                FROM attendance a
                LEFT JOIN courses c ON c.id = a.course_id
                LEFT JOIN rooms cr ON cr.id = c.room_id
                LEFT JOIN attendance_sessions s ON s.course_id = a.course_id AND s.date = a.date
                LEFT JOIN rooms sr ON sr.id = s.room_id
                LEFT JOIN users u ON u.id = s.created_by
                WHERE a.user_id = %s
                ORDER BY a.date DESC
                """,
                (int(user_id),),
            )
            return [
                StudentHistoryRow(
                    day=r["date"],
                    time=r["time"],
                    status=AttendanceStatus(r["status"]),
                    course_code=r.get("course_code"),
                    course_name=r.get("course_name"),
                    teacher_name=r.get("teacher_name"),
                    room_name=r.get("room_name"),
                    room_number=r.get("room_number"),
                )
                for r in fetchall(cur)
            ]

    def status_counts(
        self,
        *,
        day: Optional[date] = None,
        user_id: Optional[int] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> dict[str, int]:
        clauses: list[str] = []
        params: list[object] = []
        if day is not None:
            clauses.append("date = %s")
            params.append(day)
        if user_id is not None:
            clauses.append("user_id = %s")
            params.append(int(user_id))
        if start is not None and end is not None:
            clauses.append("date BETWEEN %s AND %s")
            params.extend([start, end])
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT status, COUNT(*) AS n FROM attendance {where} GROUP BY status", tuple(params))
            return {r["status"]: int(r["n"]) for r in fetchall(cur)}

    def export_rows(self, day: date, course_id: int) -> Sequence[ExportRow]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT sd.student_code, u.name, a.time, a.status, r.name AS room_name, r.room_number
                FROM attendance a
                JOIN users u ON u.id = a.user_id
                JOIN student_details sd ON sd.user_id = u.id
                JOIN courses c ON c.id = a.course_id
                LEFT JOIN rooms r ON r.id = c.room_id
                WHERE a.date = %s AND a.course_id = %s
                ORDER BY sd.student_code
                """,
                (day, int(course_id)),
            )
            return [
                ExportRow(
                    student_code=r["student_code"],
                    name=r["name"],
                    time=r["time"],
                    status=AttendanceStatus(r["status"]),
                    room_name=r.get("room_name"),
                    room_number=r.get("room_number"),
                )
                for r in fetchall(cur)
            ]
