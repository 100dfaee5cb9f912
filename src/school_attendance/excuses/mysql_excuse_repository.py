from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..core.constants import NO_TIME
from ..core.enums import AttendanceStatus, ExcuseStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, db_transaction, fetchall, fetchone
from .model import Excuse, ExcuseListRow
from .repository import ExcuseRepository

_SELECT_LIST = """
    SELECT e.id, e.user_id, e.date, e.reason, e.status, e.processed_by,
           sd.student_code, u.name AS student_name, p.name AS processor_name
    FROM excuses e
    JOIN users u ON u.id = e.user_id
    JOIN student_details sd ON sd.user_id = u.id
    LEFT JOIN users p ON p.id = e.processed_by
"""


def _to_excuse(r: dict) -> Excuse:
    return Excuse(
        excuse_id=int(r["id"]),
        user_id=int(r["user_id"]),
        day=r["date"],
        reason=r["reason"],
        status=ExcuseStatus(r["status"]),
        processed_by=int(r["processed_by"]) if r.get("processed_by") is not None else None,
    )


def _to_row(r: dict) -> ExcuseListRow:
    return ExcuseListRow(
        excuse=_to_excuse(r),
        student_code=r["student_code"],
        student_name=r["student_name"],
        processor_name=r.get("processor_name"),
    )


class MySQLExcuseRepository(ExcuseRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, excuse_id: int) -> Optional[Excuse]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT id, user_id, date, reason, status, processed_by FROM excuses WHERE id=%s",
                (int(excuse_id),),
            )
            r = fetchone(cur)
            return _to_excuse(r) if r else None

    def submit(self, *, user_id: int, day: date, reason: str) -> bool:
        with db_transaction(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT id, status FROM excuses WHERE user_id=%s AND date=%s FOR UPDATE",
                (int(user_id), day),
            )
            existing = fetchone(cur)
            if existing is None:
                cur.execute(
                    "INSERT INTO excuses (user_id, date, reason, status) VALUES (%s, %s, %s, %s)",
                    (int(user_id), day, reason, ExcuseStatus.PENDING.value),
                )
                return True
            if existing["status"] != ExcuseStatus.PENDING.value:
                return False
            cur.execute("UPDATE excuses SET reason=%s WHERE id=%s", (reason, int(existing["id"])))
            return True

    def approve(self, excuse_id: int, *, processed_by: Optional[int]) -> Optional[Excuse]:
        with db_transaction(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT id, user_id, date, reason, status, processed_by FROM excuses WHERE id=%s FOR UPDATE",
                (int(excuse_id),),
            )
            r = fetchone(cur)
            if not r:
                return None
            excuse = _to_excuse(r)
            cur.execute(
                "UPDATE excuses SET status=%s, processed_by=%s WHERE id=%s",
                (ExcuseStatus.APPROVED.value, processed_by, excuse.excuse_id),
            )
            # Excuses cover the whole day, so every course that day is excused
            cur.execute(
                "UPDATE attendance SET status=%s, time=%s WHERE user_id=%s AND date=%s",
                (AttendanceStatus.EXCUSED.value, NO_TIME, excuse.user_id, excuse.day),
            )
            return Excuse(
                excuse_id=excuse.excuse_id,
                user_id=excuse.user_id,
                day=excuse.day,
                reason=excuse.reason,
                status=ExcuseStatus.APPROVED,
                processed_by=processed_by,
            )

    def deny(self, excuse_id: int, *, processed_by: Optional[int]) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT id FROM excuses WHERE id=%s", (int(excuse_id),))
            if fetchone(cur) is None:
                return False
            cur.execute(
                "UPDATE excuses SET status=%s, processed_by=%s WHERE id=%s",
                (ExcuseStatus.DENIED.value, processed_by, int(excuse_id)),
            )
            return True

    def update_pending(self, excuse_id: int, *, reason: str, day: date) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT id FROM excuses WHERE id=%s AND status=%s",
                (int(excuse_id), ExcuseStatus.PENDING.value),
            )
            if fetchone(cur) is None:
                return False
            cur.execute("UPDATE excuses SET reason=%s, date=%s WHERE id=%s", (reason, day, int(excuse_id)))
            return True

    def delete(self, excuse_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM excuses WHERE id=%s", (int(excuse_id),))
            return cur.rowcount > 0

    def list_pending(self) -> Sequence[ExcuseListRow]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT_LIST + " WHERE e.status=%s ORDER BY e.date", (ExcuseStatus.PENDING.value,))
            return [_to_row(r) for r in fetchall(cur)]

    def list_processed(self, *, limit: int) -> Sequence[ExcuseListRow]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _SELECT_LIST + " WHERE e.status<>%s ORDER BY e.date DESC LIMIT %s",
                (ExcuseStatus.PENDING.value, int(limit)),
            )
            return [_to_row(r) for r in fetchall(cur)]

    def list_for_user(self, user_id: int) -> Sequence[Excuse]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT id, user_id, date, reason, status, processed_by FROM excuses WHERE user_id=%s ORDER BY date DESC",
                (int(user_id),),
            )
            return [_to_excuse(r) for r in fetchall(cur)]

    def count_pending(self) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS n FROM excuses WHERE status=%s", (ExcuseStatus.PENDING.value,))
            return int(fetchone(cur)["n"])
