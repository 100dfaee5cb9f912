from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import AuditLogEntry
from .repository import AuditLogRepository


class MySQLAuditLogRepository(AuditLogRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def append(self, *, user_id: Optional[int], username: Optional[str], action: str, details: str) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO audit_logs (user_id, username, action, details) VALUES (%s, %s, %s, %s)",
                (user_id, username, action, details),
            )

    def list_page(self, *, limit: int, offset: int) -> Sequence[AuditLogEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id, user_id, username, action, details, timestamp
                FROM audit_logs
                ORDER BY timestamp DESC, id DESC
                LIMIT %s OFFSET %s
                """,
                (int(limit), int(offset)),
            )
            return [
                AuditLogEntry(
                    entry_id=int(r["id"]),
                    user_id=r.get("user_id"),
                    username=r.get("username"),
                    action=r["action"],
                    details=r.get("details"),
                    timestamp=r["timestamp"],
                )
                for r in fetchall(cur)
            ]

    def count(self) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS n FROM audit_logs")
            r = fetchone(cur)
            return int(r["n"]) if r else 0
