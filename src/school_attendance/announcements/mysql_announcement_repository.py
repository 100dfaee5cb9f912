from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from .model import Announcement
from .repository import AnnouncementRepository


class MySQLAnnouncementRepository(AnnouncementRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_recent(self) -> Sequence[Announcement]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT a.id, a.title, a.content, a.created_by, a.created_at, u.name AS author_name
                FROM announcements a
                LEFT JOIN users u ON u.id = a.created_by
                ORDER BY a.created_at DESC
                """
            )
            return [
                Announcement(
                    announcement_id=int(r["id"]),
                    title=r["title"],
                    content=r["content"],
                    created_by=int(r["created_by"]) if r.get("created_by") is not None else None,
                    created_at=r["created_at"],
                    author_name=r.get("author_name"),
                )
                for r in fetchall(cur)
            ]

    def create(self, *, title: str, content: str, created_by: Optional[int]) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO announcements (title, content, created_by) VALUES (%s, %s, %s)",
                (title, content, created_by),
            )
            return int(cur.lastrowid)

    def delete(self, announcement_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM announcements WHERE id=%s", (int(announcement_id),))
            return cur.rowcount > 0
