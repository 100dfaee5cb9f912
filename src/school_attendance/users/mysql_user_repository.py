from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import User
from .repository import UserRepository

_SELECT_USER = """
    SELECT u.id, u.username, u.password, u.role, u.name,
           u.reset_token, u.reset_token_expiry, sd.student_code
    FROM users u
    LEFT JOIN student_details sd ON sd.user_id = u.id
"""


def _to_user(r: dict) -> User:
    return User(
        user_id=int(r["id"]),
        username=r.get("username"),
        password_hash=r.get("password"),
        role=Role(r["role"]),
        name=r["name"],
        student_code=r.get("student_code"),
        reset_token=r.get("reset_token"),
        reset_token_expiry=r.get("reset_token_expiry"),
    )


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, user_id: int) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT_USER + " WHERE u.id=%s", (int(user_id),))
            r = fetchone(cur)
            return _to_user(r) if r else None

    def get_by_username(self, username: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT_USER + " WHERE u.username=%s", (username,))
            r = fetchone(cur)
            return _to_user(r) if r else None

    def get_by_reset_token(self, token: str, *, now: datetime) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT_USER + " WHERE u.reset_token=%s AND u.reset_token_expiry > %s", (token, now))
            r = fetchone(cur)
            return _to_user(r) if r else None

    def has_admin(self) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT 1 AS found FROM users WHERE role=%s LIMIT 1", (Role.ADMIN.value,))
            return fetchone(cur) is not None

    def create_user(self, *, username: str, password_hash: str, role: Role, name: str) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO users (username, password, role, name) VALUES (%s, %s, %s, %s)",
                (username, password_hash, role.value, name),
            )
            return int(cur.lastrowid)

    def update_password(self, *, user_id: int, password_hash: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE users
                SET password=%s, reset_token=NULL, reset_token_expiry=NULL
                WHERE id=%s
                """,
                (password_hash, int(user_id)),
            )
            return cur.rowcount > 0

    def set_reset_token(self, *, user_id: int, token: str, expiry: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE users SET reset_token=%s, reset_token_expiry=%s WHERE id=%s",
                (token, expiry, int(user_id)),
            )
            return cur.rowcount > 0

    def list_staff(self) -> Sequence[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _SELECT_USER + " WHERE u.role IN (%s, %s) ORDER BY u.name",
                (Role.REGISTRAR.value, Role.TEACHER.value),
            )
            return [_to_user(r) for r in fetchall(cur)]

    def delete_staff(self, user_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM users WHERE id=%s AND role IN (%s, %s)",
                (int(user_id), Role.REGISTRAR.value, Role.TEACHER.value),
            )
            return cur.rowcount > 0
