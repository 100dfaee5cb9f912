from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator, Optional, Sequence

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, db_transaction, fetchall, fetchone
from ..students.mysql_student_repository import MySQLStudentTransaction
from .model import StaffRegistration, StudentRegistration
from .repository import RegistrationRepository, RegistrationTransaction

_SELECT_STUDENT_REG = """
    SELECT sr.id, sr.name, sr.username, sr.password, sr.age, sr.gender, sr.course_id,
           sr.year_level, sr.timestamp, c.code AS course_code, c.name AS course_name
    FROM student_registrations sr
    LEFT JOIN courses c ON c.id = sr.course_id
"""

_SELECT_STAFF_REG = "SELECT id, name, username, password, role, timestamp FROM staff_registrations"


def _to_student_reg(r: dict) -> StudentRegistration:
    return StudentRegistration(
        registration_id=int(r["id"]),
        name=r["name"],
        username=r["username"],
        password_hash=r["password"],
        age=int(r["age"]) if r.get("age") is not None else None,
        gender=r.get("gender"),
        course_id=int(r["course_id"]) if r.get("course_id") is not None else None,
        year_level=r.get("year_level"),
        created_at=r.get("timestamp"),
        course_code=r.get("course_code"),
        course_name=r.get("course_name"),
    )


def _to_staff_reg(r: dict) -> StaffRegistration:
    return StaffRegistration(
        registration_id=int(r["id"]),
        name=r["name"],
        username=r["username"],
        password_hash=r["password"],
        role=r["role"],
        created_at=r.get("timestamp"),
    )


class MySQLRegistrationTransaction(MySQLStudentTransaction):
    def username_taken(self, username: str) -> bool:
        self._cur.execute("SELECT id FROM users WHERE username=%s", (username,))
        return fetchone(self._cur) is not None

    def get_student_registration(self, registration_id: int) -> Optional[StudentRegistration]:
        self._cur.execute(_SELECT_STUDENT_REG + " WHERE sr.id=%s FOR UPDATE", (int(registration_id),))
        r = fetchone(self._cur)
        return _to_student_reg(r) if r else None

    def get_staff_registration(self, registration_id: int) -> Optional[StaffRegistration]:
        self._cur.execute(_SELECT_STAFF_REG + " WHERE id=%s FOR UPDATE", (int(registration_id),))
        r = fetchone(self._cur)
        return _to_staff_reg(r) if r else None

    def course_exists(self, course_id: int) -> bool:
        self._cur.execute("SELECT id FROM courses WHERE id=%s", (int(course_id),))
        return fetchone(self._cur) is not None

    def enroll(self, *, user_id: int, course_id: int) -> None:
        self._cur.execute(
            "INSERT IGNORE INTO student_courses (user_id, course_id) VALUES (%s, %s)",
            (int(user_id), int(course_id)),
        )

    def insert_staff_user(self, *, username: str, password_hash: str, role: Role, name: str) -> int:
        self._cur.execute(
            "INSERT INTO users (username, password, role, name) VALUES (%s, %s, %s, %s)",
            (username, password_hash, role.value, name),
        )
        return int(self._cur.lastrowid)

    def delete_student_registration(self, registration_id: int) -> None:
        self._cur.execute("DELETE FROM student_registrations WHERE id=%s", (int(registration_id),))

    def delete_staff_registration(self, registration_id: int) -> None:
        self._cur.execute("DELETE FROM staff_registrations WHERE id=%s", (int(registration_id),))


class MySQLRegistrationRepository(RegistrationRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @contextmanager
    def transaction(self) -> Iterator[RegistrationTransaction]:
        with db_transaction(self._conn_factory) as (_, cur):
            yield MySQLRegistrationTransaction(cur)

    def username_in_use(self, username: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT 1 AS found FROM users WHERE username=%s
                UNION ALL SELECT 1 FROM student_registrations WHERE username=%s
                UNION ALL SELECT 1 FROM staff_registrations WHERE username=%s
                """,
                (username, username, username),
            )
            return bool(fetchall(cur))

    def add_student_registration(
        self,
        *,
        name: str,
        username: str,
        password_hash: str,
        age: int,
        gender: str,
        course_id: int,
        year_level: str,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO student_registrations (name, username, password, age, gender, course_id, year_level)
                VALUES (%s, %s, %s, %s, %s, %s, %s)
                """,
                (name, username, password_hash, int(age), gender, int(course_id), year_level),
            )
            return int(cur.lastrowid)

    def add_staff_registration(self, *, name: str, username: str, password_hash: str, role: Role) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO staff_registrations (name, username, password, role) VALUES (%s, %s, %s, %s)",
                (name, username, password_hash, role.value),
            )
            return int(cur.lastrowid)

    def list_student_registrations(self) -> Sequence[StudentRegistration]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT_STUDENT_REG + " ORDER BY sr.timestamp ASC")
            return [_to_student_reg(r) for r in fetchall(cur)]

    def list_staff_registrations(self) -> Sequence[StaffRegistration]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT_STAFF_REG + " ORDER BY timestamp ASC")
            return [_to_staff_reg(r) for r in fetchall(cur)]

    def reject_student_registration(self, registration_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM student_registrations WHERE id=%s", (int(registration_id),))
            return cur.rowcount > 0

    def reject_staff_registration(self, registration_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM staff_registrations WHERE id=%s", (int(registration_id),))
            return cur.rowcount > 0
