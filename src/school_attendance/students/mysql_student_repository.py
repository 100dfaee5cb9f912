from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator, Optional, Sequence

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, db_transaction, fetchall, fetchone
from .model import Student
from .repository import StudentRepository, StudentTransaction

_SELECT_STUDENT = """
    SELECT u.id, u.name, u.username, sd.student_code, sd.age, sd.gender, sd.year_level
    FROM users u
    JOIN student_details sd ON sd.user_id = u.id
"""


def _to_student(r: dict) -> Student:
    return Student(
        user_id=int(r["id"]),
        name=r["name"],
        username=r.get("username"),
        student_code=r["student_code"],
        age=int(r["age"]),
        gender=r["gender"],
        year_level=r.get("year_level"),
    )


class MySQLStudentCodeStore:
    """Student-code counter operations on an already open transaction cursor."""

    def __init__(self, cur):
        self._cur = cur

    def read_counter(self, key: str) -> int:
        self._cur.execute("INSERT IGNORE INTO app_meta (meta_key, value) VALUES (%s, 0)", (key,))
        # Locks the counter row until the enclosing transaction ends
        self._cur.execute("SELECT value FROM app_meta WHERE meta_key=%s FOR UPDATE", (key,))
        r = fetchone(self._cur)
        return int(r["value"]) if r else 0

    def write_counter(self, key: str, value: int) -> None:
        self._cur.execute("UPDATE app_meta SET value=%s WHERE meta_key=%s", (int(value), key))

    def code_exists(self, code: str) -> bool:
        self._cur.execute("SELECT 1 AS found FROM student_details WHERE student_code=%s", (code,))
        return fetchone(self._cur) is not None


class MySQLStudentTransaction(MySQLStudentCodeStore):
    def get_user_id_by_code(self, student_code: str) -> Optional[int]:
        self._cur.execute("SELECT user_id FROM student_details WHERE student_code=%s", (student_code,))
        r = fetchone(self._cur)
        return int(r["user_id"]) if r else None

    def insert_student(
        self,
        *,
        name: str,
        age: int,
        gender: str,
        year_level: Optional[str],
        student_code: str,
        username: Optional[str] = None,
        password_hash: Optional[str] = None,
    ) -> int:
        self._cur.execute(
            "INSERT INTO users (username, password, role, name) VALUES (%s, %s, %s, %s)",
            (username, password_hash, Role.STUDENT.value, name),
        )
        user_id = int(self._cur.lastrowid)
        self._cur.execute(
            """
            INSERT INTO student_details (user_id, student_code, age, gender, year_level)
            VALUES (%s, %s, %s, %s, %s)
            """,
            (user_id, student_code, int(age), gender, year_level),
        )
        return user_id

    def update_student(
        self,
        *,
        user_id: int,
        name: str,
        age: int,
        gender: str,
        year_level: Optional[str],
        student_code: Optional[str] = None,
    ) -> None:
        self._cur.execute("UPDATE users SET name=%s WHERE id=%s", (name, int(user_id)))
        if student_code:
            self._cur.execute(
                "UPDATE student_details SET student_code=%s, age=%s, gender=%s, year_level=%s WHERE user_id=%s",
                (student_code, int(age), gender, year_level, int(user_id)),
            )
        else:
            self._cur.execute(
                "UPDATE student_details SET age=%s, gender=%s, year_level=%s WHERE user_id=%s",
                (int(age), gender, year_level, int(user_id)),
            )


class MySQLStudentRepository(StudentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @contextmanager
    def transaction(self) -> Iterator[StudentTransaction]:
        with db_transaction(self._conn_factory) as (_, cur):
            yield MySQLStudentTransaction(cur)

    def get_by_code(self, student_code: str) -> Optional[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT_STUDENT + " WHERE sd.student_code=%s AND u.role=%s", (student_code, Role.STUDENT.value))
            r = fetchone(cur)
            return _to_student(r) if r else None

    def search(
        self,
        *,
        search: str = "",
        course_id: Optional[int] = None,
        year_level: Optional[str] = None,
        limit: int,
        offset: int,
    ) -> tuple[Sequence[Student], int]:
        clauses = ["u.role=%s", "u.name LIKE %s"]
        params: list[object] = [Role.STUDENT.value, f"%{search or ''}%"]

        if year_level:
            clauses.append("sd.year_level=%s")
            params.append(year_level)
        if course_id is not None:
            clauses.append("EXISTS (SELECT 1 FROM student_courses sc WHERE sc.user_id = u.id AND sc.course_id = %s)")
            params.append(int(course_id))

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT COUNT(*) AS n FROM users u JOIN student_details sd ON sd.user_id = u.id WHERE {where}",
                tuple(params),
            )
            total = int(fetchone(cur)["n"])

            cur.execute(
                _SELECT_STUDENT + f" WHERE {where} ORDER BY sd.student_code LIMIT %s OFFSET %s",
                tuple(params + [int(limit), int(offset)]),
            )
            return [_to_student(r) for r in fetchall(cur)], total

    def list_all(self) -> Sequence[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT_STUDENT + " WHERE u.role=%s ORDER BY u.name", (Role.STUDENT.value,))
            return [_to_student(r) for r in fetchall(cur)]

    def count(self) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS n FROM users WHERE role=%s", (Role.STUDENT.value,))
            return int(fetchone(cur)["n"])

    def delete(self, user_id: int) -> bool:
        # Cascades to details, enrollments, attendance and excuses
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM users WHERE id=%s AND role=%s", (int(user_id), Role.STUDENT.value))
            return cur.rowcount > 0

    def set_credentials(self, *, user_id: int, username: str, password_hash: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE users SET username=%s, password=%s WHERE id=%s AND username IS NULL",
                (username, password_hash, int(user_id)),
            )
            return cur.rowcount > 0
