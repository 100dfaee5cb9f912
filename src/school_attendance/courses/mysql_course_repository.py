from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, normalize_mysql_time
from .model import Course, CourseInput, EnrollmentRow, Room
from .repository import CourseRepository, EnrollmentRepository, RoomRepository

_SELECT_COURSE = """
    SELECT c.id, c.code, c.name, c.room_id, c.start_time, c.end_time, c.days,
           r.name AS room_name, r.room_number
    FROM courses c
    LEFT JOIN rooms r ON r.id = c.room_id
"""


def _to_room(r: dict) -> Room:
    return Room(room_id=int(r["id"]), name=r["name"], room_number=r["room_number"])


def _to_course(r: dict) -> Course:
    return Course(
        course_id=int(r["id"]),
        code=r["code"],
        name=r["name"],
        room_id=int(r["room_id"]) if r.get("room_id") is not None else None,
        start_time=normalize_mysql_time(r.get("start_time")),
        end_time=normalize_mysql_time(r.get("end_time")),
        days=r.get("days"),
        room_name=r.get("room_name"),
        room_number=r.get("room_number"),
    )


class MySQLRoomRepository(RoomRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_all(self) -> Sequence[Room]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT id, name, room_number FROM rooms ORDER BY name")
            return [_to_room(r) for r in fetchall(cur)]

    def get_by_id(self, room_id: int) -> Optional[Room]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT id, name, room_number FROM rooms WHERE id=%s", (int(room_id),))
            r = fetchone(cur)
            return _to_room(r) if r else None

    def find_by_name_and_number(self, *, name: str, room_number: str) -> Optional[Room]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT id, name, room_number FROM rooms WHERE name=%s AND room_number=%s",
                (name, room_number),
            )
            r = fetchone(cur)
            return _to_room(r) if r else None

    def create(self, *, name: str, room_number: str) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("INSERT INTO rooms (name, room_number) VALUES (%s, %s)", (name, room_number))
            return int(cur.lastrowid)

    def update(self, *, room_id: int, name: str, room_number: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT id FROM rooms WHERE id=%s", (int(room_id),))
            if fetchone(cur) is None:
                return False
            cur.execute(
                "UPDATE rooms SET name=%s, room_number=%s WHERE id=%s",
                (name, room_number, int(room_id)),
            )
            return True

    def delete(self, room_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM rooms WHERE id=%s", (int(room_id),))
            return cur.rowcount > 0


class MySQLCourseRepository(CourseRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_all(self) -> Sequence[Course]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT_COURSE + " ORDER BY c.code")
            return [_to_course(r) for r in fetchall(cur)]

    def list_in_room(self, room_id: int) -> Sequence[Course]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT_COURSE + " WHERE c.room_id=%s ORDER BY c.start_time", (int(room_id),))
            return [_to_course(r) for r in fetchall(cur)]

    def get_by_id(self, course_id: int) -> Optional[Course]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT_COURSE + " WHERE c.id=%s", (int(course_id),))
            r = fetchone(cur)
            return _to_course(r) if r else None

    def get_by_code(self, code: str) -> Optional[Course]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT_COURSE + " WHERE c.code=%s", (code,))
            r = fetchone(cur)
            return _to_course(r) if r else None

    def create(self, data: CourseInput) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO courses (code, name, room_id, start_time, end_time, days)
                VALUES (%s, %s, %s, %s, %s, %s)
                """,
                (data.code, data.name, data.room_id, data.start_time, data.end_time, data.days),
            )
            return int(cur.lastrowid)

    def update(self, course_id: int, data: CourseInput) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT id FROM courses WHERE id=%s", (int(course_id),))
            if fetchone(cur) is None:
                return False
            cur.execute(
                """
                UPDATE courses
                SET code=%s, name=%s, room_id=%s, start_time=%s, end_time=%s, days=%s
                WHERE id=%s
                """,
                (data.code, data.name, data.room_id, data.start_time, data.end_time, data.days, int(course_id)),
            )
            return True

    def delete(self, course_id: int) -> bool:
        # FK cascades remove enrollments, sessions and attendance rows
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM courses WHERE id=%s", (int(course_id),))
            return cur.rowcount > 0


class MySQLEnrollmentRepository(EnrollmentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_for_course(self, course_id: int, *, search: str = "") -> Sequence[EnrollmentRow]:
        like = f"%{search or ''}%"
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT u.id AS user_id, u.name, sd.student_code,
                       CASE WHEN sc.course_id IS NOT NULL THEN 1 ELSE 0 END AS is_enrolled
                FROM users u
                JOIN student_details sd ON sd.user_id = u.id
                LEFT JOIN student_courses sc ON sc.user_id = u.id AND sc.course_id = %s
                WHERE u.role=%s AND (u.name LIKE %s OR sd.student_code LIKE %s)
                ORDER BY is_enrolled DESC, u.name
                """,
                (int(course_id), Role.STUDENT.value, like, like),
            )
            return [
                EnrollmentRow(
                    user_id=int(r["user_id"]),
                    name=r["name"],
                    student_code=r["student_code"],
                    is_enrolled=bool(r["is_enrolled"]),
                )
                for r in fetchall(cur)
            ]

    def enroll(self, *, user_id: int, course_id: int) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT IGNORE INTO student_courses (user_id, course_id) VALUES (%s, %s)",
                (int(user_id), int(course_id)),
            )

    def unenroll(self, *, user_id: int, course_id: int) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM student_courses WHERE user_id=%s AND course_id=%s",
                (int(user_id), int(course_id)),
            )
