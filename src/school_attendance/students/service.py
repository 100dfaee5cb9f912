from __future__ import annotations

import csv
import io
import logging
import math
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Optional

from werkzeug.security import generate_password_hash

from ..attendance.model import summarize_counts
from ..attendance.repository import AttendanceRepository
from ..common.validators import require_int, require_non_empty
from ..core.constants import DEFAULT_PAGE_SIZE, PROFILE_HISTORY_DAYS
from ..core.exceptions import AuthorizationError, ConflictError, DomainError, NotFoundError, ValidationError
from ..excuses.repository import ExcuseRepository
from ..users.repository import UserRepository
from .codes import StudentCodeAllocator
from .model import NewStudent, Student
from .repository import StudentRepository

logger = logging.getLogger(__name__)


@dataclass
class ImportResult:
    total_rows: int = 0
    created: list[dict] = field(default_factory=list)
    errors: list[dict] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "message": (
                f"Bulk upload complete. Successfully added {len(self.created)} of {self.total_rows} students."
            ),
            "errors": self.errors,
            "totalRows": self.total_rows,
        }


def _clean_code(value) -> Optional[str]:
    code = (value or "").strip() if isinstance(value, str) else value
    return code or None


class StudentService:
    def __init__(
        self,
        students: StudentRepository,
        users: UserRepository,
        attendance: AttendanceRepository,
        excuses: ExcuseRepository,
        *,
        codes: StudentCodeAllocator | None = None,
    ):
        self._students = students
        self._users = users
        self._attendance = attendance
        self._excuses = excuses
        self._codes = codes or StudentCodeAllocator()

    @staticmethod
    def _validate(data: dict) -> NewStudent:
        if not data.get("name") or not data.get("age") or not data.get("gender"):
            raise ValidationError("Name, age, and gender are required.")
        return NewStudent(
            name=str(data["name"]).strip(),
            age=require_int(data["age"], "Age"),
            gender=str(data["gender"]).strip(),
            year_level=(str(data["year_level"]).strip() or None) if data.get("year_level") else None,
            student_code=_clean_code(data.get("student_code")),
        )

    def create(self, data: dict) -> Student:
        new = self._validate(data)
        with self._students.transaction() as tx:
            if new.student_code:
                if tx.get_user_id_by_code(new.student_code) is not None:
                    raise ConflictError("This Student Code is already in use.")
                code = new.student_code
            else:
                code = self._codes.allocate(tx)

            user_id = tx.insert_student(
                name=new.name,
                age=new.age,
                gender=new.gender,
                year_level=new.year_level,
                student_code=code,
            )

        logger.info("Created student %s (user_id=%s)", code, user_id)
        return Student(
            user_id=user_id,
            name=new.name,
            username=None,
            student_code=code,
            age=new.age,
            gender=new.gender,
            year_level=new.year_level,
        )

    def update(self, student_code: str, data: dict) -> None:
        if not data.get("name") or not data.get("age") or not data.get("gender"):
            raise ValidationError("All fields are required.")
        new = self._validate(data)

        with self._students.transaction() as tx:
            user_id = tx.get_user_id_by_code(student_code)
            if user_id is None:
                raise NotFoundError("Student not found.")

            new_code = None
            if new.student_code and new.student_code != student_code:
                if tx.get_user_id_by_code(new.student_code) is not None:
                    raise ConflictError("The new Student Code is already in use.")
                new_code = new.student_code

            tx.update_student(
                user_id=user_id,
                name=new.name,
                age=new.age,
                gender=new.gender,
                year_level=new.year_level,
                student_code=new_code,
            )

    def delete(self, student_code: str) -> None:
        student = self._students.get_by_code(student_code)
        if not student or not self._students.delete(student.user_id):
            raise NotFoundError("Student not found.")

    def search(
        self,
        *,
        page: int = 1,
        limit: int = DEFAULT_PAGE_SIZE,
        search: str = "",
        course_id: Optional[int] = None,
        year_level: Optional[str] = None,
    ) -> dict:
        page = max(int(page or 1), 1)
        limit = max(int(limit or DEFAULT_PAGE_SIZE), 1)
        rows, total = self._students.search(
            search=search,
            course_id=course_id,
            year_level=year_level,
            limit=limit,
            offset=(page - 1) * limit,
        )
        return {
            "students": [
                {
                    "username": s.username,
                    "name": s.name,
                    "student_code": s.student_code,
                    "age": s.age,
                    "gender": s.gender,
                    "year_level": s.year_level,
                }
                for s in rows
            ],
            "pagination": {
                "currentPage": page,
                "totalPages": math.ceil(total / limit),
                "totalStudents": total,
            },
        }

    def list_names(self) -> list[dict]:
        return [{"name": s.name, "student_code": s.student_code} for s in self._students.list_all()]

    def import_csv(self, text: str) -> ImportResult:
        """Create one student per CSV row (``name,age,gender[,student_code]``).

        Each row commits on its own; failing rows are reported, not fatal.
        """
        result = ImportResult()
        reader = csv.DictReader(io.StringIO(text))
        for row in reader:
            result.total_rows += 1
            name = (row.get("name") or "").strip()
            if not name or not (row.get("age") or "").strip() or not (row.get("gender") or "").strip():
                result.errors.append(
                    {"student": name or "Unknown Row", "error": "Missing required fields (name, age, gender)."}
                )
                continue
            try:
                student = self.create(
                    {
                        "name": name,
                        "age": row.get("age"),
                        "gender": row.get("gender"),
                        "student_code": row.get("student_code"),
                    }
                )
            except ConflictError:
                result.errors.append({"student": name, "error": f"Student Code {row.get('student_code')} is already in use."})
            except DomainError as e:
                result.errors.append({"student": name, "error": str(e)})
            else:
                result.created.append({"student_code": student.student_code, "name": student.name})
        return result

    def profile(self, student_code: str, *, today: date) -> dict:
        student = self._students.get_by_code(student_code)
        if not student:
            raise NotFoundError("Student not found.")

        start = today - timedelta(days=PROFILE_HISTORY_DAYS)
        attendance = self._attendance.history_for_user(student.user_id, start=start, end=today)
        excuses = self._excuses.list_for_user(student.user_id)
        return {
            "details": {
                "name": student.name,
                "student_code": student.student_code,
                "age": student.age,
                "gender": student.gender,
            },
            "attendance": [{"date": h.day.isoformat(), "time": h.time, "status": h.status.value} for h in attendance],
            "excuses": [{"date": e.day.isoformat(), "reason": e.reason, "status": e.status.value} for e in excuses],
        }

    def history(self, student_code: str, *, start: date, end: date) -> list[dict]:
        student = self._students.get_by_code(student_code)
        if not student:
            return []
        rows = self._attendance.history_for_user(student.user_id, start=start, end=end)
        return [{"date": h.day.isoformat(), "time": h.time, "status": h.status.value} for h in rows]

    def public_lookup(self, student_code: str) -> dict:
        student = self._students.get_by_code(student_code)
        if not student:
            raise NotFoundError("Student code not found.")
        return {"name": student.name, "student_code": student.student_code}

    def summary(self, student_code: str, *, start: date, end: date) -> dict:
        student = self._students.get_by_code(student_code)
        if not student:
            raise NotFoundError("Student not found.")
        counts = self._attendance.status_counts(user_id=student.user_id, start=start, end=end)
        return {"name": student.name, "student_code": student.student_code, "summary": summarize_counts(counts)}

    # -------- Self-service account setup --------
    def validate_setup(self, student_code: str) -> str:
        student_code = require_non_empty(student_code, "Student Code")
        student = self._students.get_by_code(student_code)
        if not student:
            raise NotFoundError("Student Code not found.")
        if student.username:
            raise ConflictError('This account has already been set up. Please log in or use "Forgot Password".')
        return student.name

    def complete_setup(self, *, student_code: str, username: str, password: str) -> None:
        if not student_code or not username or not password:
            raise ValidationError("Student Code, username, and password are required.")

        student = self._students.get_by_code(student_code)
        if not student or student.username:
            raise AuthorizationError("This account is not eligible for setup.")

        if self._users.get_by_username(username):
            raise ConflictError("This username is already taken. Please choose another.")

        if not self._students.set_credentials(
            user_id=student.user_id,
            username=username.strip(),
            password_hash=generate_password_hash(password),
        ):
            raise AuthorizationError("This account is not eligible for setup.")
