from __future__ import annotations

import logging

from werkzeug.security import generate_password_hash

from ..common.validators import require_fields, require_int
from ..core.enums import Role
from ..core.exceptions import ConflictError, NotFoundError
from ..students.codes import StudentCodeAllocator
from .model import StaffRegistration, StudentRegistration
from .repository import RegistrationRepository

logger = logging.getLogger(__name__)

PENDING_MESSAGE = "Registration submitted successfully. Please wait for admin approval."


class RegistrationService:
    """Public signups that an admin turns into accounts."""

    def __init__(self, registrations: RegistrationRepository, *, codes: StudentCodeAllocator | None = None):
        self._registrations = registrations
        self._codes = codes or StudentCodeAllocator()

    # -------- Students --------
    def submit_student(self, data: dict) -> int:
        require_fields(
            data, "name", "username", "password", "age", "gender", "course_id", "year_level",
            message="All fields are required.",
        )
        username = str(data["username"]).strip()
        if self._registrations.username_in_use(username):
            raise ConflictError("Username is already taken.")

        return self._registrations.add_student_registration(
            name=str(data["name"]).strip(),
            username=username,
            password_hash=generate_password_hash(str(data["password"])),
            age=require_int(data["age"], "Age"),
            gender=str(data["gender"]).strip(),
            course_id=require_int(data["course_id"], "Course"),
            year_level=str(data["year_level"]).strip(),
        )

    def list_students(self) -> list[StudentRegistration]:
        return list(self._registrations.list_student_registrations())

    def approve_student(self, registration_id: int) -> str:
        """Create the student account, enroll it and drop the signup; returns the new student code."""
        with self._registrations.transaction() as tx:
            reg = tx.get_student_registration(int(registration_id))
            if not reg:
                raise NotFoundError("Registration not found.")
            if tx.username_taken(reg.username):
                raise ConflictError(f"Username {reg.username} is already taken.")

            code = self._codes.allocate(tx)
            user_id = tx.insert_student(
                name=reg.name,
                age=reg.age or 0,
                gender=reg.gender or "",
                year_level=reg.year_level,
                student_code=code,
                username=reg.username,
                password_hash=reg.password_hash,
            )
            if reg.course_id and tx.course_exists(reg.course_id):
                tx.enroll(user_id=user_id, course_id=reg.course_id)
            tx.delete_student_registration(reg.registration_id)

        logger.info("Approved student registration %s as %s", registration_id, code)
        return code

    def reject_student(self, registration_id: int) -> None:
        self._registrations.reject_student_registration(int(registration_id))

    # -------- Staff --------
    def submit_staff(self, data: dict) -> int:
        require_fields(data, "name", "username", "password", message="All fields are required.")
        username = str(data["username"]).strip()
        if self._registrations.username_in_use(username):
            raise ConflictError("Username is already taken.")

        # Public signups always start as teachers
        return self._registrations.add_staff_registration(
            name=str(data["name"]).strip(),
            username=username,
            password_hash=generate_password_hash(str(data["password"])),
            role=Role.TEACHER,
        )

    def list_staff(self) -> list[StaffRegistration]:
        return list(self._registrations.list_staff_registrations())

    def approve_staff(self, registration_id: int) -> StaffRegistration:
        with self._registrations.transaction() as tx:
            reg = tx.get_staff_registration(int(registration_id))
            if not reg:
                raise NotFoundError("Registration not found.")
            if tx.username_taken(reg.username):
                raise ConflictError(f"Username {reg.username} is already taken.")

            tx.insert_staff_user(
                username=reg.username,
                password_hash=reg.password_hash,
                role=Role(reg.role),
                name=reg.name,
            )
            tx.delete_staff_registration(reg.registration_id)
        return reg

    def reject_staff(self, registration_id: int) -> None:
        self._registrations.reject_staff_registration(int(registration_id))
