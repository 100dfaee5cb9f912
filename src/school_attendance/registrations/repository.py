from __future__ import annotations

from typing import ContextManager, Optional, Protocol, Sequence

from ..core.enums import Role
from ..students.repository import StudentTransaction
from .model import StaffRegistration, StudentRegistration


class RegistrationTransaction(StudentTransaction, Protocol):
    def username_taken(self, username: str) -> bool:
        raise NotImplementedError

    def get_student_registration(self, registration_id: int) -> Optional[StudentRegistration]:
        raise NotImplementedError

    def get_staff_registration(self, registration_id: int) -> Optional[StaffRegistration]:
        raise NotImplementedError

    def course_exists(self, course_id: int) -> bool:
        raise NotImplementedError

    def enroll(self, *, user_id: int, course_id: int) -> None:
        raise NotImplementedError

    def insert_staff_user(self, *, username: str, password_hash: str, role: Role, name: str) -> int:
        raise NotImplementedError

    def delete_student_registration(self, registration_id: int) -> None:
        raise NotImplementedError

    def delete_staff_registration(self, registration_id: int) -> None:
        raise NotImplementedError


class RegistrationRepository(Protocol):
    def transaction(self) -> ContextManager[RegistrationTransaction]:
        raise NotImplementedError

    def username_in_use(self, username: str) -> bool:
        """Taken by an account or by any pending signup."""
        raise NotImplementedError

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
        raise NotImplementedError

    def add_staff_registration(self, *, name: str, username: str, password_hash: str, role: Role) -> int:
        raise NotImplementedError

    def list_student_registrations(self) -> Sequence[StudentRegistration]:
        raise NotImplementedError

    def list_staff_registrations(self) -> Sequence[StaffRegistration]:
        raise NotImplementedError

    def reject_student_registration(self, registration_id: int) -> bool:
        raise NotImplementedError

    def reject_staff_registration(self, registration_id: int) -> bool:
        raise NotImplementedError
