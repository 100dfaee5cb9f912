from __future__ import annotations

from typing import ContextManager, Optional, Protocol, Sequence

from .codes import StudentCodeStore
from .model import Student


class StudentTransaction(StudentCodeStore, Protocol):
    def get_user_id_by_code(self, student_code: str) -> Optional[int]:
        raise NotImplementedError

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
        raise NotImplementedError

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
        raise NotImplementedError


class StudentRepository(Protocol):
    def transaction(self) -> ContextManager[StudentTransaction]:
        raise NotImplementedError

    def get_by_code(self, student_code: str) -> Optional[Student]:
        raise NotImplementedError

    def search(
        self,
        *,
        search: str = "",
        course_id: Optional[int] = None,
        year_level: Optional[str] = None,
        limit: int,
        offset: int,
    ) -> tuple[Sequence[Student], int]:
        raise NotImplementedError

    def list_all(self) -> Sequence[Student]:
        raise NotImplementedError

    def count(self) -> int:
        raise NotImplementedError

    def delete(self, user_id: int) -> bool:
        raise NotImplementedError

    def set_credentials(self, *, user_id: int, username: str, password_hash: str) -> bool:
        raise NotImplementedError
