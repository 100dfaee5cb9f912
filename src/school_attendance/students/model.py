from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Student:
    """Read model: a student account joined with its details row."""

    user_id: int
    name: str
    username: Optional[str]
    student_code: str
    age: int
    gender: str
    year_level: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "id": self.user_id,
            "username": self.username,
            "name": self.name,
            "student_code": self.student_code,
            "age": self.age,
            "gender": self.gender,
            "year_level": self.year_level,
        }


@dataclass(frozen=True)
class NewStudent:
    name: str
    age: int
    gender: str
    year_level: Optional[str] = None
    student_code: Optional[str] = None
