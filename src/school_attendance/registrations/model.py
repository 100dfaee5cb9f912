from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class StudentRegistration:
    """A pending self-signup; becomes a student account once approved."""

    registration_id: int
    name: str
    username: str
    password_hash: str
    age: Optional[int]
    gender: Optional[str]
    course_id: Optional[int]
    year_level: Optional[str]
    created_at: Optional[datetime] = None
    course_code: Optional[str] = None
    course_name: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "id": self.registration_id,
            "name": self.name,
            "username": self.username,
            "age": self.age,
            "gender": self.gender,
            "course_id": self.course_id,
            "year_level": self.year_level,
            "timestamp": self.created_at.strftime("%Y-%m-%d %H:%M:%S") if self.created_at else None,
            "course_code": self.course_code,
            "course_name": self.course_name,
        }


@dataclass(frozen=True)
class StaffRegistration:
    registration_id: int
    name: str
    username: str
    password_hash: str
    role: str
    created_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "id": self.registration_id,
            "name": self.name,
            "username": self.username,
            "role": self.role,
            "timestamp": self.created_at.strftime("%Y-%m-%d %H:%M:%S") if self.created_at else None,
        }
