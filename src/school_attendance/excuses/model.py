from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..core.enums import ExcuseStatus


@dataclass(frozen=True)
class Excuse:
    excuse_id: int
    user_id: int
    day: date
    reason: str
    status: ExcuseStatus
    processed_by: Optional[int] = None

    def to_dict(self) -> dict:
        return {
            "id": self.excuse_id,
            "user_id": self.user_id,
            "date": self.day.isoformat(),
            "reason": self.reason,
            "status": self.status.value,
            "processed_by": self.processed_by,
        }


@dataclass(frozen=True)
class ExcuseListRow:
    """Excuse joined with the student and, once processed, who handled it."""

    excuse: Excuse
    student_code: str
    student_name: str
    processor_name: Optional[str] = None

    def to_dict(self) -> dict:
        e = self.excuse
        return {
            "id": e.excuse_id,
            "date": e.day.isoformat(),
            "reason": e.reason,
            "status": e.status.value,
            "student_code": self.student_code,
            "name": self.student_name,
            "student_name": self.student_name,
            "processor_name": self.processor_name,
        }
