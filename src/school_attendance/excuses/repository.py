from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import Excuse, ExcuseListRow


class ExcuseRepository(Protocol):
    def get_by_id(self, excuse_id: int) -> Optional[Excuse]:
        raise NotImplementedError

    def submit(self, *, user_id: int, day: date, reason: str) -> bool:
        """Create the (user, day) excuse or replace its reason while it is still Pending.

        Returns False when an excuse for that day has already been processed.
        """
        raise NotImplementedError

    def approve(self, excuse_id: int, *, processed_by: Optional[int]) -> Optional[Excuse]:
        """Mark Approved and set the student's attendance that day to Excused, in one transaction."""
        raise NotImplementedError

    def deny(self, excuse_id: int, *, processed_by: Optional[int]) -> bool:
        raise NotImplementedError

    def update_pending(self, excuse_id: int, *, reason: str, day: date) -> bool:
        raise NotImplementedError

    def delete(self, excuse_id: int) -> bool:
        raise NotImplementedError

    def list_pending(self) -> Sequence[ExcuseListRow]:
        raise NotImplementedError

    def list_processed(self, *, limit: int) -> Sequence[ExcuseListRow]:
        raise NotImplementedError

    def list_for_user(self, user_id: int) -> Sequence[Excuse]:
        raise NotImplementedError

    def count_pending(self) -> int:
        raise NotImplementedError
