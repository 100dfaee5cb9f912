from __future__ import annotations

import logging
from datetime import date
from typing import Optional

from ..common.datetime_utils import parse_iso_date
from ..core.constants import EXCUSE_HISTORY_LIMIT
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from .model import Excuse, ExcuseListRow
from .repository import ExcuseRepository

logger = logging.getLogger(__name__)


class ExcuseService:
    """Absence excuses: students submit, staff approve or deny.

    Approval excuses the student for the whole day, across every course.
    """

    def __init__(self, excuses: ExcuseRepository):
        self._excuses = excuses

    def submit(self, *, user_id: int, day, reason: str, today: date) -> None:
        if not reason or not day:
            raise ValidationError("Date and reason are required.")
        day = day if isinstance(day, date) else parse_iso_date(day)
        if day < today:
            raise ValidationError("Cannot submit an excuse for a past date.")

        if not self._excuses.submit(user_id=int(user_id), day=day, reason=reason.strip()):
            raise AuthorizationError("Cannot update an excuse that has already been processed.")

    def approve(self, excuse_id: int, *, processed_by: Optional[int]) -> Excuse:
        excuse = self._excuses.approve(int(excuse_id), processed_by=processed_by)
        if not excuse:
            raise NotFoundError("Excuse not found.")
        logger.info("Excuse %s approved; user %s excused on %s", excuse.excuse_id, excuse.user_id, excuse.day)
        return excuse

    def deny(self, excuse_id: int, *, processed_by: Optional[int]) -> None:
        if not self._excuses.deny(int(excuse_id), processed_by=processed_by):
            raise NotFoundError("Excuse not found.")

    def update(self, excuse_id: int, *, reason: str, day) -> None:
        if not reason or not day:
            raise ValidationError("Reason and date are required.")
        day = day if isinstance(day, date) else parse_iso_date(day)
        if not self._excuses.update_pending(int(excuse_id), reason=reason.strip(), day=day):
            raise NotFoundError("Excuse not found or it has already been processed.")

    def delete(self, excuse_id: int) -> None:
        if not self._excuses.delete(int(excuse_id)):
            raise NotFoundError("Excuse not found.")

    def list_pending(self) -> list[ExcuseListRow]:
        return list(self._excuses.list_pending())

    def list_history(self, *, limit: int = EXCUSE_HISTORY_LIMIT) -> list[ExcuseListRow]:
        return list(self._excuses.list_processed(limit=limit))

    def list_for_user(self, user_id: int) -> list[Excuse]:
        return list(self._excuses.list_for_user(int(user_id)))
