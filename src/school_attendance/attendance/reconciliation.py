"""Fill in Absent placeholders so every enrolled student has a row for the day."""
from __future__ import annotations

import logging
from datetime import date
from typing import Optional

from ..core.exceptions import ValidationError
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


class AttendanceReconciler:
    def __init__(self, attendance: AttendanceRepository):
        self._attendance = attendance

    def ensure_rows(self, day: date, *, course_id: Optional[int] = None, room_id: Optional[int] = None) -> int:
        """Insert an Absent row for each enrolled student lacking one; returns rows inserted.

        A room resolves to the courses held there that day. All courses are
        reconciled in one transaction, and repeat calls insert nothing.
        """
        if course_id is not None:
            course_ids = [int(course_id)]
        elif room_id is not None:
            course_ids = self._attendance.course_ids_in_room(day, int(room_id))
        else:
            raise ValidationError("Course ID or Room ID is required.")

        if not course_ids:
            return 0

        inserted = 0
        with self._attendance.reconciliation() as batch:
            for cid in course_ids:
                missing = batch.enrolled_user_ids(cid) - batch.recorded_user_ids(cid, day)
                if missing:
                    inserted += batch.insert_absent(cid, day, missing)

        if inserted:
            logger.info("Reconciled %s: %d absent row(s) added for course(s) %s", day.isoformat(), inserted, course_ids)
        return inserted
