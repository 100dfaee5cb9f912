"""Background pass that finalizes Absent rows once a class has ended."""
from __future__ import annotations

import atexit
import logging
from datetime import datetime, time
from typing import Optional

from apscheduler.schedulers.background import BackgroundScheduler

from ..common.datetime_utils import format_hhmm, now_local, weekday_tag
from ..core.constants import DEFAULT_SWEEP_INTERVAL_MINUTES
from ..courses.model import Course
from ..courses.repository import CourseRepository
from .model import AttendanceSession
from .reconciliation import AttendanceReconciler
from .repository import SessionRepository

logger = logging.getLogger(__name__)

JOB_ID = "auto_absent_sweep"


def effective_end_time(course: Course, session: Optional[AttendanceSession], tag: str) -> Optional[time]:
    """When the course ends today, or None if it does not meet today.

    A session opened for today wins over the weekly schedule, and its end
    time (when set) overrides the course's.
    """
    if session is not None:
        return session.end_time or course.end_time
    if course.end_time and tag in course.day_tags:
        return course.end_time
    return None


class AutoAbsentSweep:
    def __init__(
        self,
        courses: CourseRepository,
        sessions: SessionRepository,
        reconciler: AttendanceReconciler,
    ):
        self._courses = courses
        self._sessions = sessions
        self._reconciler = reconciler

    def run_once(self, now: datetime | None = None) -> dict[str, int]:
        """Reconcile every course whose class has ended today.

        Returns ``{course_code: rows_inserted}`` for the courses that were checked.
        Existing rows are never touched, so repeated runs are harmless.
        """
        now = now or now_local()
        today = now.date()
        tag = weekday_tag(today)
        current = format_hhmm(now)

        sessions = {s.course_id: s for s in self._sessions.list_for_date(today)}
        results: dict[str, int] = {}

        for course in self._courses.list_all():
            end = effective_end_time(course, sessions.get(course.course_id), tag)
            if end is None or not current > format_hhmm(end):
                continue
            try:
                inserted = self._reconciler.ensure_rows(today, course_id=course.course_id)
            except Exception:
                logger.exception("Auto-absent failed for %s on %s", course.code, today.isoformat())
                continue
            if inserted:
                logger.info("Auto-absent: marked %d student(s) absent for %s on %s", inserted, course.code, today.isoformat())
            results[course.code] = inserted

        return results


class AutoAbsentScheduler:
    """Runs the sweep at startup and then on a fixed interval."""

    def __init__(self, sweep: AutoAbsentSweep, *, interval_minutes: int = DEFAULT_SWEEP_INTERVAL_MINUTES):
        self._sweep = sweep
        self._interval = int(interval_minutes)
        self._scheduler: Optional[BackgroundScheduler] = None

    @property
    def running(self) -> bool:
        return self._scheduler is not None and self._scheduler.running

    def _tick(self) -> None:
        try:
            self._sweep.run_once()
        except Exception:
            # Next tick tries again
            logger.exception("Auto-absent sweep failed")

    def start(self) -> None:
        if self.running:
            return

        self._tick()

        scheduler = BackgroundScheduler(daemon=True)
        scheduler.add_job(
            func=self._tick,
            trigger="interval",
            minutes=self._interval,
            id=JOB_ID,
            max_instances=1,
            coalesce=True,
        )
        scheduler.start()
        self._scheduler = scheduler
        atexit.register(self.shutdown)
        logger.info("Auto-absent sweep scheduled every %d minute(s)", self._interval)

    def shutdown(self) -> None:
        if self._scheduler is None:
            return
        if self._scheduler.running:
            self._scheduler.shutdown(wait=False)
        self._scheduler = None
