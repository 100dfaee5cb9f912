"""Room double-booking check for recurring course schedules."""
from __future__ import annotations

from typing import Iterable, Optional

from .model import Course, CourseInput


def _tags(days: Optional[str]) -> set[str]:
    return {d.strip() for d in (days or "").split(",") if d.strip()}


def overlaps(candidate: CourseInput, existing: Course) -> bool:
    """True when both meet in the same room on a shared weekday with intersecting times.

    Courses missing any of room, days or times never conflict. Touching
    intervals (one ends when the other starts) do not overlap.
    """
    if not (candidate.room_id and candidate.start_time and candidate.end_time and candidate.days):
        return False
    if not (existing.start_time and existing.end_time and existing.days):
        return False
    if existing.room_id != candidate.room_id:
        return False
    if not _tags(candidate.days) & _tags(existing.days):
        return False
    return candidate.start_time < existing.end_time and candidate.end_time > existing.start_time


def find_conflict(
    candidate: CourseInput,
    courses: Iterable[Course],
    *,
    exclude_course_id: Optional[int] = None,
) -> Optional[Course]:
    for course in courses:
        if exclude_course_id is not None and course.course_id == exclude_course_id:
            continue
        if overlaps(candidate, course):
            return course
    return None
