from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Optional

from ..core.constants import DEFAULT_LATE_GRACE_MINUTES
from ..core.enums import AttendanceStatus
from .strategies.as_requested_strategy import AsRequestedStrategy
from .strategies.base import AttendanceStrategy
from .strategies.late_strategy import LateStrategy
from .strategies.on_time_strategy import OnTimeStrategy


@dataclass
class AttendanceStrategyFactory:
    """Factory Pattern: choose appropriate strategy based on rules."""

    grace_minutes: int = DEFAULT_LATE_GRACE_MINUTES

    def for_mark(self, *, now: datetime, day: date, start_time: time) -> AttendanceStrategy:
        threshold = datetime.combine(day, start_time) + timedelta(minutes=self.grace_minutes)
        if now > threshold:
            return LateStrategy()
        return OnTimeStrategy()

    def for_manual_edit(
        self,
        *,
        now: datetime,
        day: date,
        requested: AttendanceStatus,
        start_time: Optional[time],
    ) -> AttendanceStrategy:
        # Only a same-day "Present" can be promoted to Late; past dates keep the requested status
        if requested != AttendanceStatus.PRESENT or start_time is None or day != now.date():
            return AsRequestedStrategy(requested)
        return self.for_mark(now=now, day=day, start_time=start_time)
