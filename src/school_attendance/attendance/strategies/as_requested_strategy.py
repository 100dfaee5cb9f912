from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from ...core.enums import AttendanceStatus
from .base import AttendanceStrategy, StatusDecision


@dataclass(frozen=True)
class AsRequestedStrategy(AttendanceStrategy):
    """Staff edits that keep whatever status was asked for."""

    status: AttendanceStatus

    def decide(self, *, now: datetime) -> StatusDecision:
        return StatusDecision(status=self.status)
