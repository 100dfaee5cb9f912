from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class AuditLogEntry:
    entry_id: int
    user_id: Optional[int]
    username: Optional[str]
    action: str
    details: Optional[str]
    timestamp: datetime
