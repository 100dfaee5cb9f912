from __future__ import annotations

import json
import logging
import math
from typing import Any, Optional

from ..core.constants import AUDIT_PAGE_SIZE
from .repository import AuditLogRepository

logger = logging.getLogger(__name__)


class AuditLogger:
    """Append-only action log.

    ``log_action`` is fire-and-forget: a failing write is logged and never
    reaches the caller, whose mutation has already succeeded.
    """

    def __init__(self, logs: AuditLogRepository):
        self._logs = logs

    def log_action(
        self,
        actor_id: Optional[int],
        actor_username: Optional[str],
        action: str,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        try:
            payload = json.dumps(details or {}, default=str)
            self._logs.append(user_id=actor_id, username=actor_username, action=action, details=payload)
        except Exception:
            logger.exception("Failed to write to audit log (action=%s)", action)

    def list_page(self, page: int = 1, *, limit: int = AUDIT_PAGE_SIZE) -> dict:
        page = max(int(page or 1), 1)
        total = self._logs.count()
        rows = self._logs.list_page(limit=limit, offset=(page - 1) * limit)
        return {
            "logs": [
                {
                    "id": e.entry_id,
                    "user_id": e.user_id,
                    "username": e.username,
                    "action": e.action,
                    "details": e.details,
                    "timestamp": e.timestamp.strftime("%Y-%m-%d %H:%M:%S"),
                }
                for e in rows
            ],
            "pagination": {
                "currentPage": page,
                "totalPages": math.ceil(total / limit) if limit else 0,
                "totalLogs": total,
            },
        }
