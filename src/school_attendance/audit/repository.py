from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import AuditLogEntry


class AuditLogRepository(Protocol):
    def append(self, *, user_id: Optional[int], username: Optional[str], action: str, details: str) -> None:
        raise NotImplementedError

    def list_page(self, *, limit: int, offset: int) -> Sequence[AuditLogEntry]:
        raise NotImplementedError

    def count(self) -> int:
        raise NotImplementedError
