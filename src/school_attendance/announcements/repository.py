from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Announcement


class AnnouncementRepository(Protocol):
    def list_recent(self) -> Sequence[Announcement]:
        raise NotImplementedError

    def create(self, *, title: str, content: str, created_by: Optional[int]) -> int:
        raise NotImplementedError

    def delete(self, announcement_id: int) -> bool:
        raise NotImplementedError
