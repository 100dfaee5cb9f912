from __future__ import annotations

from typing import Optional

from ..core.exceptions import ValidationError
from .model import Announcement
from .repository import AnnouncementRepository


class AnnouncementService:
    def __init__(self, announcements: AnnouncementRepository):
        self._announcements = announcements

    def list_recent(self) -> list[Announcement]:
        return list(self._announcements.list_recent())

    def post(self, *, title: str, content: str, created_by: Optional[int]) -> int:
        if not title or not content or not str(title).strip() or not str(content).strip():
            raise ValidationError("Title and content are required.")
        return self._announcements.create(title=title.strip(), content=content.strip(), created_by=created_by)

    def delete(self, announcement_id: int) -> None:
        # Deleting a missing announcement is not an error
        self._announcements.delete(int(announcement_id))
