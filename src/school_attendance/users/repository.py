from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import Role
from .model import User


class UserRepository(Protocol):
    def get_by_id(self, user_id: int) -> Optional[User]:
        raise NotImplementedError

    def get_by_username(self, username: str) -> Optional[User]:
        raise NotImplementedError

    def get_by_reset_token(self, token: str, *, now: datetime) -> Optional[User]:
        raise NotImplementedError

    def has_admin(self) -> bool:
        raise NotImplementedError

    def create_user(self, *, username: str, password_hash: str, role: Role, name: str) -> int:
        raise NotImplementedError

    def update_password(self, *, user_id: int, password_hash: str) -> bool:
        """Store a new hash and clear any pending reset token."""
        raise NotImplementedError

    def set_reset_token(self, *, user_id: int, token: str, expiry: datetime) -> bool:
        raise NotImplementedError

    def list_staff(self) -> Sequence[User]:
        raise NotImplementedError

    def delete_staff(self, user_id: int) -> bool:
        raise NotImplementedError
