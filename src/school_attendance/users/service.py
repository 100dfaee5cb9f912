from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.datetime_utils import now_local
from ..common.validators import require_non_empty
from ..core.constants import DEFAULT_RESET_TOKEN_TTL_MINUTES
from ..core.enums import STAFF_ROLES, Role
from ..core.exceptions import AuthenticationError, AuthorizationError, ConflictError, NotFoundError, ValidationError
from .model import User
from .repository import UserRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionUser:
    """What we store into the Flask session after login."""

    user_id: int
    username: str
    name: str
    role: Role
    student_code: Optional[str]

    def to_session(self) -> dict:
        return {
            "id": self.user_id,
            "username": self.username,
            "name": self.name,
            "role": self.role.value,
            "student_code": self.student_code,
        }


@dataclass(frozen=True)
class ResetTicket:
    user_id: int
    username: str
    token: str
    expires_at: datetime


def _issue_reset(users: UserRepository, user: User, *, now: datetime, ttl_minutes: int) -> ResetTicket:
    token = secrets.token_hex(32)
    expiry = now + timedelta(minutes=ttl_minutes)
    users.set_reset_token(user_id=user.user_id, token=token, expiry=expiry)
    return ResetTicket(user_id=user.user_id, username=user.username or "", token=token, expires_at=expiry)


class AuthService:
    """Use cases: login, first-run admin setup, password changes and resets."""

    def __init__(self, users: UserRepository, *, reset_ttl_minutes: int = DEFAULT_RESET_TOKEN_TTL_MINUTES):
        self._users = users
        self._reset_ttl = int(reset_ttl_minutes)

    def needs_setup(self) -> bool:
        return not self._users.has_admin()

    def authenticate(self, username: str, password: str) -> SessionUser:
        user = self._users.get_by_username((username or "").strip())
        if not user or not user.password_hash:
            raise AuthenticationError("Invalid credentials.")

        try:
            ok = check_password_hash(user.password_hash, password or "")
        except ValueError:
            # e.g. placeholder or corrupted hashes
            ok = False

        if not ok:
            raise AuthenticationError("Invalid credentials.")

        return SessionUser(
            user_id=user.user_id,
            username=user.username or "",
            name=user.name,
            role=user.role,
            student_code=user.student_code,
        )

    def setup_admin(self, *, name: str, username: str, password: str) -> int:
        if self._users.has_admin():
            raise AuthorizationError("Setup has already been completed.")

        name = require_non_empty(name, "Name")
        username = require_non_empty(username, "Username")
        password = require_non_empty(password, "Password")

        if self._users.get_by_username(username):
            raise ConflictError("Username is already taken.")

        user_id = self._users.create_user(
            username=username,
            password_hash=generate_password_hash(password),
            role=Role.ADMIN,
            name=name,
        )
        logger.info("Admin account %r created; setup complete", username)
        return user_id

    def change_password(self, *, user_id: int, current_password: str, new_password: str) -> None:
        if not current_password or not new_password:
            raise ValidationError("Current and new passwords are required.")

        user = self._users.get_by_id(user_id)
        if not user:
            raise NotFoundError("User not found.")

        if not user.password_hash or not check_password_hash(user.password_hash, current_password):
            raise AuthorizationError("Incorrect current password.")

        self._users.update_password(user_id=user.user_id, password_hash=generate_password_hash(new_password))

    def request_password_reset(self, username: str, *, now: datetime | None = None) -> Optional[ResetTicket]:
        """Issue a reset token; returns None for unknown usernames so callers can stay silent."""
        username = require_non_empty(username, "Username")
        user = self._users.get_by_username(username)
        if not user:
            return None
        return _issue_reset(self._users, user, now=now or now_local(), ttl_minutes=self._reset_ttl)

    def reset_password(self, *, token: str, new_password: str, now: datetime | None = None) -> User:
        if not token or not new_password:
            raise ValidationError("Token and new password are required.")

        user = self._users.get_by_reset_token(token, now=now or now_local())
        if not user:
            raise ValidationError("Invalid or expired password reset token.")

        self._users.update_password(user_id=user.user_id, password_hash=generate_password_hash(new_password))
        return user


class StaffService:
    """Use case: manage teacher/registrar accounts (admin)."""

    def __init__(self, users: UserRepository, *, reset_ttl_minutes: int = DEFAULT_RESET_TOKEN_TTL_MINUTES):
        self._users = users
        self._reset_ttl = int(reset_ttl_minutes)

    def list_staff(self) -> list[dict]:
        return [
            {"id": u.user_id, "username": u.username, "name": u.name, "role": u.role.value}
            for u in self._users.list_staff()
        ]

    def create_staff(self, *, name: str, username: str, password: str, role: str) -> int:
        if not name or not username or not password or not role:
            raise ValidationError("Name, username, password, and role are required.")
        try:
            staff_role = Role(role)
        except ValueError:
            raise ValidationError("Invalid role specified.")
        if staff_role not in STAFF_ROLES:
            raise ValidationError("Invalid role specified.")

        if self._users.get_by_username(username):
            raise ConflictError("Username is already taken.")

        return self._users.create_user(
            username=username.strip(),
            password_hash=generate_password_hash(password),
            role=staff_role,
            name=name.strip(),
        )

    def delete_staff(self, user_id: int) -> None:
        if not self._users.delete_staff(int(user_id)):
            raise NotFoundError("Staff user not found or you are not allowed to delete this user.")

    def issue_reset(self, user_id: int, *, now: datetime | None = None) -> ResetTicket:
        user = self._users.get_by_id(int(user_id))
        if not user:
            raise NotFoundError("User not found.")
        return _issue_reset(self._users, user, now=now or now_local(), ttl_minutes=self._reset_ttl)
