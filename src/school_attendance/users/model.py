from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class User:
    """Domain entity: an account of any role.

    Students created by the registrar have no username/password until they
    complete self-setup.
    """

    user_id: int
    username: Optional[str]
    password_hash: Optional[str]
    role: Role
    name: str
    student_code: Optional[str] = None
    reset_token: Optional[str] = None
    reset_token_expiry: Optional[datetime] = None
