"""Short random codes students type in to mark themselves present."""
from __future__ import annotations

import secrets
from typing import Callable, Protocol

from ..core.constants import SESSION_CODE_BYTES


class SessionCodeStore(Protocol):
    def code_exists(self, code: str) -> bool:
        raise NotImplementedError


def random_session_code() -> str:
    # 3 random bytes -> 6 uppercase hex characters
    return secrets.token_hex(SESSION_CODE_BYTES).upper()


class SessionCodeAllocator:
    def __init__(self, *, token_factory: Callable[[], str] = random_session_code):
        self._token_factory = token_factory

    def allocate(self, store: SessionCodeStore) -> str:
        """Draw codes until one is not used by any existing session."""
        while True:
            code = self._token_factory()
            if not store.code_exists(code):
                return code
