"""Per-year sequential student codes (``YYYY-NNN``)."""
from __future__ import annotations

from datetime import datetime
from typing import Callable, Optional, Protocol

from ..common.datetime_utils import now_local
from ..core.constants import STUDENT_SEQ_KEY_PREFIX


class StudentCodeStore(Protocol):
    """Counter + existence checks bound to the caller's open transaction."""

    def read_counter(self, key: str) -> int:
        raise NotImplementedError

    def write_counter(self, key: str, value: int) -> None:
        raise NotImplementedError

    def code_exists(self, code: str) -> bool:
        raise NotImplementedError


def sequence_key(year: int) -> str:
    return f"{STUDENT_SEQ_KEY_PREFIX}{int(year)}"


def format_student_code(year: int, seq: int) -> str:
    return f"{int(year)}-{int(seq):03d}"


class StudentCodeAllocator:
    def __init__(self, *, clock: Callable[[], datetime] = now_local):
        self._clock = clock

    def allocate(self, store: StudentCodeStore, year: Optional[int] = None) -> str:
        """Advance the year's counter past any code already taken and return the first free one.

        Must run inside the transaction that inserts the student so the counter
        row stays locked until the new code is stored.
        """
        year = int(year or self._clock().year)
        key = sequence_key(year)

        seq = store.read_counter(key)
        while True:
            seq += 1
            candidate = format_student_code(year, seq)
            # Manually entered codes can occupy future sequence values
            if not store.code_exists(candidate):
                break

        store.write_counter(key, seq)
        return candidate
