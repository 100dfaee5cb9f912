import re

from school_attendance.attendance.session_codes import SessionCodeAllocator, random_session_code


class TakenCodes:
    def __init__(self, *codes):
        self.codes = set(codes)
        self.checked = []

    def code_exists(self, code):
        self.checked.append(code)
        return code in self.codes


def test_random_code_is_six_uppercase_hex_chars():
    for _ in range(20):
        assert re.fullmatch(r"[0-9A-F]{6}", random_session_code())


def test_allocator_retries_until_code_is_free():
    tokens = iter(["AAAAAA", "BBBBBB", "CCCCCC"])
    store = TakenCodes("AAAAAA", "BBBBBB")

    code = SessionCodeAllocator(token_factory=lambda: next(tokens)).allocate(store)

    assert code == "CCCCCC"
    assert store.checked == ["AAAAAA", "BBBBBB", "CCCCCC"]
