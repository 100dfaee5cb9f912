from datetime import datetime

import pytest

from school_attendance.core.exceptions import ConflictError, ValidationError
from school_attendance.students.codes import StudentCodeAllocator, format_student_code, sequence_key


class DictStore:
    def __init__(self, counters=None, codes=()):
        self.counters = dict(counters or {})
        self.codes = set(codes)

    def read_counter(self, key):
        return self.counters.get(key, 0)

    def write_counter(self, key, value):
        self.counters[key] = value

    def code_exists(self, code):
        return code in self.codes


def test_codes_are_sequential_within_a_year():
    store = DictStore()
    allocator = StudentCodeAllocator()

    first = allocator.allocate(store, year=2025)
    store.codes.add(first)
    second = allocator.allocate(store, year=2025)

    assert (first, second) == ("2025-001", "2025-002")
    assert store.counters[sequence_key(2025)] == 2


def test_allocator_skips_codes_already_taken():
    store = DictStore(counters={"last_student_seq_2025": 4}, codes={"2025-005", "2025-006"})

    code = StudentCodeAllocator().allocate(store, year=2025)

    assert code == "2025-007"
    assert store.counters["last_student_seq_2025"] == 7


def test_each_year_has_its_own_counter():
    store = DictStore(counters={"last_student_seq_2024": 41})
    allocator = StudentCodeAllocator(clock=lambda: datetime(2025, 9, 1))

    assert allocator.allocate(store) == "2025-001"
    assert allocator.allocate(store, year=2024) == "2024-042"


def test_format_pads_to_three_digits_but_not_beyond():
    assert format_student_code(2025, 7) == "2025-007"
    assert format_student_code(2025, 1234) == "2025-1234"


def test_create_allocates_code_when_none_given(container, db):
    svc = container.student_service

    a = svc.create({"name": "Ann", "age": "17", "gender": "F"})
    b = svc.create({"name": "Ben", "age": 18, "gender": "M", "year_level": "2"})

    assert a.student_code == "2025-001"
    assert b.student_code == "2025-002"
    assert db.meta["last_student_seq_2025"] == 2
    assert db.details[b.user_id]["year_level"] == "2"


def test_create_with_manual_code_skips_the_counter(container, db):
    svc = container.student_service
    svc.create({"name": "Manual", "age": 17, "gender": "F", "student_code": "2025-001"})

    auto = svc.create({"name": "Auto", "age": 17, "gender": "M"})

    assert auto.student_code == "2025-002"


def test_create_rejects_duplicate_manual_code_and_leaves_no_trace(container, db):
    svc = container.student_service
    svc.create({"name": "First", "age": 17, "gender": "F", "student_code": "X-1"})

    with pytest.raises(ConflictError):
        svc.create({"name": "Second", "age": 17, "gender": "F", "student_code": "X-1"})

    assert [d["student_code"] for d in db.details.values()] == ["X-1"]


def test_create_requires_name_age_and_gender(container):
    with pytest.raises(ValidationError):
        container.student_service.create({"name": "NoAge", "gender": "F"})


def test_repeated_allocations_advance_counter_once_each(container, db):
    svc = container.student_service

    codes = [svc.create({"name": f"S{i}", "age": 17, "gender": "F"}).student_code for i in range(25)]

    assert len(set(codes)) == 25
    assert db.meta["last_student_seq_2025"] == 25
    assert codes[-1] == "2025-025"
