import pytest

from school_attendance.database.migrations import MIGRATIONS, Migration, pending


def test_versions_are_unique_and_ascending():
    versions = [m.version for m in MIGRATIONS]

    assert versions == sorted(set(versions))
    assert versions[0] == 1


def test_pending_skips_applied_versions_in_order():
    steps = [Migration(3, "c", ()), Migration(1, "a", ()), Migration(2, "b", ())]

    assert [m.version for m in pending(steps, {1})] == [2, 3]
    assert pending(steps, {1, 2, 3}) == []


def test_duplicate_versions_are_refused():
    with pytest.raises(RuntimeError):
        pending([Migration(1, "a", ()), Migration(1, "b", ())], set())


def test_every_step_has_statements():
    assert all(m.statements for m in MIGRATIONS)
