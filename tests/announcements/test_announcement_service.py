import pytest

from school_attendance.core.enums import Role
from school_attendance.core.exceptions import ValidationError


@pytest.fixture
def announcements(container):
    return container.announcement_service


def test_post_then_list_newest_first(announcements, db):
    teacher = db.add_user(username="t", role=Role.TEACHER, name="Ms. T")

    announcements.post(title=" Exam ", content="Friday at 9", created_by=teacher.user_id)
    announcements.post(title="Holiday", content="No class Monday", created_by=None)

    rows = announcements.list_recent()
    assert [a.title for a in rows] == ["Holiday", "Exam"]
    assert rows[1].author_name == "Ms. T"
    assert rows[1].to_dict()["created_at"] == "2024-01-10 08:00:00"


@pytest.mark.parametrize("title, content", [("", "body"), ("Title", "   "), (None, None)])
def test_title_and_content_are_required(announcements, title, content):
    with pytest.raises(ValidationError, match="Title and content are required."):
        announcements.post(title=title, content=content, created_by=None)


def test_delete_missing_is_quiet(announcements, db):
    announcement_id = announcements.post(title="T", content="C", created_by=None)

    announcements.delete(announcement_id)
    announcements.delete(announcement_id)

    assert db.announcements == {}
