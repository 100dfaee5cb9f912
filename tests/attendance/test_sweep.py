from datetime import date, datetime, time

from school_attendance.attendance.model import AttendanceSession
from school_attendance.attendance.sweep import AutoAbsentScheduler, effective_end_time
from school_attendance.courses.model import Course

WED = date(2024, 1, 10)


def course(**kwargs):
    defaults = dict(course_id=1, code="CS101", name="Intro", start_time=time(9, 0), end_time=time(10, 0), days="Mon,Wed")
    defaults.update(kwargs)
    return Course(**defaults)


def session(end_time=None):
    return AttendanceSession(session_id=1, course_id=1, day=WED, code="ABC123", start_time=time(9, 0), end_time=end_time)


def test_scheduled_day_uses_course_end():
    assert effective_end_time(course(), None, "Wed") == time(10, 0)


def test_unscheduled_day_without_session_is_skipped():
    assert effective_end_time(course(), None, "Tue") is None


def test_session_end_overrides_course_end():
    assert effective_end_time(course(), session(time(11, 30)), "Tue") == time(11, 30)


def test_session_without_end_falls_back_to_course_end():
    assert effective_end_time(course(), session(), "Tue") == time(10, 0)


def test_course_without_end_time_only_sweeps_via_session():
    assert effective_end_time(course(end_time=None), None, "Wed") is None


def test_sweep_waits_until_class_has_ended(container, db, cs101):
    sweep = container.auto_absent_sweep

    assert sweep.run_once(now=datetime(2024, 1, 10, 10, 0)) == {}
    assert db.attendance == {}

    assert sweep.run_once(now=datetime(2024, 1, 10, 10, 1)) == {"CS101": 3}
    assert sweep.run_once(now=datetime(2024, 1, 10, 10, 16)) == {"CS101": 0}


def test_sweep_skips_courses_not_meeting_today(container, db, cs101):
    # 2024-01-11 is a Thursday
    assert container.auto_absent_sweep.run_once(now=datetime(2024, 1, 11, 18, 0)) == {}


def test_sweep_uses_session_end_override(container, db, cs101):
    course_, _ = cs101
    container.attendance_service.open_session(course_id=course_.course_id, day=WED, start_time="09:00", end_time="12:00")

    assert container.auto_absent_sweep.run_once(now=datetime(2024, 1, 10, 11, 0)) == {}
    assert container.auto_absent_sweep.run_once(now=datetime(2024, 1, 10, 12, 5)) == {"CS101": 3}


class ExplodingSweep:
    def __init__(self):
        self.calls = 0

    def run_once(self, now=None):
        self.calls += 1
        raise RuntimeError("db down")


def test_scheduler_runs_immediately_and_survives_failures():
    sweep = ExplodingSweep()
    scheduler = AutoAbsentScheduler(sweep, interval_minutes=60)

    scheduler.start()
    try:
        assert sweep.calls == 1
        assert scheduler.running
    finally:
        scheduler.shutdown()

    assert not scheduler.running
