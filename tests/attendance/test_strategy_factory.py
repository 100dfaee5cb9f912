from datetime import date, datetime, time

from school_attendance.attendance.factory import AttendanceStrategyFactory
from school_attendance.attendance.strategies.as_requested_strategy import AsRequestedStrategy
from school_attendance.attendance.strategies.late_strategy import LateStrategy
from school_attendance.attendance.strategies.on_time_strategy import OnTimeStrategy
from school_attendance.core.enums import AttendanceStatus

DAY = date(2024, 1, 10)
START = time(9, 0)


def test_factory_mark_on_time_at_grace_boundary():
    factory = AttendanceStrategyFactory()
    strategy = factory.for_mark(now=datetime(2024, 1, 10, 9, 15, 0), day=DAY, start_time=START)

    assert isinstance(strategy, OnTimeStrategy)
    assert strategy.decide(now=datetime(2024, 1, 10, 9, 15)).status == AttendanceStatus.PRESENT


def test_factory_mark_late_just_after_grace():
    factory = AttendanceStrategyFactory()
    strategy = factory.for_mark(now=datetime(2024, 1, 10, 9, 15, 30), day=DAY, start_time=START)

    assert isinstance(strategy, LateStrategy)


def test_factory_respects_configured_grace():
    factory = AttendanceStrategyFactory(grace_minutes=5)

    assert isinstance(factory.for_mark(now=datetime(2024, 1, 10, 9, 5), day=DAY, start_time=START), OnTimeStrategy)
    assert isinstance(factory.for_mark(now=datetime(2024, 1, 10, 9, 6), day=DAY, start_time=START), LateStrategy)


def test_manual_present_today_is_promoted_to_late():
    factory = AttendanceStrategyFactory()
    strategy = factory.for_manual_edit(
        now=datetime(2024, 1, 10, 9, 40), day=DAY, requested=AttendanceStatus.PRESENT, start_time=START
    )

    assert isinstance(strategy, LateStrategy)


def test_manual_present_on_past_date_is_kept():
    factory = AttendanceStrategyFactory()
    strategy = factory.for_manual_edit(
        now=datetime(2024, 1, 11, 9, 40), day=DAY, requested=AttendanceStatus.PRESENT, start_time=START
    )

    assert isinstance(strategy, AsRequestedStrategy)
    assert strategy.decide(now=datetime(2024, 1, 11, 9, 40)).status == AttendanceStatus.PRESENT


def test_manual_absent_is_never_promoted():
    factory = AttendanceStrategyFactory()
    strategy = factory.for_manual_edit(
        now=datetime(2024, 1, 10, 11, 0), day=DAY, requested=AttendanceStatus.ABSENT, start_time=START
    )

    assert strategy.decide(now=datetime(2024, 1, 10, 11, 0)).status == AttendanceStatus.ABSENT
