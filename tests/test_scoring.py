"""评分引擎单元测试。"""

from __future__ import annotations

import datetime as dt

import pytest

from avopp.core.models import (
    Activity,
    ActivityStatus,
    ActivityType,
    PriorityMode,
    UrgencyColor,
)
from avopp.core.scoring import (
    color_for_hours,
    hours_remaining,
    score_activity,
    status_adjustment,
    type_base_score,
)

UTC = dt.timezone.utc


def _fixed_now() -> dt.datetime:
    return dt.datetime(2024, 1, 1, 12, 0, 0, tzinfo=UTC)


def _activity(
    activity_type: ActivityType = ActivityType.EXAM,
    status: ActivityStatus = ActivityStatus.PENDING,
    due_in_hours: float | None = None,
    priority: PriorityMode = PriorityMode.AUTO,
    manual_priority: int | None = None,
) -> Activity:
    now = _fixed_now()
    due_at = now + dt.timedelta(hours=due_in_hours) if due_in_hours is not None else None
    return Activity(
        id="a1",
        subject_id="s1",
        type=activity_type,
        name="Parcial",
        created_at=now,
        updated_at=now,
        due_at=due_at,
        status=status,
        priority=priority,
        manual_priority=manual_priority,
    )


def test_type_base_and_status_tables() -> None:
    assert type_base_score(ActivityType.EXAM) == 100
    assert type_base_score(ActivityType.DELIVERY) == 70
    assert type_base_score(ActivityType.HOMEWORK) == 70
    assert type_base_score(ActivityType.READING) == 40
    assert type_base_score(ActivityType.CLASS) == 10

    assert status_adjustment(ActivityStatus.PENDING) == 20
    assert status_adjustment(ActivityStatus.IN_PROGRESS) == 10
    assert status_adjustment(ActivityStatus.COMPLETED) == -100
    assert status_adjustment("archived") == 0  # type: ignore[arg-type]


def test_no_due_date_has_no_color_and_no_urgency() -> None:
    for activity_type in ActivityType:
        ranked = score_activity(_activity(activity_type=activity_type), _fixed_now())

        assert ranked.color is UrgencyColor.NONE
        assert ranked.hours_remaining is None
        assert ranked.score == type_base_score(activity_type) + 20


def test_hours_remaining_floors_to_one() -> None:
    now = _fixed_now()

    assert hours_remaining(now + dt.timedelta(hours=1), now) == 1
    assert hours_remaining(now, now) == 1
    assert hours_remaining(now - dt.timedelta(hours=30), now) == 1
    assert hours_remaining(now + dt.timedelta(minutes=30), now) == 1


def test_hours_remaining_truncates_partial_hours() -> None:
    now = _fixed_now()

    assert hours_remaining(now + dt.timedelta(hours=12, minutes=59), now) == 12
    assert hours_remaining(None, now) is None


def test_overdue_scores_like_due_in_one_hour() -> None:
    overdue = score_activity(_activity(due_in_hours=-10), _fixed_now())
    one_hour = score_activity(_activity(due_in_hours=1), _fixed_now())

    assert overdue.score == one_hour.score == 320
    assert overdue.color is UrgencyColor.RED


def test_within_48_hours_is_red_for_any_type_and_status() -> None:
    for activity_type in ActivityType:
        for status in ActivityStatus:
            for hours in (1, 24, 48):
                ranked = score_activity(
                    _activity(activity_type=activity_type, status=status, due_in_hours=hours),
                    _fixed_now(),
                )
                assert ranked.color is UrgencyColor.RED


@pytest.mark.parametrize(
    "hours,expected",
    [
        (48, UrgencyColor.RED),
        (49, UrgencyColor.NONE),
        (71, UrgencyColor.NONE),
        (72, UrgencyColor.YELLOW),
        (120, UrgencyColor.YELLOW),
        (121, UrgencyColor.GREEN),
    ],
)
def test_color_boundaries(hours: int, expected: UrgencyColor) -> None:
    assert color_for_hours(hours) is expected
    assert score_activity(_activity(due_in_hours=hours), _fixed_now()).color is expected


def test_exam_due_in_twelve_hours() -> None:
    ranked = score_activity(_activity(due_in_hours=12), _fixed_now())

    assert ranked.hours_remaining == 12
    assert ranked.score == pytest.approx(136.6667, abs=1e-3)
    assert ranked.color is UrgencyColor.RED
    assert ranked.priority_source is PriorityMode.AUTO


def test_homework_due_in_hundred_hours() -> None:
    ranked = score_activity(
        _activity(activity_type=ActivityType.HOMEWORK, due_in_hours=100),
        _fixed_now(),
    )

    assert ranked.hours_remaining == 100
    assert ranked.score == pytest.approx(92.0)
    assert ranked.color is UrgencyColor.YELLOW


def test_completed_sinks_below_pending() -> None:
    pending = score_activity(_activity(due_in_hours=1), _fixed_now())
    completed = score_activity(
        _activity(status=ActivityStatus.COMPLETED, due_in_hours=1), _fixed_now()
    )
    in_progress = score_activity(
        _activity(status=ActivityStatus.IN_PROGRESS, due_in_hours=1), _fixed_now()
    )

    assert pending.score == 320
    assert in_progress.score == 310
    assert completed.score == 200
    assert completed.score < in_progress.score < pending.score


def test_manual_priority_ignores_type_status_and_due() -> None:
    scores = set()
    for activity_type in ActivityType:
        for status in ActivityStatus:
            for due in (None, 1, 100, 500):
                ranked = score_activity(
                    _activity(
                        activity_type=activity_type,
                        status=status,
                        due_in_hours=due,
                        priority=PriorityMode.MANUAL,
                        manual_priority=250,
                    ),
                    _fixed_now(),
                )
                assert ranked.priority_source is PriorityMode.MANUAL
                scores.add(ranked.score)

    assert scores == {250}


def test_manual_priority_keeps_color_from_due_date() -> None:
    ranked = score_activity(
        _activity(due_in_hours=200, priority=PriorityMode.MANUAL, manual_priority=5),
        _fixed_now(),
    )

    assert ranked.score == 5
    assert ranked.color is UrgencyColor.GREEN


def test_manual_mode_without_value_falls_back_to_auto() -> None:
    ranked = score_activity(_activity(priority=PriorityMode.MANUAL), _fixed_now())

    assert ranked.priority_source is PriorityMode.AUTO
    assert ranked.score == 120


def test_manual_value_is_inert_in_auto_mode() -> None:
    ranked = score_activity(_activity(manual_priority=999), _fixed_now())

    assert ranked.priority_source is PriorityMode.AUTO
    assert ranked.score == 120
