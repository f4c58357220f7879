"""活动评分引擎：类型、状态、截止时间与手动覆盖合成单一分数。

自动分数 = 类型基础分 + 状态调整 + 紧迫度（200 / 剩余小时数）。
剩余小时数按整小时截断，且下限为 1，因此已逾期与“1 小时后截止”
的紧迫度相同。颜色只由剩余小时数决定，48 到 72 小时之间（不含端点）
不着色。
"""

from __future__ import annotations

import datetime as dt

from avopp.core.models import (
    Activity,
    ActivityStatus,
    ActivityType,
    PriorityMode,
    RankedActivity,
    UrgencyColor,
)

TYPE_BASE_SCORES: dict[ActivityType, int] = {
    ActivityType.EXAM: 100,
    ActivityType.DELIVERY: 70,
    ActivityType.HOMEWORK: 70,
    ActivityType.READING: 40,
    ActivityType.CLASS: 10,
}

STATUS_ADJUSTMENTS: dict[ActivityStatus, int] = {
    ActivityStatus.PENDING: 20,
    ActivityStatus.IN_PROGRESS: 10,
    ActivityStatus.COMPLETED: -100,
}

URGENCY_NUMERATOR = 200.0
RED_MAX_HOURS = 48
YELLOW_MIN_HOURS = 72
YELLOW_MAX_HOURS = 120

_ONE_HOUR = dt.timedelta(hours=1)


def type_base_score(activity_type: ActivityType) -> int:
    return TYPE_BASE_SCORES.get(activity_type, TYPE_BASE_SCORES[ActivityType.CLASS])


def status_adjustment(status: ActivityStatus) -> int:
    return STATUS_ADJUSTMENTS.get(status, 0)


def hours_remaining(due_at: dt.datetime | None, now: dt.datetime) -> int | None:
    """返回距截止的整小时数（下限 1）；无截止时间时返回 None。"""

    if due_at is None:
        return None
    whole_hours = (due_at - now) // _ONE_HOUR
    return max(1, int(whole_hours))


def urgency(hours: int | None) -> float:
    if hours is None:
        return 0.0
    return URGENCY_NUMERATOR / hours


def color_for_hours(hours: int | None) -> UrgencyColor:
    if hours is None:
        return UrgencyColor.NONE
    if hours <= RED_MAX_HOURS:
        return UrgencyColor.RED
    if YELLOW_MIN_HOURS <= hours <= YELLOW_MAX_HOURS:
        return UrgencyColor.YELLOW
    if hours > YELLOW_MAX_HOURS:
        return UrgencyColor.GREEN
    return UrgencyColor.NONE


def auto_score(activity: Activity, hours: int | None) -> float:
    return type_base_score(activity.type) + status_adjustment(activity.status) + urgency(hours)


def score_activity(activity: Activity, now: dt.datetime) -> RankedActivity:
    """计算单条活动的分数、颜色与优先级来源。"""

    hours = hours_remaining(activity.due_at, now)

    score: int | float
    if activity.priority == PriorityMode.MANUAL and activity.manual_priority is not None:
        score = activity.manual_priority
        source = PriorityMode.MANUAL
    else:
        score = auto_score(activity, hours)
        source = PriorityMode.AUTO

    return RankedActivity(
        activity=activity,
        score=score,
        color=color_for_hours(hours),
        priority_source=source,
        hours_remaining=hours,
    )
