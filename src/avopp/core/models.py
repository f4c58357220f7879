"""科目与活动的领域模型。"""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from enum import Enum


class ActivityType(str, Enum):
    """活动类型；`CLASS` 表示排课，不参与排名。"""

    CLASS = "class"
    DELIVERY = "delivery"
    HOMEWORK = "homework"
    READING = "reading"
    EXAM = "exam"


class ActivityStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class PriorityMode(str, Enum):
    """优先级来源：自动计算或手动覆盖。"""

    AUTO = "auto"
    MANUAL = "manual"


class UrgencyColor(str, Enum):
    """按剩余时间划分的红绿灯颜色。"""

    RED = "red"
    YELLOW = "yellow"
    GREEN = "green"
    NONE = "none"


@dataclass
class Subject:
    id: str
    name: str
    code: str | None = None
    color: str | None = None


@dataclass
class Activity:
    """单条活动记录，时间字段均为带时区的 UTC 时间。"""

    id: str
    subject_id: str
    type: ActivityType
    name: str
    created_at: dt.datetime
    updated_at: dt.datetime
    description: str | None = None
    start_at: dt.datetime | None = None
    due_at: dt.datetime | None = None
    status: ActivityStatus = ActivityStatus.PENDING
    priority: PriorityMode = PriorityMode.AUTO
    manual_priority: int | None = None
    completed_at: dt.datetime | None = None
    completed_by: str | None = None


@dataclass
class RankedActivity:
    """带评分结果的活动。"""

    activity: Activity
    score: int | float
    color: UrgencyColor
    priority_source: PriorityMode
    hours_remaining: int | None = None
