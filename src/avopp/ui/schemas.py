"""HTTP 请求/响应模型，对外字段使用 camelCase。"""

from __future__ import annotations

import dataclasses
import datetime as dt

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from avopp.core.agenda import DayBucket, DayPanel, WeeklySummary
from avopp.core.models import (
    Activity,
    ActivityStatus,
    ActivityType,
    PriorityMode,
    RankedActivity,
    Subject,
    UrgencyColor,
)


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# SQLite INTEGER 列的取值范围
INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1


def _blank_to_none(value: object) -> object:
    """空字符串日期视为未填写。"""

    if isinstance(value, str) and not value.strip():
        return None
    return value


# ---- 请求 ----


class SubjectCreate(CamelModel):
    # 必填项由服务层校验，以返回统一的错误消息
    name: str | None = None
    code: str | None = None
    color: str | None = None


class ActivityCreate(CamelModel):
    subject_id: str | None = None
    type: ActivityType | None = None
    name: str | None = None
    description: str | None = None
    start_at: dt.datetime | None = None
    due_at: dt.datetime | None = None

    @field_validator("start_at", "due_at", mode="before")
    @classmethod
    def _blank_dates(cls, value: object) -> object:
        return _blank_to_none(value)


class ActivityPatch(CamelModel):
    """局部更新；只有请求体中出现的字段会写入，显式 null 表示清空。"""

    name: str | None = None
    description: str | None = None
    start_at: dt.datetime | None = None
    due_at: dt.datetime | None = None
    status: ActivityStatus | None = None
    priority: PriorityMode | None = None
    manual_priority: int | None = Field(None, ge=INT64_MIN, le=INT64_MAX)
    completed_at: dt.datetime | None = None
    completed_by: str | None = None

    @field_validator("start_at", "due_at", "completed_at", mode="before")
    @classmethod
    def _blank_dates(cls, value: object) -> object:
        return _blank_to_none(value)

    def changes(self) -> dict:
        return self.model_dump(exclude_unset=True)


# ---- 响应 ----


class SubjectOut(CamelModel):
    id: str
    name: str
    code: str | None = None
    color: str | None = None

    @classmethod
    def from_subject(cls, subject: Subject) -> "SubjectOut":
        return cls.model_validate(dataclasses.asdict(subject))


class ActivityOut(CamelModel):
    id: str
    subject_id: str
    type: ActivityType
    name: str
    description: str | None = None
    start_at: dt.datetime | None = None
    due_at: dt.datetime | None = None
    status: ActivityStatus
    priority: PriorityMode
    manual_priority: int | None = None
    completed_at: dt.datetime | None = None
    completed_by: str | None = None
    created_at: dt.datetime
    updated_at: dt.datetime

    @classmethod
    def from_activity(cls, activity: Activity) -> "ActivityOut":
        return cls.model_validate(dataclasses.asdict(activity))


class RankedActivityOut(ActivityOut):
    score: int | float
    color: UrgencyColor
    priority_source: PriorityMode
    hours_remaining: int | None = None

    @classmethod
    def from_ranked(cls, item: RankedActivity) -> "RankedActivityOut":
        return cls.model_validate(
            {
                **dataclasses.asdict(item.activity),
                "score": item.score,
                "color": item.color,
                "priority_source": item.priority_source,
                "hours_remaining": item.hours_remaining,
            }
        )


class DayPanelOut(CamelModel):
    date: dt.datetime
    classes: list[ActivityOut]
    activities: list[ActivityOut]

    @classmethod
    def from_panel(cls, panel: DayPanel) -> "DayPanelOut":
        return cls(
            date=panel.date,
            classes=[ActivityOut.from_activity(a) for a in panel.classes],
            activities=[ActivityOut.from_activity(a) for a in panel.activities],
        )


class DateRange(CamelModel):
    start: dt.datetime
    end: dt.datetime


class DayBucketOut(CamelModel):
    date: dt.datetime
    entregas: int
    examenes: int

    @classmethod
    def from_bucket(cls, bucket: DayBucket) -> "DayBucketOut":
        return cls(date=bucket.date, entregas=bucket.deliveries, examenes=bucket.exams)


class WeeklySummaryOut(CamelModel):
    range: DateRange
    days: list[DayBucketOut]

    @classmethod
    def from_summary(cls, summary: WeeklySummary) -> "WeeklySummaryOut":
        return cls(
            range=DateRange(start=summary.start, end=summary.end),
            days=[DayBucketOut.from_bucket(b) for b in summary.days],
        )
