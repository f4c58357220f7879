"""日程聚合：当日面板与周汇总，按配置的本地时区切分日期。"""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from typing import Protocol, Sequence
from zoneinfo import ZoneInfo

from avopp.core.models import Activity, ActivityType

WEEKLY_TYPES = (ActivityType.DELIVERY, ActivityType.HOMEWORK, ActivityType.EXAM)


class AgendaSource(Protocol):
    """日程聚合所需的存储读取接口。"""

    def list_classes_between(self, start: dt.datetime, end: dt.datetime) -> list[Activity]:
        """返回开始时间落在区间内的排课，按开始时间升序。"""

    def list_due_between(
        self,
        start: dt.datetime,
        end: dt.datetime,
        *,
        types: Sequence[ActivityType] | None = None,
        exclude_type: ActivityType | None = None,
    ) -> list[Activity]:
        """返回截止时间落在区间内的活动，按截止时间升序。"""


@dataclass
class DayPanel:
    date: dt.datetime
    classes: list[Activity] = field(default_factory=list)
    activities: list[Activity] = field(default_factory=list)


@dataclass
class DayBucket:
    """单日计数：考试与交付类（delivery + homework）。"""

    date: dt.datetime
    deliveries: int = 0
    exams: int = 0


@dataclass
class WeeklySummary:
    start: dt.datetime
    end: dt.datetime
    days: list[DayBucket] = field(default_factory=list)


def day_bounds(now: dt.datetime, tz: ZoneInfo) -> tuple[dt.datetime, dt.datetime]:
    """返回 `now` 所在本地日的首尾时刻（闭区间）。"""

    local_date = now.astimezone(tz).date()
    start = dt.datetime.combine(local_date, dt.time.min, tzinfo=tz)
    end = dt.datetime.combine(local_date, dt.time.max, tzinfo=tz)
    return start, end


def week_bounds(now: dt.datetime, tz: ZoneInfo) -> tuple[dt.datetime, dt.datetime]:
    """返回 `now` 所在周（周一开始）的首尾时刻。"""

    local_date = now.astimezone(tz).date()
    monday = local_date - dt.timedelta(days=local_date.weekday())
    sunday = monday + dt.timedelta(days=6)
    start = dt.datetime.combine(monday, dt.time.min, tzinfo=tz)
    end = dt.datetime.combine(sunday, dt.time.max, tzinfo=tz)
    return start, end


class AgendaService:
    """基于存储生成当日面板与周汇总。"""

    def __init__(self, source: AgendaSource, timezone: str = "America/Bogota") -> None:
        self._source = source
        self._tz = ZoneInfo(timezone)

    def day_panel(self) -> DayPanel:
        now = self._now()
        start, end = day_bounds(now, self._tz)
        return DayPanel(
            date=now,
            classes=self._source.list_classes_between(start, end),
            activities=self._source.list_due_between(start, end, exclude_type=ActivityType.CLASS),
        )

    def weekly_summary(self) -> WeeklySummary:
        now = self._now()
        start, end = week_bounds(now, self._tz)
        monday = start.date()

        buckets: dict[dt.date, DayBucket] = {}
        for offset in range(7):
            day = monday + dt.timedelta(days=offset)
            buckets[day] = DayBucket(date=dt.datetime.combine(day, dt.time.min, tzinfo=self._tz))

        for activity in self._source.list_due_between(start, end, types=WEEKLY_TYPES):
            if activity.due_at is None:
                continue
            bucket = buckets.get(activity.due_at.astimezone(self._tz).date())
            if bucket is None:
                continue
            if activity.type == ActivityType.EXAM:
                bucket.exams += 1
            else:
                bucket.deliveries += 1

        return WeeklySummary(start=start, end=end, days=list(buckets.values()))

    def _now(self) -> dt.datetime:
        return dt.datetime.now(dt.timezone.utc)
