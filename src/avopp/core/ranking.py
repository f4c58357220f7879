"""排名编排：取出非排课活动，统一时刻评分后排序。"""

from __future__ import annotations

import datetime as dt
import logging
from typing import Iterable, Protocol

from avopp.core.models import Activity, ActivityStatus, ActivityType, RankedActivity
from avopp.core.scoring import score_activity, type_base_score

logger = logging.getLogger(__name__)


class ActivitySource(Protocol):
    """排名所需的存储读取接口。"""

    def list_activities(
        self,
        *,
        subject_id: str | None = None,
        activity_type: ActivityType | None = None,
        status: ActivityStatus | None = None,
        exclude_type: ActivityType | None = None,
    ) -> list[Activity]:
        """按条件返回活动列表。"""


def _ranking_key(item: RankedActivity) -> tuple[float, float, int]:
    # 无截止时间视为时间戳 0，在同分项中排最前
    due_at = item.activity.due_at
    due_ts = due_at.timestamp() if due_at is not None else 0.0
    return (-float(item.score), due_ts, -type_base_score(item.activity.type))


def rank_activities(activities: Iterable[Activity], now: dt.datetime) -> list[RankedActivity]:
    """以同一时刻评分并排序：分数降序、截止时间升序、类型基础分降序。"""

    ranked = [score_activity(activity, now) for activity in activities]
    ranked.sort(key=_ranking_key)
    return ranked


class RankingService:
    """从存储中取候选活动并生成排名，不修改存储。"""

    def __init__(self, source: ActivitySource) -> None:
        self._source = source

    def rank(self, subject_id: str | None = None) -> list[RankedActivity]:
        activities = self._source.list_activities(
            subject_id=subject_id,
            exclude_type=ActivityType.CLASS,
        )
        ranked = rank_activities(activities, self._now())
        logger.debug("排名完成 subject=%s count=%s", subject_id, len(ranked))
        return ranked

    def _now(self) -> dt.datetime:
        return dt.datetime.now(dt.timezone.utc)
