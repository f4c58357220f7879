"""业务服务：校验输入、完成状态切换，并桥接排名与日程聚合。"""

from __future__ import annotations

import datetime as dt
import logging
from typing import Any, Mapping

from avopp.config import AppConfig
from avopp.core.agenda import AgendaService, DayPanel, WeeklySummary
from avopp.core.models import (
    Activity,
    ActivityStatus,
    ActivityType,
    RankedActivity,
    Subject,
)
from avopp.core.ranking import RankingService
from avopp.errors import NotFoundError, ValidationError
from avopp.storage import PlannerStore

logger = logging.getLogger(__name__)


class PlannerService:
    """HTTP 层之下的唯一入口，所有失败以 `PlannerError` 子类抛出。"""

    def __init__(self, store: PlannerStore, config: AppConfig | None = None) -> None:
        self._config = config or AppConfig.load_default()
        self._store = store
        self.ranking = RankingService(store)
        self.agenda = AgendaService(store, timezone=self._config.timezone)

    # ---- 科目 ----

    def list_subjects(self) -> list[Subject]:
        return self._store.list_subjects()

    def create_subject(
        self, name: str | None, code: str | None = None, color: str | None = None
    ) -> Subject:
        if not name:
            raise ValidationError("name is required")
        subject = self._store.add_subject(name=name, code=code, color=color)
        logger.info("新建科目 id=%s name=%s", subject.id, subject.name)
        return subject

    # ---- 活动 ----

    def list_activities(
        self,
        subject_id: str | None = None,
        activity_type: ActivityType | None = None,
        status: ActivityStatus | None = None,
    ) -> list[Activity]:
        return self._store.list_activities(
            subject_id=subject_id,
            activity_type=activity_type,
            status=status,
        )

    def create_activity(
        self,
        subject_id: str | None,
        activity_type: ActivityType | None,
        name: str | None,
        description: str | None = None,
        start_at: dt.datetime | None = None,
        due_at: dt.datetime | None = None,
    ) -> Activity:
        if not subject_id or activity_type is None or not name:
            raise ValidationError("subjectId, type, name are required")
        if self._store.get_subject(subject_id) is None:
            raise ValidationError(f"subject not found: {subject_id}")

        activity = self._store.add_activity(
            subject_id=subject_id,
            activity_type=activity_type,
            name=name,
            description=description,
            start_at=start_at,
            due_at=due_at,
        )
        logger.info("新建活动 id=%s type=%s", activity.id, activity.type.value)
        return activity

    def get_activity(self, activity_id: str) -> Activity:
        activity = self._store.get_activity(activity_id)
        if activity is None:
            raise NotFoundError("not found")
        return activity

    def update_activity(self, activity_id: str, changes: Mapping[str, Any]) -> Activity:
        """局部更新。未出现的字段不变，显式 None 清空；完成字段可单独改写，不做配对校验。"""

        updated = self._store.update_activity(activity_id, changes)
        if updated is None:
            raise NotFoundError("not found")
        return updated

    def toggle_completed(self, activity_id: str) -> Activity:
        """在 completed 与 pending 之间切换，并成对设置或清空完成时间与完成人。"""

        current = self.get_activity(activity_id)
        if current.status == ActivityStatus.COMPLETED:
            changes = {
                "status": ActivityStatus.PENDING,
                "completed_at": None,
                "completed_by": None,
            }
        else:
            changes = {
                "status": ActivityStatus.COMPLETED,
                "completed_at": self._now(),
                "completed_by": self._config.completed_by_label,
            }
        updated = self.update_activity(activity_id, changes)
        logger.info("切换完成状态 id=%s status=%s", activity_id, updated.status.value)
        return updated

    # ---- 派生视图 ----

    def rank(self, subject_id: str | None = None) -> list[RankedActivity]:
        return self.ranking.rank(subject_id=subject_id)

    def day_panel(self) -> DayPanel:
        return self.agenda.day_panel()

    def weekly_summary(self) -> WeeklySummary:
        return self.agenda.weekly_summary()

    def _now(self) -> dt.datetime:
        return dt.datetime.now(dt.timezone.utc)
