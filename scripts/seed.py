"""清空数据库并写入示例科目与活动。"""

from __future__ import annotations

import datetime as dt
import logging

from avopp.config import AppConfig
from avopp.core.models import ActivityType, PriorityMode
from avopp.storage import PlannerStore

logger = logging.getLogger(__name__)

SUBJECTS = [
    ("Cálculo I", "CAL1", "#2563eb"),
    ("Programación", "PROG", "#16a34a"),
    ("Física", "FIS", "#f59e0b"),
]

# (科目代码, 类型, 名称, 开始偏移小时, 截止偏移小时)
ACTIVITIES = [
    ("CAL1", ActivityType.CLASS, "Clase magistral", 2, None),
    ("PROG", ActivityType.CLASS, "Laboratorio", 5, None),
    ("CAL1", ActivityType.HOMEWORK, "Taller derivadas", None, 36),
    ("PROG", ActivityType.DELIVERY, "Proyecto API", None, 4 * 24),
    ("FIS", ActivityType.EXAM, "Parcial 1", None, 6 * 24),
    ("PROG", ActivityType.READING, "Capítulo 3", None, 7 * 24),
    ("PROG", ActivityType.EXAM, "Quiz sorpresa", None, 12),
    ("CAL1", ActivityType.DELIVERY, "Práctica límites", None, 24),
    ("FIS", ActivityType.HOMEWORK, "Problemas cinemática", None, 72),
]

MANUAL_PRIORITY = 250


def seed(config: AppConfig | None = None, now: dt.datetime | None = None) -> PlannerStore:
    """写入示例数据，并把第一条 homework 设为手动优先级。"""

    config = config or AppConfig.load()
    now = now or dt.datetime.now(dt.timezone.utc)
    store = PlannerStore(config.database_path)
    store.delete_all()

    by_code = {}
    for name, code, color in SUBJECTS:
        by_code[code] = store.add_subject(name=name, code=code, color=color)

    first_homework = None
    for code, activity_type, name, start_hours, due_hours in ACTIVITIES:
        activity = store.add_activity(
            subject_id=by_code[code].id,
            activity_type=activity_type,
            name=name,
            start_at=now + dt.timedelta(hours=start_hours) if start_hours is not None else None,
            due_at=now + dt.timedelta(hours=due_hours) if due_hours is not None else None,
        )
        if activity_type is ActivityType.HOMEWORK and first_homework is None:
            first_homework = activity

    if first_homework is not None:
        store.update_activity(
            first_homework.id,
            {"priority": PriorityMode.MANUAL, "manual_priority": MANUAL_PRIORITY},
        )

    logger.info("示例数据已写入 subjects=%s activities=%s", len(SUBJECTS), store.count_activities())
    return store


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="[%(asctime)s][%(levelname)s] %(name)s: %(message)s")
    seed()
