"""SQLite 存储：科目与活动的持久化。"""

from __future__ import annotations

import contextlib
import datetime as dt
import logging
import sqlite3
import uuid
from pathlib import Path
from typing import Any, Mapping, Sequence

from avopp.core.models import (
    Activity,
    ActivityStatus,
    ActivityType,
    PriorityMode,
    Subject,
)
from avopp.errors import StoreConstraintError

logger = logging.getLogger(__name__)

# PATCH 可写入的列
UPDATABLE_FIELDS = (
    "name",
    "description",
    "start_at",
    "due_at",
    "status",
    "priority",
    "manual_priority",
    "completed_at",
    "completed_by",
)

_DATETIME_FIELDS = {"start_at", "due_at", "completed_at"}


def _dt_to_db(value: dt.datetime | None) -> str | None:
    """统一转为定长 UTC ISO 文本，保证按字符串比较即按时间比较。"""

    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=dt.timezone.utc)
    try:
        value = value.astimezone(dt.timezone.utc)
    except OverflowError as exc:
        raise StoreConstraintError(f"datetime out of range: {value.isoformat()}") from exc
    return value.isoformat(timespec="microseconds")


def _db_to_dt(value: str | None) -> dt.datetime | None:
    if not value:
        return None
    parsed = dt.datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=dt.timezone.utc)
    return parsed


def _new_id() -> str:
    return uuid.uuid4().hex


class PlannerStore:
    """
    SQLite 科目/活动存储。

    - 每次调用打开独立连接，不在进程内共享可变状态
    - 表缺失时创建，缺列时通过 ALTER TABLE 追加
    """

    def __init__(self, db_path: str | Path = "avopp.sqlite3") -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()
        logger.info("PlannerStore 就绪 db=%s activities=%s", self._db_path, self.count_activities())

    # ---- 连接与表结构 ----

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), timeout=30.0)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys=ON")
        with contextlib.suppress(sqlite3.DatabaseError):
            conn.execute("PRAGMA journal_mode=WAL")
        return conn

    def _ensure_schema(self) -> None:
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS subjects (
                    id TEXT NOT NULL PRIMARY KEY,
                    name TEXT NOT NULL,
                    code TEXT UNIQUE,
                    color TEXT
                )
                """
            )
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS activities (
                    id TEXT NOT NULL PRIMARY KEY,
                    subject_id TEXT NOT NULL
                        REFERENCES subjects(id) ON DELETE CASCADE ON UPDATE CASCADE,
                    type TEXT NOT NULL,
                    name TEXT NOT NULL,
                    description TEXT,
                    start_at TEXT,
                    due_at TEXT,
                    status TEXT NOT NULL DEFAULT 'pending',
                    priority TEXT NOT NULL DEFAULT 'auto',
                    manual_priority INTEGER,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
                """
            )

            cur.execute("PRAGMA table_info(activities)")
            cols = {row["name"] for row in cur.fetchall()}

            def add_col(name: str, decl: str) -> None:
                if name in cols:
                    return
                cur.execute(f"ALTER TABLE activities ADD COLUMN {name} {decl}")
                logger.info("PlannerStore 迁移：新增列 %s", name)

            add_col("completed_at", "TEXT")
            add_col("completed_by", "TEXT")

            cur.execute("CREATE INDEX IF NOT EXISTS idx_activities_subject ON activities(subject_id)")
            cur.execute("CREATE INDEX IF NOT EXISTS idx_activities_due ON activities(due_at)")
            cur.execute(
                "CREATE INDEX IF NOT EXISTS idx_activities_completed ON activities(completed_at)"
            )
            conn.commit()
        finally:
            conn.close()

    @staticmethod
    def _row_to_subject(row: sqlite3.Row) -> Subject:
        return Subject(id=row["id"], name=row["name"], code=row["code"], color=row["color"])

    @staticmethod
    def _row_to_activity(row: sqlite3.Row) -> Activity:
        return Activity(
            id=row["id"],
            subject_id=row["subject_id"],
            type=ActivityType(row["type"]),
            name=row["name"],
            description=row["description"],
            start_at=_db_to_dt(row["start_at"]),
            due_at=_db_to_dt(row["due_at"]),
            status=ActivityStatus(row["status"]),
            priority=PriorityMode(row["priority"]),
            manual_priority=row["manual_priority"],
            completed_at=_db_to_dt(row["completed_at"]),
            completed_by=row["completed_by"],
            created_at=_db_to_dt(row["created_at"]),  # type: ignore[arg-type]
            updated_at=_db_to_dt(row["updated_at"]),  # type: ignore[arg-type]
        )

    # ---- 科目 ----

    def list_subjects(self) -> list[Subject]:
        conn = self._get_conn()
        try:
            rows = conn.execute("SELECT * FROM subjects ORDER BY name ASC").fetchall()
            return [self._row_to_subject(r) for r in rows]
        finally:
            conn.close()

    def get_subject(self, subject_id: str) -> Subject | None:
        conn = self._get_conn()
        try:
            row = conn.execute("SELECT * FROM subjects WHERE id = ?", (subject_id,)).fetchone()
            return self._row_to_subject(row) if row else None
        finally:
            conn.close()

    def add_subject(self, *, name: str, code: str | None = None, color: str | None = None) -> Subject:
        subject = Subject(id=_new_id(), name=name, code=code, color=color)
        conn = self._get_conn()
        try:
            conn.execute(
                "INSERT INTO subjects(id, name, code, color) VALUES (?, ?, ?, ?)",
                (subject.id, subject.name, subject.code, subject.color),
            )
            conn.commit()
        except sqlite3.IntegrityError as exc:
            raise StoreConstraintError(str(exc)) from exc
        finally:
            conn.close()
        logger.debug("Subject added id=%s code=%s", subject.id, code)
        return subject

    # ---- 活动 ----

    def count_activities(self) -> int:
        conn = self._get_conn()
        try:
            (n,) = conn.execute("SELECT COUNT(*) FROM activities").fetchone()
            return int(n)
        finally:
            conn.close()

    def get_activity(self, activity_id: str) -> Activity | None:
        conn = self._get_conn()
        try:
            row = conn.execute("SELECT * FROM activities WHERE id = ?", (activity_id,)).fetchone()
            return self._row_to_activity(row) if row else None
        finally:
            conn.close()

    def list_activities(
        self,
        *,
        subject_id: str | None = None,
        activity_type: ActivityType | None = None,
        status: ActivityStatus | None = None,
        exclude_type: ActivityType | None = None,
    ) -> list[Activity]:
        """按条件过滤；截止时间升序（NULL 在前），同截止时间按创建时间降序。"""

        clauses: list[str] = []
        params: list[Any] = []
        if subject_id:
            clauses.append("subject_id = ?")
            params.append(subject_id)
        if activity_type is not None:
            clauses.append("type = ?")
            params.append(ActivityType(activity_type).value)
        if status is not None:
            clauses.append("status = ?")
            params.append(ActivityStatus(status).value)
        if exclude_type is not None:
            clauses.append("type != ?")
            params.append(ActivityType(exclude_type).value)

        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        sql = f"SELECT * FROM activities {where} ORDER BY due_at ASC, created_at DESC, id ASC"

        conn = self._get_conn()
        try:
            return [self._row_to_activity(r) for r in conn.execute(sql, params).fetchall()]
        finally:
            conn.close()

    def list_classes_between(self, start: dt.datetime, end: dt.datetime) -> list[Activity]:
        conn = self._get_conn()
        try:
            rows = conn.execute(
                """
                SELECT *
                FROM activities
                WHERE type = ?
                  AND start_at >= ?
                  AND start_at <= ?
                ORDER BY start_at ASC, id ASC
                """,
                (ActivityType.CLASS.value, _dt_to_db(start), _dt_to_db(end)),
            ).fetchall()
            return [self._row_to_activity(r) for r in rows]
        finally:
            conn.close()

    def list_due_between(
        self,
        start: dt.datetime,
        end: dt.datetime,
        *,
        types: Sequence[ActivityType] | None = None,
        exclude_type: ActivityType | None = None,
    ) -> list[Activity]:
        clauses = ["due_at >= ?", "due_at <= ?"]
        params: list[Any] = [_dt_to_db(start), _dt_to_db(end)]
        if types:
            placeholders = ",".join("?" for _ in types)
            clauses.append(f"type IN ({placeholders})")
            params.extend(ActivityType(t).value for t in types)
        if exclude_type is not None:
            clauses.append("type != ?")
            params.append(ActivityType(exclude_type).value)

        sql = f"SELECT * FROM activities WHERE {' AND '.join(clauses)} ORDER BY due_at ASC, id ASC"
        conn = self._get_conn()
        try:
            return [self._row_to_activity(r) for r in conn.execute(sql, params).fetchall()]
        finally:
            conn.close()

    def add_activity(
        self,
        *,
        subject_id: str,
        activity_type: ActivityType,
        name: str,
        description: str | None = None,
        start_at: dt.datetime | None = None,
        due_at: dt.datetime | None = None,
        now: dt.datetime | None = None,
    ) -> Activity:
        created = _dt_to_db(now or dt.datetime.now(dt.timezone.utc))
        activity_id = _new_id()

        conn = self._get_conn()
        try:
            conn.execute(
                """
                INSERT INTO activities(
                    id, subject_id, type, name, description,
                    start_at, due_at, status, priority,
                    created_at, updated_at
                )
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    activity_id,
                    subject_id,
                    ActivityType(activity_type).value,
                    name,
                    description,
                    _dt_to_db(start_at),
                    _dt_to_db(due_at),
                    ActivityStatus.PENDING.value,
                    PriorityMode.AUTO.value,
                    created,
                    created,
                ),
            )
            conn.commit()
        except (sqlite3.IntegrityError, OverflowError) as exc:
            raise StoreConstraintError(str(exc)) from exc
        finally:
            conn.close()

        logger.debug("Activity added id=%s type=%s due_at=%s", activity_id, activity_type, due_at)
        activity = self.get_activity(activity_id)
        if activity is None:
            raise RuntimeError(f"activity {activity_id} missing after insert")
        return activity

    def update_activity(self, activity_id: str, changes: Mapping[str, Any]) -> Activity | None:
        """局部更新；`changes` 中出现的键才会写入，值为 None 时清空该列。

        记录不存在时返回 None。
        """

        unknown = set(changes) - set(UPDATABLE_FIELDS)
        if unknown:
            raise ValueError(f"unsupported fields: {', '.join(sorted(unknown))}")

        fields: list[str] = []
        params: list[Any] = []
        for name in UPDATABLE_FIELDS:
            if name not in changes:
                continue
            value = changes[name]
            if name in _DATETIME_FIELDS:
                value = _dt_to_db(value)
            elif isinstance(value, (ActivityStatus, PriorityMode)):
                value = value.value
            fields.append(f"{name} = ?")
            params.append(value)

        fields.append("updated_at = ?")
        params.append(_dt_to_db(dt.datetime.now(dt.timezone.utc)))
        params.append(activity_id)

        sql = f"UPDATE activities SET {', '.join(fields)} WHERE id = ?"
        conn = self._get_conn()
        try:
            cur = conn.execute(sql, params)
            conn.commit()
            if cur.rowcount == 0:
                return None
        except (sqlite3.IntegrityError, OverflowError) as exc:
            raise StoreConstraintError(str(exc)) from exc
        finally:
            conn.close()

        return self.get_activity(activity_id)

    def delete_all(self) -> None:
        """清空全部科目与活动，供种子脚本使用。"""

        conn = self._get_conn()
        try:
            conn.execute("DELETE FROM activities")
            conn.execute("DELETE FROM subjects")
            conn.commit()
        finally:
            conn.close()
        logger.info("PlannerStore 已清空 db=%s", self._db_path)
