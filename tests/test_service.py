"""业务服务测试：校验、完成切换与派生视图。"""

from __future__ import annotations

import datetime as dt

import pytest

from avopp.config import AppConfig
from avopp.core.models import ActivityStatus, ActivityType, PriorityMode, Subject
from avopp.errors import NotFoundError, StoreConstraintError, ValidationError
from avopp.service import PlannerService
from avopp.storage import PlannerStore

UTC = dt.timezone.utc


def _fixed_now() -> dt.datetime:
    return dt.datetime(2024, 1, 1, 12, 0, 0, tzinfo=UTC)


def test_create_subject_requires_name(service: PlannerService) -> None:
    with pytest.raises(ValidationError, match="name is required"):
        service.create_subject(None)
    with pytest.raises(ValidationError):
        service.create_subject("")


def test_create_subject_duplicate_code(service: PlannerService) -> None:
    service.create_subject("Física", code="FIS")

    with pytest.raises(StoreConstraintError):
        service.create_subject("Física II", code="FIS")


def test_create_activity_validation(service: PlannerService, subject: Subject) -> None:
    with pytest.raises(ValidationError, match="subjectId, type, name are required"):
        service.create_activity(subject.id, None, "Parcial")
    with pytest.raises(ValidationError):
        service.create_activity(None, ActivityType.EXAM, "Parcial")
    with pytest.raises(ValidationError):
        service.create_activity(subject.id, ActivityType.EXAM, "")
    with pytest.raises(ValidationError, match="subject not found"):
        service.create_activity("missing", ActivityType.EXAM, "Parcial")


def test_get_and_update_missing_activity(service: PlannerService) -> None:
    with pytest.raises(NotFoundError):
        service.get_activity("missing")
    with pytest.raises(NotFoundError):
        service.update_activity("missing", {"name": "x"})
    with pytest.raises(NotFoundError):
        service.toggle_completed("missing")


def test_toggle_completed_sets_and_clears_fields(service: PlannerService, subject: Subject) -> None:
    activity = service.create_activity(subject.id, ActivityType.DELIVERY, "Proyecto API")
    service._now = _fixed_now  # type: ignore[method-assign]

    completed = service.toggle_completed(activity.id)

    assert completed.status is ActivityStatus.COMPLETED
    assert completed.completed_at == _fixed_now()
    assert completed.completed_by == "student"

    reopened = service.toggle_completed(activity.id)

    assert reopened.status is ActivityStatus.PENDING
    assert reopened.completed_at is None
    assert reopened.completed_by is None


def test_toggle_from_in_progress_returns_to_pending(service: PlannerService, subject: Subject) -> None:
    activity = service.create_activity(subject.id, ActivityType.HOMEWORK, "Taller")
    service.update_activity(activity.id, {"status": ActivityStatus.IN_PROGRESS})

    assert service.toggle_completed(activity.id).status is ActivityStatus.COMPLETED
    assert service.toggle_completed(activity.id).status is ActivityStatus.PENDING


def test_toggle_uses_configured_actor_label(store: PlannerStore, subject: Subject, config: AppConfig) -> None:
    service = PlannerService(store, config=config.model_copy(update={"completed_by_label": "monitor"}))
    activity = service.create_activity(subject.id, ActivityType.EXAM, "Parcial")

    assert service.toggle_completed(activity.id).completed_by == "monitor"


def test_update_activity_patch_semantics(service: PlannerService, subject: Subject) -> None:
    due = _fixed_now() + dt.timedelta(days=2)
    activity = service.create_activity(
        subject.id, ActivityType.READING, "Capítulo 3", description="Sección 1", due_at=due
    )

    updated = service.update_activity(
        activity.id, {"priority": PriorityMode.MANUAL, "manual_priority": 300, "description": None}
    )

    assert updated.priority is PriorityMode.MANUAL
    assert updated.manual_priority == 300
    assert updated.description is None
    assert updated.due_at == due
    assert updated.name == "Capítulo 3"


def test_rank_reflects_manual_override(service: PlannerService, subject: Subject) -> None:
    exam = service.create_activity(
        subject.id, ActivityType.EXAM, "Parcial", due_at=dt.datetime.now(UTC) + dt.timedelta(hours=5)
    )
    reading = service.create_activity(subject.id, ActivityType.READING, "Capítulo 3")
    service.create_activity(subject.id, ActivityType.CLASS, "Clase")

    assert [item.activity.id for item in service.rank()] == [exam.id, reading.id]

    service.update_activity(reading.id, {"priority": PriorityMode.MANUAL, "manual_priority": 1000})
    ranked = service.rank()

    assert [item.activity.id for item in ranked] == [reading.id, exam.id]
    assert ranked[0].priority_source is PriorityMode.MANUAL
    assert ranked[0].score == 1000


def test_weekly_summary_via_service(service: PlannerService) -> None:
    assert len(service.weekly_summary().days) == 7
    assert service.day_panel().classes == []
