"""公共夹具：每个测试使用 tmp_path 下独立的 SQLite 数据库。"""

from __future__ import annotations

from pathlib import Path

import pytest

from avopp.config import AppConfig
from avopp.core.models import Subject
from avopp.service import PlannerService
from avopp.storage import PlannerStore


@pytest.fixture()
def config(tmp_path: Path) -> AppConfig:
    return AppConfig(database_path=str(tmp_path / "avopp.sqlite3"), timezone="America/Bogota")


@pytest.fixture()
def store(config: AppConfig) -> PlannerStore:
    return PlannerStore(config.database_path)


@pytest.fixture()
def subject(store: PlannerStore) -> Subject:
    return store.add_subject(name="Cálculo I", code="CAL1", color="#2563eb")


@pytest.fixture()
def service(store: PlannerStore, config: AppConfig) -> PlannerService:
    return PlannerService(store, config=config)
