"""FastAPI 应用：科目、活动、排名与日程接口。"""

from __future__ import annotations

import logging
from pathlib import Path

from fastapi import FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse
from fastapi.staticfiles import StaticFiles

from avopp.config import AppConfig
from avopp.core.models import ActivityStatus, ActivityType
from avopp.errors import PlannerError
from avopp.service import PlannerService
from avopp.storage import PlannerStore
from avopp.ui.schemas import (
    ActivityCreate,
    ActivityOut,
    ActivityPatch,
    DayPanelOut,
    RankedActivityOut,
    SubjectCreate,
    SubjectOut,
    WeeklySummaryOut,
)

logger = logging.getLogger(__name__)


def create_app(
    service: PlannerService | None = None,
    config: AppConfig | None = None,
) -> FastAPI:
    """构建 FastAPI 应用并注册路由与错误处理。"""

    config = config or AppConfig.load()
    if service is None:
        service = PlannerService(PlannerStore(config.database_path), config=config)

    app = FastAPI(title="AVOPP")
    app.state.service = service

    # 通配来源不能与凭据同时启用
    allow_any = "*" in config.cors_allowed_origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if allow_any else list(config.cors_allowed_origins),
        allow_credentials=not allow_any,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(PlannerError)
    async def planner_error(_request: Request, exc: PlannerError) -> JSONResponse:
        logger.info("请求失败 %s: %s", type(exc).__name__, exc)
        return JSONResponse(status_code=exc.status_code, content={"error": str(exc)})

    @app.exception_handler(RequestValidationError)
    async def request_validation_error(_request: Request, exc: RequestValidationError) -> JSONResponse:
        message = _format_validation_errors(exc.errors())
        logger.info("请求校验失败: %s", message)
        return JSONResponse(status_code=400, content={"error": message})

    static_dir = _resolve_static_directory(config)
    if static_dir is not None:
        app.mount("/static", StaticFiles(directory=str(static_dir), html=True), name="static")

        @app.get("/", tags=["ui"], include_in_schema=False)
        async def index() -> RedirectResponse:
            return RedirectResponse(url="/static/index.html", status_code=307)

    @app.get("/health", tags=["system"])
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    # ---- 科目 ----

    @app.get("/api/subjects", tags=["subjects"], response_model=list[SubjectOut])
    def list_subjects() -> list[SubjectOut]:
        return [SubjectOut.from_subject(s) for s in service.list_subjects()]

    @app.post("/api/subjects", tags=["subjects"], status_code=201, response_model=SubjectOut)
    def create_subject(payload: SubjectCreate) -> SubjectOut:
        subject = service.create_subject(payload.name, code=payload.code, color=payload.color)
        return SubjectOut.from_subject(subject)

    # ---- 活动 ----

    @app.get("/api/activities", tags=["activities"], response_model=list[ActivityOut])
    def list_activities(
        subject_id: str | None = Query(None, alias="subjectId"),
        activity_type: ActivityType | None = Query(None, alias="type"),
        status: ActivityStatus | None = Query(None),
    ) -> list[ActivityOut]:
        items = service.list_activities(subject_id=subject_id, activity_type=activity_type, status=status)
        return [ActivityOut.from_activity(a) for a in items]

    @app.post("/api/activities", tags=["activities"], status_code=201, response_model=ActivityOut)
    def create_activity(payload: ActivityCreate) -> ActivityOut:
        activity = service.create_activity(
            payload.subject_id,
            payload.type,
            payload.name,
            description=payload.description,
            start_at=payload.start_at,
            due_at=payload.due_at,
        )
        return ActivityOut.from_activity(activity)

    # 必须先于 /api/activities/{activity_id} 注册，否则 "ranking" 会被当作 id
    @app.get("/api/activities/ranking", tags=["activities"], response_model=list[RankedActivityOut])
    def ranking(subject_id: str | None = Query(None, alias="subjectId")) -> list[RankedActivityOut]:
        return [RankedActivityOut.from_ranked(item) for item in service.rank(subject_id=subject_id)]

    @app.get("/api/activities/{activity_id}", tags=["activities"], response_model=ActivityOut)
    def get_activity(activity_id: str) -> ActivityOut:
        return ActivityOut.from_activity(service.get_activity(activity_id))

    @app.patch("/api/activities/{activity_id}", tags=["activities"], response_model=ActivityOut)
    def update_activity(activity_id: str, payload: ActivityPatch) -> ActivityOut:
        return ActivityOut.from_activity(service.update_activity(activity_id, payload.changes()))

    @app.post(
        "/api/activities/{activity_id}/toggle-completed",
        tags=["activities"],
        response_model=ActivityOut,
    )
    def toggle_completed(activity_id: str) -> ActivityOut:
        return ActivityOut.from_activity(service.toggle_completed(activity_id))

    # ---- 日程 ----

    @app.get("/api/day", tags=["agenda"], response_model=DayPanelOut)
    def day_panel() -> DayPanelOut:
        return DayPanelOut.from_panel(service.day_panel())

    @app.get("/api/weekly-summary", tags=["agenda"], response_model=WeeklySummaryOut)
    def weekly_summary() -> WeeklySummaryOut:
        return WeeklySummaryOut.from_summary(service.weekly_summary())

    return app


def _format_validation_errors(errors: list) -> str:
    parts: list[str] = []
    for error in errors:
        location = ".".join(str(p) for p in error.get("loc", ()) if p != "body")
        message = error.get("msg", "invalid value")
        parts.append(f"{location}: {message}" if location else message)
    return "; ".join(parts) or "invalid request"


def _resolve_static_directory(config: AppConfig) -> Path | None:
    """查找静态资源目录：配置项优先，其次工作目录下的 `public/`。"""

    candidates: list[Path] = []
    if config.static_dir:
        candidates.append(Path(config.static_dir))
    candidates.append(Path.cwd() / "public")

    for path in candidates:
        if path.is_dir():
            return path

    return None
