"""应用配置模型。"""

from __future__ import annotations

import importlib.util
import logging
import os
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger(__name__)

ENV_PREFIX = "AVOPP"


class AppConfig(BaseModel):
    """总配置，可由项目根目录的 `config.local.py` 与环境变量覆盖。"""

    database_path: str = "avopp.sqlite3"
    timezone: str = "America/Bogota"
    host: str = "127.0.0.1"
    port: int = Field(3000, ge=1, le=65535)
    completed_by_label: str = Field("student", min_length=1)
    static_dir: str | None = None
    cors_allowed_origins: list[str] = Field(default_factory=lambda: ["*"])

    @field_validator("timezone")
    @classmethod
    def _check_timezone(cls, value: str) -> str:
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"unknown timezone: {value}") from exc
        return value

    @classmethod
    def load_default(cls) -> "AppConfig":
        return cls()

    @classmethod
    def load(cls) -> "AppConfig":
        """优先尝试加载项目根目录的 `config.local.py`，再应用环境变量覆盖。"""

        return cls._load_local().with_env_overrides()

    @classmethod
    def _load_local(cls) -> "AppConfig":
        root_dir = Path(__file__).resolve().parents[2]
        local_path = root_dir / "config.local.py"
        if not local_path.exists():
            return cls.load_default()

        spec = importlib.util.spec_from_file_location("config_local", local_path)
        if spec is None or spec.loader is None:
            return cls.load_default()

        module = importlib.util.module_from_spec(spec)
        try:
            spec.loader.exec_module(module)  # type: ignore[arg-type]
        except Exception:
            logger.warning("无法执行本地配置 %s，使用默认配置", local_path, exc_info=True)
            return cls.load_default()

        load_fn = getattr(module, "load_config", None)
        if callable(load_fn):
            try:
                return load_fn()
            except Exception:
                logger.warning("load_config() 执行失败，使用默认配置", exc_info=True)
                return cls.load_default()
        return cls.load_default()

    def with_env_overrides(self, environ: dict[str, str] | None = None) -> "AppConfig":
        """应用 `AVOPP_DB_PATH`、`AVOPP_PORT`（或 `PORT`）、`AVOPP_TIMEZONE` 与 `AVOPP_CORS_ORIGINS`。"""

        env = os.environ if environ is None else environ
        update: dict[str, object] = {}

        db_path = env.get(f"{ENV_PREFIX}_DB_PATH")
        if db_path:
            update["database_path"] = db_path

        port = env.get(f"{ENV_PREFIX}_PORT") or env.get("PORT")
        if port:
            try:
                update["port"] = int(port)
            except ValueError:
                logger.warning("忽略无效端口配置: %s", port)

        timezone = env.get(f"{ENV_PREFIX}_TIMEZONE")
        if timezone:
            update["timezone"] = timezone

        origins = _split_csv(env.get(f"{ENV_PREFIX}_CORS_ORIGINS", ""))
        if origins:
            update["cors_allowed_origins"] = origins

        if not update:
            return self
        # model_copy 不会触发校验，这里重新构造以校验覆盖值
        return type(self).model_validate({**self.model_dump(), **update})


def _split_csv(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]
