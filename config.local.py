"""本地配置覆盖示例（`AppConfig.load()` 会自动加载项目根目录下的此文件）。"""

from avopp.config import AppConfig


def load_config() -> AppConfig:
    return AppConfig(
        database_path="avopp.sqlite3",
        timezone="America/Bogota",
        host="127.0.0.1",
        port=3000,
        completed_by_label="student",
        # static_dir="public",
    )
