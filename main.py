"""API 服务启动入口。"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

# 确保 src 加入路径
PROJECT_ROOT = Path(__file__).resolve().parent
SRC_DIR = PROJECT_ROOT / "src"
if SRC_DIR.exists() and str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from avopp.config import AppConfig
from scripts.dev_server import main as run_dev_server
from scripts.seed import seed


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="[%(asctime)s][%(levelname)s] %(name)s: %(message)s")

    parser = argparse.ArgumentParser(description="AVOPP 学业任务 API")
    parser.add_argument("--seed", action="store_true", help="启动前清空数据库并写入示例数据")
    parser.add_argument("--port", type=int, default=None, help="覆盖监听端口")
    args = parser.parse_args()

    config = AppConfig.load()
    if args.port is not None:
        config = AppConfig.model_validate({**config.model_dump(), "port": args.port})

    if args.seed:
        logging.getLogger(__name__).info("写入示例数据 db=%s", config.database_path)
        seed(config)

    asyncio.run(run_dev_server(config))


if __name__ == "__main__":
    main()
