"""开发环境启动 FastAPI 服务。"""

from __future__ import annotations

import asyncio
import logging
import signal
import threading
from contextlib import suppress

import uvicorn

from avopp.config import AppConfig
from avopp.service import PlannerService
from avopp.storage import PlannerStore
from avopp.ui import create_app

logger = logging.getLogger(__name__)
logging.basicConfig(level=logging.INFO, format="[%(asctime)s][%(levelname)s] %(name)s: %(message)s")


async def main(config: AppConfig | None = None) -> None:
    config_model = config or AppConfig.load()

    store = PlannerStore(config_model.database_path)
    service = PlannerService(store, config=config_model)
    app = create_app(service=service, config=config_model)

    uvicorn_config = uvicorn.Config(app, host=config_model.host, port=config_model.port, reload=False)
    server = uvicorn.Server(uvicorn_config)
    logger.info("AVOPP API 运行于 http://%s:%s", config_model.host, config_model.port)

    if threading.current_thread() is threading.main_thread():
        stop_event = asyncio.Event()

        def _handle_stop(*_: object) -> None:
            logger.info("收到终止信号，准备关闭服务器…")
            stop_event.set()

        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, _handle_stop)

        async def _serve() -> None:
            await server.serve()
            stop_event.set()

        serve_task = asyncio.create_task(_serve())

        await stop_event.wait()
        server.should_exit = True
        with suppress(asyncio.CancelledError):
            await serve_task
    else:
        await server.serve()


if __name__ == "__main__":
    asyncio.run(main())
