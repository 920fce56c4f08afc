"""FastAPI 应用主文件

app 创建 + lifespan 管理：存储客户端初始化/关闭 + 中间件与路由注册。
"""

import os
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path

import structlog
from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles
from taskboard.core.config import (
    get_action_lease_s,
    get_db_path,
    get_state_file,
    get_tasks_file,
)
from taskboard.core.storage import create_storage_client

from .config import load_gateway_config
from .errors import register_exception_handlers
from .middleware.auth_mw import AuthGateMiddleware
from .middleware.logging_config import setup_logfire, setup_logging
from .middleware.logging_mw import LoggingMiddleware
from .middleware.trace_mw import TraceMiddleware
from .routes import actions, auth, comments, health, hooks, pages, tasks

log = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """应用生命周期管理：启动时构建存储客户端，关闭时释放数据库连接"""
    storage = await create_storage_client(
        tasks_file=get_tasks_file(),
        state_file=get_state_file(),
        db_path=get_db_path(),
        lease_s=get_action_lease_s(),
    )
    app.state.storage = storage
    log.info("gateway_started", lease_s=get_action_lease_s())

    yield

    await storage.close()


def create_app() -> FastAPI:
    """创建 FastAPI 应用实例"""
    app = FastAPI(
        title="Taskboard",
        version="0.1.0",
        description="RICE 打分任务看板 + @TARS action 队列",
        lifespan=lifespan,
    )
    app.state.config = load_gateway_config()

    register_exception_handlers(app)

    # 后添加的中间件先执行：Logging -> Trace -> AuthGate
    app.add_middleware(AuthGateMiddleware)
    app.add_middleware(TraceMiddleware)
    app.add_middleware(LoggingMiddleware)

    setup_logging()
    setup_logfire(app)

    app.include_router(tasks.router, tags=["tasks"])
    app.include_router(comments.router, tags=["comments"])
    app.include_router(actions.router, tags=["actions"])
    app.include_router(hooks.router, tags=["hooks"])
    app.include_router(auth.router, tags=["auth"])
    app.include_router(health.router, tags=["health"])
    app.include_router(pages.router, tags=["pages"])

    # 可选前端静态资源
    static_dir = os.environ.get("TASKBOARD_STATIC_DIR")
    if static_dir and Path(static_dir).is_dir():
        app.mount("/static", StaticFiles(directory=static_dir), name="static")

    return app


# 默认 app 实例（uvicorn 入口）
app = create_app()
