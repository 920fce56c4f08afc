"""依赖注入模块 -- 通过 FastAPI Depends 注入存储客户端、配置与鉴权

StorageClient 通过 app.state 管理，在 lifespan 中初始化/清理。
"""

from fastapi import Depends, Request
from taskboard.core.storage import StorageClient

from .config import (
    AUTH_COOKIE_NAME,
    AUTH_COOKIE_VALUE,
    WORKER_TOKEN_HEADER,
    GatewayConfig,
)
from .errors import ApiError
from .security import secret_matches
from .services.task_service import TaskService


def get_storage(request: Request) -> StorageClient:
    """从 app.state 获取 StorageClient 实例"""
    return request.app.state.storage


def get_config(request: Request) -> GatewayConfig:
    """从 app.state 获取 GatewayConfig 实例"""
    return request.app.state.config


def get_task_service(
    storage: StorageClient = Depends(get_storage),
    config: GatewayConfig = Depends(get_config),
) -> TaskService:
    return TaskService(storage, config)


def require_session(request: Request) -> None:
    """要求有效的会话 cookie"""
    if request.cookies.get(AUTH_COOKIE_NAME) != AUTH_COOKIE_VALUE:
        raise ApiError(401, "UNAUTHORIZED", "Login required")


def require_worker_token(
    request: Request,
    config: GatewayConfig = Depends(get_config),
) -> None:
    """要求有效的 worker token（服务端未配置 token 时一律拒绝）"""
    token = request.headers.get(WORKER_TOKEN_HEADER, "")
    if not secret_matches(token, config.worker_token):
        raise ApiError(401, "UNAUTHORIZED", "Unauthorized")
