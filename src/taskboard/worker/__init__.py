"""Taskboard Worker -- action 队列轮询客户端

taskboard.worker 的公开接口导出。
"""

from .client import ActionHandler, WorkerClient
from .config import WorkerConfig, load_worker_config
from .exceptions import GatewayUnreachableError, WorkerAuthError, WorkerError

__all__ = [
    "ActionHandler",
    "WorkerClient",
    "WorkerConfig",
    "load_worker_config",
    "WorkerError",
    "WorkerAuthError",
    "GatewayUnreachableError",
]
