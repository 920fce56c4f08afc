"""TraceMiddleware -- 将路径中的 task_id / action_id 绑定到日志上下文

/api/tasks/{task_id}/... 绑定 task_id，/api/actions/{action_id}/complete 绑定 action_id，
便于按任务或 action 检索一次请求产生的全部日志。
"""

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# 路径段 -> 上下文字段名
_PATH_KEYS = {"tasks": "task_id", "actions": "action_id"}

# /api/actions/next 中的 next 不是 action id
_RESERVED_SEGMENTS = {"next"}


def extract_trace_ids(path: str) -> dict[str, str]:
    """从请求路径中提取 task_id / action_id"""
    parts = [p for p in path.split("/") if p]
    ids: dict[str, str] = {}
    for i, part in enumerate(parts[:-1]):
        key = _PATH_KEYS.get(part)
        value = parts[i + 1]
        if key and value not in _RESERVED_SEGMENTS:
            ids[key] = value
    return ids


class TraceMiddleware(BaseHTTPMiddleware):
    """任务级追踪中间件"""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        ids = extract_trace_ids(request.url.path)
        if ids:
            structlog.contextvars.bind_contextvars(**ids)

        return await call_next(request)
