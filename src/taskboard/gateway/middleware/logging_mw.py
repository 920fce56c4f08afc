"""LoggingMiddleware -- 请求级日志

request_id 优先沿用调用方传入的 X-Request-ID（WorkerClient 每轮认领/上报共用一个），
缺失或格式不合法时生成 ULID。request_id 绑定到 structlog contextvars 并回写响应头。
"""

import re
import time

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from ulid import ULID

REQUEST_ID_HEADER = "X-Request-ID"

# 只接受短的、可安全写入日志的 id
_REQUEST_ID_PATTERN = re.compile(r"^[A-Za-z0-9._:-]{1,128}$")


def resolve_request_id(inbound: str | None) -> str:
    """返回可用的 request_id：合法的入站 id 原样沿用，否则生成新的 ULID"""
    if inbound and _REQUEST_ID_PATTERN.fullmatch(inbound):
        return inbound
    return str(ULID())


class LoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        inbound = request.headers.get(REQUEST_ID_HEADER)
        request_id = resolve_request_id(inbound)

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        )

        log = structlog.get_logger()
        await log.ainfo("request_started", propagated=request_id == inbound)

        started = time.perf_counter()
        response = await call_next(request)
        await log.ainfo(
            "request_completed",
            status_code=response.status_code,
            duration_ms=round((time.perf_counter() - started) * 1000, 1),
        )

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
