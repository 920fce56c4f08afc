"""统一错误响应 -- 所有失败均返回 {"error": {"code", "message"}} + HTTP 状态码

异常 → 状态码映射：
- 鉴权失败（cookie / token / 签名）: 401
- 校验失败（空评论、JSON 格式错误、字段非法）: 400
- 资源不存在: 404
- 任务文件不可用等存储错误: 500
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from starlette.responses import JSONResponse

from taskboard.core.exceptions import (
    InvalidActionStatusError,
    InvalidCommentError,
    InvalidTaskUpdateError,
    TaskboardError,
    TaskFileError,
)

log = structlog.get_logger()


class ApiError(Exception):
    """可直接映射为 HTTP 错误响应的异常"""

    def __init__(self, status_code: int, code: str, message: str) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.code = code
        self.message = message


def error_response(status_code: int, code: str, message: str) -> JSONResponse:
    """构建统一错误响应"""
    return JSONResponse(
        status_code=status_code,
        content={"error": {"code": code, "message": message}},
    )


def task_not_found(task_id: str) -> JSONResponse:
    return error_response(404, "TASK_NOT_FOUND", f"Task with id {task_id} does not exist")


async def _api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    return error_response(exc.status_code, exc.code, exc.message)


async def _validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = exc.errors()
    message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
    return error_response(400, "VALIDATION_ERROR", message)


async def _taskboard_error_handler(request: Request, exc: TaskboardError) -> JSONResponse:
    if isinstance(exc, InvalidCommentError):
        return error_response(400, "COMMENT_BODY_REQUIRED", str(exc))
    if isinstance(exc, InvalidTaskUpdateError):
        return error_response(400, "INVALID_TASK_UPDATE", str(exc))
    if isinstance(exc, InvalidActionStatusError):
        return error_response(400, "INVALID_ACTION_STATUS", str(exc))

    log.error("storage_error", error=str(exc), error_type=type(exc).__name__)
    if isinstance(exc, TaskFileError):
        return error_response(500, "TASK_FILE_UNAVAILABLE", str(exc))
    return error_response(500, "STORAGE_ERROR", str(exc))


def register_exception_handlers(app: FastAPI) -> None:
    """注册统一异常处理器"""
    app.add_exception_handler(ApiError, _api_error_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
    app.add_exception_handler(TaskboardError, _taskboard_error_handler)
