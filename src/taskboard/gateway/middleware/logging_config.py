"""日志初始化

所有事件（包括 uvicorn、aiosqlite 等标准库 logger）经同一个 ProcessorFormatter 渲染。
TASKBOARD_LOG_FORMAT=json 用于部署，默认 dev 控制台输出。
"""

import logging
import os

import structlog
from fastapi import FastAPI

# 这些 logger 在 DEBUG 下过于嘈杂，始终不低于 INFO
_NOISY_LOGGERS = ("aiosqlite", "httpx", "httpcore")


def _renderer(log_format: str) -> structlog.types.Processor:
    if log_format == "json":
        return structlog.processors.JSONRenderer(ensure_ascii=False)
    return structlog.dev.ConsoleRenderer()


def setup_logging(
    log_format: str | None = None,
    log_level: str | None = None,
) -> None:
    """配置 structlog 与标准库 logging

    Args:
        log_format: "json" 或 "dev"，默认读 TASKBOARD_LOG_FORMAT
        log_level: 日志级别名称（大小写不敏感），默认读 TASKBOARD_LOG_LEVEL，
            无法识别时退回 INFO
    """
    log_format = log_format or os.environ.get("TASKBOARD_LOG_FORMAT", "dev")
    log_level = log_level or os.environ.get("TASKBOARD_LOG_LEVEL", "INFO")
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    pre_chain: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]
    if log_format == "json":
        # JSON 输出时异常栈需要先转成字符串字段
        pre_chain.append(structlog.processors.format_exc_info)

    structlog.configure(
        processors=[*pre_chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler()
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                _renderer(log_format),
            ],
            foreign_pre_chain=pre_chain,
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.INFO))


def setup_logfire(app: FastAPI) -> None:
    """LOGFIRE_SEND_TO_LOGFIRE=true 时启用 Logfire（需安装 logfire extra）"""
    if os.environ.get("LOGFIRE_SEND_TO_LOGFIRE", "false").lower() != "true":
        return

    try:
        import logfire

        logfire.configure()
        logfire.instrument_fastapi(app)
    except Exception as e:
        structlog.get_logger().warning(
            "logfire_init_failed",
            error=str(e),
            error_type=type(e).__name__,
        )
