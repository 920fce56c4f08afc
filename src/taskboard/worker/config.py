"""WorkerConfig -- Worker 客户端配置加载"""

import os

import structlog
from pydantic import BaseModel, Field, SecretStr

log = structlog.get_logger()


class WorkerConfig(BaseModel):
    """Worker 客户端配置 -- 从环境变量加载

    环境变量:
        TASKBOARD_GATEWAY_URL: Gateway 地址（默认 http://localhost:8000）
        TARS_WORKER_TOKEN: worker 共享 token（与 Gateway 一致）
        TASKBOARD_WORKER_TIMEOUT_S: 请求超时（秒，默认 30）
    """

    base_url: str = Field(default="http://localhost:8000", description="Gateway 基础 URL")
    token: SecretStr = Field(default=SecretStr(""), description="worker 共享 token")
    timeout_s: int = Field(default=30, ge=1, description="请求超时（秒）")


def load_worker_config() -> WorkerConfig:
    """从环境变量加载 Worker 配置"""
    kwargs: dict = {}

    if val := os.environ.get("TASKBOARD_GATEWAY_URL"):
        kwargs["base_url"] = val

    if val := os.environ.get("TARS_WORKER_TOKEN"):
        kwargs["token"] = SecretStr(val)

    if val := os.environ.get("TASKBOARD_WORKER_TIMEOUT_S"):
        try:
            kwargs["timeout_s"] = int(val)
        except ValueError:
            log.warning(
                "invalid_timeout_config",
                env_var="TASKBOARD_WORKER_TIMEOUT_S",
                value=val,
                fallback=30,
            )

    return WorkerConfig(**kwargs)
