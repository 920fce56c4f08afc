"""GatewayConfig -- Gateway 鉴权与会话配置

从环境变量加载配置。口令、worker token、webhook 密钥均为可选：
未配置时对应入口拒绝访问（登录返回 500，worker 接口返回 401，webhook 返回 401）。
"""

import os

import structlog
from pydantic import BaseModel, Field, SecretStr

log = structlog.get_logger()

# 会话 cookie
AUTH_COOKIE_NAME = "task_auth"
AUTH_COOKIE_VALUE = "ok"
AUTH_COOKIE_MAX_AGE_S = 60 * 60 * 12

# 鉴权请求头
WORKER_TOKEN_HEADER = "x-worker-token"
WEBHOOK_SIGNATURE_HEADER = "x-task-signature"


class GatewayConfig(BaseModel):
    """Gateway 配置 -- 从环境变量加载

    环境变量:
        TASKS_PASSCODE: 登录口令
        TARS_WORKER_TOKEN: worker 共享 token
        TASK_WEBHOOK_SECRET: webhook HMAC 密钥
        TASKBOARD_DEFAULT_AUTHOR: 评论默认作者（默认 Owner）
        TASKBOARD_COOKIE_SECURE: cookie 是否带 Secure 标记（默认 true）
    """

    passcode: SecretStr = Field(default=SecretStr(""), description="登录口令")
    worker_token: SecretStr = Field(default=SecretStr(""), description="worker 共享 token")
    webhook_secret: SecretStr = Field(default=SecretStr(""), description="webhook HMAC 密钥")
    default_author: str = Field(default="Owner", description="评论默认作者")
    webhook_author: str = Field(default="System", description="webhook 评论默认作者")
    cookie_secure: bool = Field(default=True, description="cookie Secure 标记")
    cookie_max_age_s: int = Field(default=AUTH_COOKIE_MAX_AGE_S, ge=1, description="cookie 有效期（秒）")


def load_gateway_config() -> GatewayConfig:
    """从环境变量加载 Gateway 配置

    Returns:
        GatewayConfig 实例
    """
    kwargs: dict = {}

    if val := os.environ.get("TASKS_PASSCODE"):
        kwargs["passcode"] = SecretStr(val)

    if val := os.environ.get("TARS_WORKER_TOKEN"):
        kwargs["worker_token"] = SecretStr(val)

    if val := os.environ.get("TASK_WEBHOOK_SECRET"):
        kwargs["webhook_secret"] = SecretStr(val)

    if val := os.environ.get("TASKBOARD_DEFAULT_AUTHOR"):
        kwargs["default_author"] = val

    if val := os.environ.get("TASKBOARD_COOKIE_SECURE"):
        if val.lower() in ("true", "1", "yes"):
            kwargs["cookie_secure"] = True
        elif val.lower() in ("false", "0", "no"):
            kwargs["cookie_secure"] = False
        else:
            log.warning(
                "invalid_cookie_secure_config",
                env_var="TASKBOARD_COOKIE_SECURE",
                value=val,
                fallback=True,
            )

    return GatewayConfig(**kwargs)
