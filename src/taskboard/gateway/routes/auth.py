"""登录路由

POST /api/login: 校验口令，通过后写入会话 cookie。
POST /api/logout: 清除会话 cookie。
"""

import structlog
from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from starlette.responses import JSONResponse

from ..config import AUTH_COOKIE_NAME, AUTH_COOKIE_VALUE, GatewayConfig
from ..deps import get_config
from ..errors import error_response
from ..security import secret_matches

log = structlog.get_logger()

router = APIRouter()


class LoginRequest(BaseModel):
    """登录请求体"""

    passcode: str | None = Field(default=None, description="登录口令")


@router.post("/api/login")
async def login(
    body: LoginRequest,
    config: GatewayConfig = Depends(get_config),
):
    """口令登录

    - 口令正确：写入 cookie，返回 {ok: true}
    - 口令错误：401
    - 服务端未配置口令：500
    """
    if not config.passcode.get_secret_value():
        log.error("passcode_not_configured")
        return error_response(500, "PASSCODE_NOT_CONFIGURED", "Passcode is not configured")

    if not secret_matches(body.passcode, config.passcode):
        log.info("login_rejected")
        return error_response(401, "INVALID_PASSCODE", "Invalid passcode")

    response = JSONResponse(content={"ok": True})
    response.set_cookie(
        AUTH_COOKIE_NAME,
        AUTH_COOKIE_VALUE,
        max_age=config.cookie_max_age_s,
        path="/",
        secure=config.cookie_secure,
        httponly=True,
        samesite="lax",
    )
    log.info("login_succeeded")
    return response


@router.post("/api/logout")
async def logout(config: GatewayConfig = Depends(get_config)):
    """退出登录"""
    response = JSONResponse(content={"ok": True})
    response.delete_cookie(
        AUTH_COOKIE_NAME,
        path="/",
        secure=config.cookie_secure,
        httponly=True,
        samesite="lax",
    )
    return response
