"""AuthGateMiddleware -- 页面访问控制

未携带会话 cookie 的页面请求重定向到 /login。
API、静态资源、登录页与健康检查不在此拦截：API 由各路由自行返回 401 JSON。
"""

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import RedirectResponse, Response

from ..config import AUTH_COOKIE_NAME, AUTH_COOKIE_VALUE

log = structlog.get_logger()

PUBLIC_PATH_PREFIXES: tuple[str, ...] = (
    "/api",
    "/static",
    "/assets",
    "/login",
    "/health",
    "/ready",
    "/favicon",
)

LOGIN_PATH = "/login"


def is_public_path(path: str) -> bool:
    """判断路径是否无需登录即可访问"""
    return any(
        path == prefix or path.startswith(prefix + "/") or path.startswith(prefix + ".")
        for prefix in PUBLIC_PATH_PREFIXES
    )


class AuthGateMiddleware(BaseHTTPMiddleware):
    """页面访问控制中间件"""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if is_public_path(path) or request.cookies.get(AUTH_COOKIE_NAME) == AUTH_COOKIE_VALUE:
            return await call_next(request)

        log.info("page_redirected_to_login", path=path)
        return RedirectResponse(LOGIN_PATH, status_code=307)
