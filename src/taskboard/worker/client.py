"""WorkerClient -- action 队列轮询客户端

外部 worker 通过此客户端认领 action、执行命令并上报结果：
    claim_next() -> 执行 -> complete()
run_once() 将一轮轮询封装为一次调用，handler 抛出的异常会以 failed 状态上报。
每个请求携带 X-Request-ID；同一轮的认领与上报共用一个 id，便于在 Gateway 日志中关联。
"""

from collections.abc import Awaitable, Callable

import httpx
import structlog
from taskboard.core.models import Action
from ulid import ULID

from .config import WorkerConfig
from .exceptions import GatewayUnreachableError, WorkerAuthError, WorkerError

log = structlog.get_logger()

WORKER_TOKEN_HEADER = "x-worker-token"
REQUEST_ID_HEADER = "X-Request-ID"

# 健康检查超时（应快速响应）
HEALTH_CHECK_TIMEOUT_S = 5

ActionHandler = Callable[[Action], Awaitable[str | None]]


class WorkerClient:
    """Gateway action 队列客户端"""

    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        token: str = "",
        timeout_s: int = 30,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """初始化 worker 客户端

        Args:
            base_url: Gateway 基础 URL
            token: worker 共享 token（TARS_WORKER_TOKEN）
            timeout_s: 请求超时（秒）
            transport: 自定义 httpx transport（测试时注入 MockTransport / ASGITransport）
        """
        self._base_url = base_url.rstrip("/")
        self._http = httpx.AsyncClient(
            base_url=self._base_url,
            headers={WORKER_TOKEN_HEADER: token},
            timeout=timeout_s,
            transport=transport,
        )

    @classmethod
    def from_config(
        cls,
        config: WorkerConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "WorkerClient":
        return cls(
            base_url=config.base_url,
            token=config.token.get_secret_value(),
            timeout_s=config.timeout_s,
            transport=transport,
        )

    async def __aenter__(self) -> "WorkerClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _post(
        self,
        path: str,
        payload: dict | None = None,
        request_id: str | None = None,
    ) -> dict:
        """发送 POST 请求并解析 JSON 响应（request_id 缺省时为本次请求新生成）

        Raises:
            GatewayUnreachableError: 连接失败或超时
            WorkerAuthError: token 被拒绝
            WorkerError: 其他非 2xx 响应
        """
        try:
            resp = await self._http.post(
                path,
                json=payload,
                headers={REQUEST_ID_HEADER: request_id or str(ULID())},
            )
        except httpx.TransportError as e:
            log.error(
                "gateway_request_failed",
                path=path,
                request_id=request_id,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise GatewayUnreachableError(self._base_url, e) from e

        if resp.status_code == 401:
            raise WorkerAuthError()
        if resp.status_code >= 400:
            raise WorkerError(
                f"Gateway returned {resp.status_code} for {path}: {resp.text}",
                recoverable=resp.status_code >= 500,
            )
        return resp.json()

    async def claim_next(self, request_id: str | None = None) -> Action | None:
        """认领下一个 action，队列为空时返回 None"""
        data = await self._post("/api/actions/next", request_id=request_id)
        raw = data.get("action")
        if raw is None:
            return None
        action = Action.model_validate(raw)
        log.info(
            "action_claimed",
            action_id=action.id,
            task_id=action.task_id,
            request_id=request_id,
        )
        return action

    async def complete(
        self,
        action_id: str,
        status: str = "done",
        result: str = "",
        request_id: str | None = None,
    ) -> bool:
        """上报 action 终态

        Returns:
            True 表示更新成功；False 表示 action 不存在或已在终态
        """
        data = await self._post(
            f"/api/actions/{action_id}/complete",
            {"status": status, "result": result},
            request_id=request_id,
        )
        ok = bool(data.get("ok"))
        log.info(
            "action_reported",
            action_id=action_id,
            status=status,
            ok=ok,
            request_id=request_id,
        )
        return ok

    async def health_check(self) -> bool:
        """检查 Gateway 可达性

        注意: 此方法不抛出异常，所有异常内部捕获并返回 False。
        """
        try:
            resp = await self._http.get("/health", timeout=HEALTH_CHECK_TIMEOUT_S)
            return resp.status_code == 200
        except httpx.HTTPError as e:
            log.debug("health_check_failed", base_url=self._base_url, error=str(e))
            return False

    async def run_once(self, handler: ActionHandler) -> Action | None:
        """执行一轮：认领 -> 处理 -> 上报

        handler 正常返回时以 done 上报其返回值；抛出异常时以 failed 上报错误描述。

        Returns:
            本轮处理的 action；队列为空时返回 None
        """
        request_id = str(ULID())
        action = await self.claim_next(request_id)
        if action is None:
            return None

        try:
            result = await handler(action)
        except Exception as e:
            log.warning(
                "action_handler_failed",
                action_id=action.id,
                error=str(e),
                error_type=type(e).__name__,
            )
            await self.complete(
                action.id, "failed", f"{type(e).__name__}: {e}", request_id=request_id
            )
            return action

        await self.complete(action.id, "done", result or "", request_id=request_id)
        return action
