"""gateway 测试配置 -- FastAPI app + httpx AsyncClient

绕过 lifespan，手动构建 StorageClient 与 GatewayConfig 并挂到 app.state。
"""

import os
from collections.abc import AsyncGenerator
from pathlib import Path

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from pydantic import SecretStr
from taskboard.gateway.config import GatewayConfig

PASSCODE = "open-sesame"
WORKER_TOKEN = "worker-secret"
WEBHOOK_SECRET = "hook-secret"

SESSION_HEADERS = {"Cookie": "task_auth=ok"}
WORKER_HEADERS = {"x-worker-token": WORKER_TOKEN}


@pytest_asyncio.fixture
async def gateway_config() -> GatewayConfig:
    return GatewayConfig(
        passcode=SecretStr(PASSCODE),
        worker_token=SecretStr(WORKER_TOKEN),
        webhook_secret=SecretStr(WEBHOOK_SECRET),
        cookie_secure=False,
    )


@pytest_asyncio.fixture
async def app(tasks_file: Path, state_file: Path, gateway_config: GatewayConfig):
    """创建测试用 FastAPI app 实例（文件存储模式）"""
    os.environ["LOGFIRE_SEND_TO_LOGFIRE"] = "false"

    from taskboard.core.storage import create_storage_client
    from taskboard.gateway.main import create_app

    application = create_app()
    application.state.config = gateway_config
    application.state.storage = await create_storage_client(tasks_file, state_file)

    yield application

    await application.state.storage.close()
    os.environ.pop("LOGFIRE_SEND_TO_LOGFIRE", None)


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """未登录的客户端"""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


@pytest_asyncio.fixture
async def session_client(app) -> AsyncGenerator[AsyncClient, None]:
    """携带会话 cookie 的客户端"""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
        headers=SESSION_HEADERS,
    ) as ac:
        yield ac
