"""集成测试共享 fixture -- 文件模式与数据库模式各跑一遍"""

import os
from collections.abc import AsyncGenerator
from pathlib import Path

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from pydantic import SecretStr
from taskboard.core.storage import create_storage_client
from taskboard.gateway.config import GatewayConfig


@pytest_asyncio.fixture(params=["file", "database"])
async def integration_app(request, tasks_file: Path, state_file: Path, db_path: str):
    """集成测试用 FastAPI app"""
    os.environ["LOGFIRE_SEND_TO_LOGFIRE"] = "false"

    from taskboard.gateway.main import create_app

    app = create_app()
    app.state.config = GatewayConfig(
        passcode=SecretStr("open-sesame"),
        worker_token=SecretStr("tok"),
        webhook_secret=SecretStr("hook-secret"),
        cookie_secure=False,
    )
    app.state.storage = await create_storage_client(
        tasks_file,
        state_file,
        db_path=db_path if request.param == "database" else None,
    )
    app.state.mode = request.param

    yield app

    await app.state.storage.close()
    os.environ.pop("LOGFIRE_SEND_TO_LOGFIRE", None)


@pytest_asyncio.fixture
async def client(integration_app) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(
        transport=ASGITransport(app=integration_app),
        base_url="http://test",
        headers={"Cookie": "task_auth=ok"},
    ) as ac:
        yield ac
