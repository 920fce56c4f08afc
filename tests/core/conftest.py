"""core 测试配置 -- 数据库连接与存储后端 fixture"""

from collections.abc import AsyncGenerator
from datetime import UTC, datetime
from pathlib import Path

import aiosqlite
import pytest_asyncio
from taskboard.core.models import Task
from taskboard.core.store import StoreGroup, create_store_group
from taskboard.core.store.database import DatabaseBackend
from taskboard.core.store.file_backend import FileBackend
from taskboard.core.store.runtime_state import RuntimeStateStore
from taskboard.core.store.sqlite_init import init_db
from taskboard.core.store.task_file import TaskFile


@pytest_asyncio.fixture
async def core_db(tmp_path: Path) -> AsyncGenerator[aiosqlite.Connection, None]:
    """已初始化的数据库连接（含 t1 一条任务，满足外键约束）"""
    conn = await aiosqlite.connect(str(tmp_path / "core_test.db"))
    await init_db(conn)
    stores = StoreGroup(conn)
    await stores.task_store.insert_tasks(
        [Task(id="t1", title="seed", framework={"reach": 2})],
        datetime.now(UTC).isoformat(),
    )
    await conn.commit()
    yield conn
    await conn.close()


@pytest_asyncio.fixture
async def store_group(db_path: str) -> AsyncGenerator[StoreGroup, None]:
    """空数据库上的 StoreGroup"""
    stores = await create_store_group(db_path)
    yield stores
    await stores.conn.close()


@pytest_asyncio.fixture
async def database_backend(store_group: StoreGroup, tasks_file: Path) -> DatabaseBackend:
    return DatabaseBackend(store_group, TaskFile(tasks_file))


@pytest_asyncio.fixture
async def file_backend(tasks_file: Path, state_file: Path) -> FileBackend:
    return FileBackend(TaskFile(tasks_file), RuntimeStateStore(state_file))
