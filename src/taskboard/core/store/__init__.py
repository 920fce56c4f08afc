"""Taskboard Core Store -- 关系型存储 + 文件存储

提供工厂函数创建共享数据库连接的 Store 实例组，以及两个实现同一契约的存储后端。
"""

import asyncio
from pathlib import Path

import aiosqlite

from .action_store import SqliteActionStore
from .comment_store import SqliteCommentStore
from .runtime_state import RuntimeStateStore
from .sqlite_init import init_db
from .task_file import TaskFile
from .task_store import SqliteTaskStore
from .transaction import append_comment_with_action, seed_tasks


class StoreGroup:
    """Store 实例组 -- 共享同一个数据库连接

    write_lock 串行化该连接上的所有写事务（语句组 + commit/rollback）。
    """

    def __init__(self, conn: aiosqlite.Connection) -> None:
        self.conn = conn
        self.write_lock = asyncio.Lock()
        self.task_store = SqliteTaskStore(conn, self.write_lock)
        self.comment_store = SqliteCommentStore(conn)
        self.action_store = SqliteActionStore(conn, self.write_lock)


async def create_store_group(db_path: str) -> StoreGroup:
    """创建 Store 实例组（连接 + 建表）

    Args:
        db_path: SQLite 数据库文件路径

    Returns:
        StoreGroup 实例
    """
    # 确保数据库目录存在
    db_dir = Path(db_path).parent
    db_dir.mkdir(parents=True, exist_ok=True)

    conn = await aiosqlite.connect(db_path)
    try:
        await init_db(conn)
    except Exception:
        await conn.close()
        raise

    return StoreGroup(conn=conn)


__all__ = [
    "StoreGroup",
    "create_store_group",
    "SqliteTaskStore",
    "SqliteCommentStore",
    "SqliteActionStore",
    "TaskFile",
    "RuntimeStateStore",
    "init_db",
    "append_comment_with_action",
    "seed_tasks",
]
