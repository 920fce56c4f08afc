"""评论 + action 原子事务封装

在同一 SQLite 事务内提交评论及其触发的 action，
避免出现「有 action 但找不到来源评论」的半写入状态。

所有 Store 共享一个连接，commit/rollback 作用于整个连接，
因此每个「语句组 + 提交/回滚」都必须在 write_lock 内完成，
否则一个事务的回滚会丢弃另一个协程尚未提交的写入。
"""

import asyncio

import aiosqlite

from ..models import Action, Comment, Task
from .action_store import SqliteActionStore
from .comment_store import SqliteCommentStore
from .task_store import SqliteTaskStore


async def append_comment_with_action(
    conn: aiosqlite.Connection,
    write_lock: asyncio.Lock,
    comment_store: SqliteCommentStore,
    action_store: SqliteActionStore,
    comment: Comment,
    action: Action | None = None,
) -> None:
    """在同一事务内原子提交评论和 action

    Args:
        conn: 数据库连接（需在同一连接上操作以保证事务性）
        write_lock: 该连接的写锁
        comment_store: CommentStore 实例
        action_store: ActionStore 实例
        comment: 要写入的评论
        action: 评论触发的 action，None 表示无

    Raises:
        Exception: 如果事务提交失败，自动回滚
    """
    async with write_lock:
        try:
            await comment_store.append_comment(comment)
            if action is not None:
                await action_store.append_action(action)
            await conn.commit()
        except Exception:
            await conn.rollback()
            raise


async def seed_tasks(
    conn: aiosqlite.Connection,
    write_lock: asyncio.Lock,
    task_store: SqliteTaskStore,
    tasks: list[Task],
    updated_at: str,
) -> int:
    """空表时一次性写入任务文件中的全部任务

    在事务内复查行数，表非空时不写入。

    Returns:
        写入的任务数
    """
    async with write_lock:
        try:
            if await task_store.count_tasks() > 0:
                return 0
            await task_store.insert_tasks(tasks, updated_at)
            await conn.commit()
        except Exception:
            await conn.rollback()
            raise
    return len(tasks)
