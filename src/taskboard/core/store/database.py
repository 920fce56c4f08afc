"""DatabaseBackend -- 关系型存储后端

- 建表在 create_store_group() 中惰性完成（CREATE TABLE IF NOT EXISTS）
- 首次访问时，若 tasks 表为空则从任务文件 seed 一次；seed 之后对文件的修改不会再导入
- 「已 seed」标记是实例生命周期状态，不是模块级全局变量
"""

import asyncio
from datetime import UTC, datetime
from typing import Any

import structlog

from ..board import build_board
from ..exceptions import TaskFileError
from ..models import Action, ActionStatus, Comment, Task, TaskBoard
from ..queue import build_comment_records, stale_before
from ..updates import merge_task_changes
from . import StoreGroup
from .task_file import TaskFile
from .transaction import append_comment_with_action, seed_tasks

log = structlog.get_logger()


class DatabaseBackend:
    """关系型存储后端（SQLite）"""

    name = "database"

    def __init__(
        self,
        stores: StoreGroup,
        task_file: TaskFile,
        lease_s: int = 0,
    ) -> None:
        self._stores = stores
        self._task_file = task_file
        self._lease_s = lease_s
        self._seeded = False
        self._seed_lock = asyncio.Lock()

    @property
    def stores(self) -> StoreGroup:
        return self._stores

    @property
    def seeded(self) -> bool:
        return self._seeded

    async def ensure_seeded(self) -> int:
        """每个实例最多执行一次的 seed 迁移

        tasks 表为空时从任务文件导入；表非空时不做任何修改。
        任务文件缺失时跳过本次 seed，下次调用再尝试。

        Returns:
            本次导入的任务数
        """
        if self._seeded:
            return 0

        async with self._seed_lock:
            if self._seeded:
                return 0
            try:
                updated_at, tasks = self._task_file.read()
            except TaskFileError as e:
                if await self._stores.task_store.count_tasks() > 0:
                    self._seeded = True
                    return 0
                log.warning("seed_skipped", reason=e.reason, path=e.path)
                return 0

            inserted = await seed_tasks(
                self._stores.conn,
                self._stores.write_lock,
                self._stores.task_store,
                tasks,
                updated_at or datetime.now(UTC).isoformat(),
            )
            self._seeded = True

        if inserted:
            log.info("tasks_seeded", count=inserted, path=str(self._task_file.path))
        return inserted

    async def ping(self) -> None:
        """连通性检查，失败时抛出异常"""
        cursor = await self._stores.conn.execute("SELECT 1")
        await cursor.fetchone()

    async def close(self) -> None:
        await self._stores.conn.close()

    async def load_board(self, status: str | None = None) -> TaskBoard:
        await self.ensure_seeded()
        tasks = await self._stores.task_store.list_tasks()
        updated_at = await self._stores.task_store.latest_updated_at()
        return build_board(tasks, source=self.name, updated_at=updated_at, status=status)

    async def get_task(self, task_id: str) -> Task | None:
        await self.ensure_seeded()
        return await self._stores.task_store.get_task(task_id)

    async def update_task(self, task_id: str, changes: dict[str, Any]) -> Task | None:
        await self.ensure_seeded()
        current = await self._stores.task_store.get_task(task_id)
        if current is None:
            return None

        _, task = merge_task_changes(current.model_dump(mode="json", exclude={"score"}), changes)
        task = task.model_copy(update={"position": current.position})
        await self._stores.task_store.update_task(task, datetime.now(UTC).isoformat())
        log.info("task_updated", task_id=task_id, fields=sorted(changes))
        return task

    async def list_comments(self, task_id: str) -> list[Comment]:
        return await self._stores.comment_store.list_comments(task_id)

    async def add_comment(
        self,
        task_id: str,
        author: str,
        body: str,
    ) -> tuple[Comment, Action | None]:
        comment, action = build_comment_records(task_id, author, body, datetime.now(UTC))
        await append_comment_with_action(
            self._stores.conn,
            self._stores.write_lock,
            self._stores.comment_store,
            self._stores.action_store,
            comment,
            action,
        )
        return comment, action

    async def claim_next_action(self) -> Action | None:
        now = datetime.now(UTC)
        return await self._stores.action_store.claim_next(now, stale_before(now, self._lease_s))

    async def complete_action(
        self,
        action_id: str,
        status: ActionStatus,
        result: str | None,
    ) -> bool:
        return await self._stores.action_store.complete(
            action_id, status, result, datetime.now(UTC)
        )

    async def list_actions(self, task_id: str | None = None) -> list[Action]:
        return await self._stores.action_store.list_actions(task_id)
