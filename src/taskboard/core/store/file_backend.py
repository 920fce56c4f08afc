"""FileBackend -- 文件存储后端

任务读写 YAML 任务文件，评论与 action 读写运行时状态 JSON 文件。
这是最后一级存储，错误直接向上抛出。
"""

from datetime import UTC, datetime
from typing import Any

from ..board import build_board
from ..models import Action, ActionStatus, Comment, Task, TaskBoard
from ..queue import build_comment_records
from .runtime_state import RuntimeStateStore
from .task_file import TaskFile


class FileBackend:
    """文件存储后端"""

    name = "file"

    def __init__(self, task_file: TaskFile, runtime_state: RuntimeStateStore) -> None:
        self._task_file = task_file
        self._runtime_state = runtime_state

    @property
    def task_file(self) -> TaskFile:
        return self._task_file

    @property
    def runtime_state(self) -> RuntimeStateStore:
        return self._runtime_state

    async def load_board(self, status: str | None = None) -> TaskBoard:
        updated_at, tasks = await self._task_file.load()
        return build_board(tasks, source=self.name, updated_at=updated_at, status=status)

    async def get_task(self, task_id: str) -> Task | None:
        _, tasks = await self._task_file.load()
        for task in tasks:
            if task.id == task_id:
                return task
        return None

    async def update_task(self, task_id: str, changes: dict[str, Any]) -> Task | None:
        return await self._task_file.update_task(task_id, changes)

    async def list_comments(self, task_id: str) -> list[Comment]:
        return await self._runtime_state.list_comments(task_id)

    async def add_comment(
        self,
        task_id: str,
        author: str,
        body: str,
    ) -> tuple[Comment, Action | None]:
        comment, action = build_comment_records(task_id, author, body, datetime.now(UTC))
        await self._runtime_state.append_comment(comment, action)
        return comment, action

    async def claim_next_action(self) -> Action | None:
        return await self._runtime_state.claim_next_action(datetime.now(UTC))

    async def complete_action(
        self,
        action_id: str,
        status: ActionStatus,
        result: str | None,
    ) -> bool:
        return await self._runtime_state.complete_action(
            action_id, status, result, datetime.now(UTC)
        )

    async def list_actions(self, task_id: str | None = None) -> list[Action]:
        return await self._runtime_state.list_actions(task_id)
