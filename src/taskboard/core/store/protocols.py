"""存储后端 Protocol 接口定义

数据库后端与文件后端实现同一契约，由 StorageClient 负责选择与降级。
使用 Python Protocol 实现结构化子类型（duck typing）。
"""

from typing import Any, Protocol

from ..models import Action, ActionStatus, Comment, Task, TaskBoard


class TaskBackend(Protocol):
    """任务/评论/action 存储契约"""

    # 写入 TaskBoard.source 的后端标识
    name: str

    async def load_board(self, status: str | None = None) -> TaskBoard:
        """加载按分数排序的任务看板，支持按状态筛选"""
        ...

    async def get_task(self, task_id: str) -> Task | None:
        """根据 id 查询任务"""
        ...

    async def update_task(self, task_id: str, changes: dict[str, Any]) -> Task | None:
        """局部更新任务，任务不存在时返回 None"""
        ...

    async def list_comments(self, task_id: str) -> list[Comment]:
        """查询任务评论（新的在前）"""
        ...

    async def add_comment(
        self,
        task_id: str,
        author: str,
        body: str,
    ) -> tuple[Comment, Action | None]:
        """追加评论，正文含命令标记时同时入队 action"""
        ...

    async def claim_next_action(self) -> Action | None:
        """认领最早的可认领 action"""
        ...

    async def complete_action(
        self,
        action_id: str,
        status: ActionStatus,
        result: str | None,
    ) -> bool:
        """完成 action，不存在或已在终态时返回 False"""
        ...

    async def list_actions(self, task_id: str | None = None) -> list[Action]:
        """查询 action（创建时间正序）"""
        ...
