"""TaskService -- 任务/评论/action 业务逻辑

路由层只负责鉴权与请求解析，业务规则集中在此：
1. 看板加载与任务局部更新
2. 评论追加（空正文拒绝，含命令标记时入队 action）
3. action 认领与完成
4. webhook 事件处理
"""

from typing import Any

import structlog
from taskboard.core.exceptions import InvalidCommentError
from taskboard.core.models import Action, Comment, Task, TaskBoard
from taskboard.core.queue import parse_completion_status
from taskboard.core.storage import StorageClient

from ..config import GatewayConfig

log = structlog.get_logger()

# webhook 中触发评论创建的事件类型
COMMENT_CREATED_EVENT = "comment.created"


class TaskService:
    """任务业务服务"""

    def __init__(self, storage: StorageClient, config: GatewayConfig) -> None:
        self._storage = storage
        self._config = config

    async def load_board(self, status: str | None = None) -> TaskBoard:
        return await self._storage.load_board(status)

    async def get_task(self, task_id: str) -> Task | None:
        return await self._storage.get_task(task_id)

    async def update_task(self, task_id: str, changes: dict[str, Any]) -> Task | None:
        """局部更新任务

        Returns:
            更新后的 Task；任务不存在时返回 None

        Raises:
            InvalidTaskUpdateError: 字段只读或取值非法
        """
        return await self._storage.update_task(task_id, changes)

    async def list_comments(self, task_id: str) -> list[Comment] | None:
        """查询任务评论（新的在前），任务不存在时返回 None"""
        if await self._storage.get_task(task_id) is None:
            return None
        return await self._storage.list_comments(task_id)

    async def add_comment(
        self,
        task_id: str,
        body: str | None,
        author: str | None = None,
    ) -> tuple[Comment, Action | None] | None:
        """追加评论

        Returns:
            (comment, action)；任务不存在时返回 None

        Raises:
            InvalidCommentError: 正文为空
        """
        text = (body or "").strip()
        if not text:
            raise InvalidCommentError()
        if await self._storage.get_task(task_id) is None:
            return None

        comment, action = await self._storage.add_comment(
            task_id,
            (author or "").strip() or self._config.default_author,
            text,
        )
        log.info(
            "comment_created",
            task_id=task_id,
            comment_id=comment.id,
            action_enqueued=action is not None,
        )
        return comment, action

    async def claim_next_action(self) -> Action | None:
        return await self._storage.claim_next_action()

    async def complete_action(
        self,
        action_id: str,
        status: str | None,
        result: str | None,
    ) -> bool:
        """完成 action

        Raises:
            InvalidActionStatusError: 状态不是 done / failed
        """
        final_status = parse_completion_status(status)
        return await self._storage.complete_action(action_id, final_status, result or "")

    def parse_comment_event(self, event: dict[str, Any]) -> tuple[str, str, str] | None:
        """解析 webhook 事件

        仅处理携带 task_id 和 body 的 comment.created 事件，其余事件忽略。

        Returns:
            (task_id, body, author)；事件应被忽略时返回 None
        """
        task_id = event.get("task_id")
        body = event.get("body")
        if event.get("type") != COMMENT_CREATED_EVENT or not task_id or not body:
            log.info("webhook_event_ignored", event_type=event.get("type"))
            return None

        author = event.get("author")
        return str(task_id), str(body), str(author) if author else self._config.webhook_author
