"""RuntimeStateStore -- 文件模式下的评论与 action 存储

单个 JSON 文档 {"comments": [...], "actions": [...]}，每次调用完整读-改-写。
读-改-写在实例级 asyncio.Lock 内串行执行，写入采用原子替换；
仅保证单进程内的互斥，多进程同时写同一文件仍不安全（单写者假设）。
"""

import asyncio
import json
from datetime import datetime
from pathlib import Path
from typing import Any

import structlog
from pydantic import ValidationError

from ..exceptions import TaskFileError
from ..models import Action, ActionStatus, Comment, validate_action_transition
from ..queue import is_claimable
from .task_file import atomic_write_text

log = structlog.get_logger()


class RuntimeStateStore:
    """运行时状态 JSON 文件"""

    def __init__(self, path: str | Path, lease_s: int = 0) -> None:
        self._path = Path(path)
        self._lease_s = lease_s
        self._lock = asyncio.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def _read(self) -> dict[str, list[dict[str, Any]]]:
        """读取文档，文件不存在时视为空文档"""
        try:
            raw = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {"comments": [], "actions": []}
        except OSError as e:
            raise TaskFileError(str(self._path), str(e)) from e

        try:
            document = json.loads(raw) if raw.strip() else {}
        except json.JSONDecodeError as e:
            raise TaskFileError(str(self._path), f"invalid JSON: {e}") from e
        if not isinstance(document, dict):
            raise TaskFileError(str(self._path), "top level must be an object")
        document.setdefault("comments", [])
        document.setdefault("actions", [])
        return document

    def _write(self, document: dict[str, Any]) -> None:
        atomic_write_text(self._path, json.dumps(document, ensure_ascii=False, indent=2))

    def _actions(self, document: dict[str, Any]) -> list[Action]:
        try:
            return [Action.model_validate(a) for a in document["actions"]]
        except ValidationError as e:
            raise TaskFileError(str(self._path), f"invalid action record: {e}") from e

    async def list_comments(self, task_id: str) -> list[Comment]:
        """查询任务评论，按创建时间倒序"""
        async with self._lock:
            document = self._read()
        comments = [
            Comment.model_validate(c) for c in document["comments"] if c.get("task_id") == task_id
        ]
        comments.sort(key=lambda c: (c.created_at, c.id), reverse=True)
        return comments

    async def append_comment(self, comment: Comment, action: Action | None = None) -> None:
        """追加评论（及其触发的 action）"""
        async with self._lock:
            document = self._read()
            document["comments"].append(comment.model_dump(mode="json"))
            if action is not None:
                document["actions"].append(action.model_dump(mode="json"))
            self._write(document)

    async def get_action(self, action_id: str) -> Action | None:
        async with self._lock:
            document = self._read()
        for action in self._actions(document):
            if action.id == action_id:
                return action
        return None

    async def list_actions(self, task_id: str | None = None) -> list[Action]:
        """查询 action，按创建时间正序"""
        async with self._lock:
            document = self._read()
        actions = [a for a in self._actions(document) if task_id is None or a.task_id == task_id]
        actions.sort(key=lambda a: (a.created_at, a.id))
        return actions

    async def claim_next_action(self, now: datetime) -> Action | None:
        """认领最早的可认领 action 并置为 running"""
        async with self._lock:
            document = self._read()
            actions = self._actions(document)
            candidates = [
                (a.created_at, a.id, index)
                for index, a in enumerate(actions)
                if is_claimable(a, now, self._lease_s)
            ]
            if not candidates:
                return None

            _, _, index = min(candidates)
            previous = actions[index]
            claimed = previous.model_copy(
                update={
                    "status": ActionStatus.RUNNING,
                    "claimed_at": now,
                    "updated_at": now,
                }
            )
            document["actions"][index] = claimed.model_dump(mode="json")
            self._write(document)

        if previous.status == ActionStatus.RUNNING:
            log.warning(
                "stale_action_reclaimed",
                action_id=claimed.id,
                previous_claimed_at=previous.claimed_at.isoformat() if previous.claimed_at else None,
            )
        return claimed

    async def complete_action(
        self,
        action_id: str,
        status: ActionStatus,
        result: str | None,
        now: datetime,
    ) -> bool:
        """完成 action

        Returns:
            True 如果更新成功；action 不存在或已在终态时返回 False
        """
        async with self._lock:
            document = self._read()
            for index, action in enumerate(self._actions(document)):
                if action.id != action_id:
                    continue
                if not validate_action_transition(action.status, status):
                    return False
                updated = action.model_copy(
                    update={"status": status, "result": result, "updated_at": now}
                )
                document["actions"][index] = updated.model_dump(mode="json")
                self._write(document)
                return True
        return False
