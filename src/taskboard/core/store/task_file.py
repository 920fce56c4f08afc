"""TaskFile -- YAML 任务文件读写

任务文件是任务数据的原始来源：文件模式下直接读写，数据库模式下仅用于首次 seed。
写回采用「临时文件 + os.replace」原子替换，并在实例级 asyncio.Lock 内完成读-改-写。
"""

import asyncio
import os
import tempfile
from datetime import UTC, date, datetime
from pathlib import Path
from typing import Any

import structlog
import yaml
from pydantic import ValidationError

from ..exceptions import TaskFileError
from ..models import Task
from ..updates import merge_task_changes

log = structlog.get_logger()


def _to_iso(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return str(value)


def atomic_write_text(path: Path, text: str) -> None:
    """原子写入文本文件（同目录临时文件 + os.replace）"""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(text)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


class TaskFile:
    """YAML 任务文件"""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._lock = asyncio.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def exists(self) -> bool:
        return self._path.is_file()

    def _read_document(self) -> dict[str, Any]:
        """读取原始 YAML 文档

        Raises:
            TaskFileError: 文件缺失、YAML 语法错误或结构不符
        """
        try:
            raw = self._path.read_text(encoding="utf-8")
        except FileNotFoundError as e:
            raise TaskFileError(str(self._path), "file not found") from e
        except OSError as e:
            raise TaskFileError(str(self._path), str(e)) from e

        try:
            document = yaml.safe_load(raw) or {}
        except yaml.YAMLError as e:
            raise TaskFileError(str(self._path), f"invalid YAML: {e}") from e

        if not isinstance(document, dict):
            raise TaskFileError(str(self._path), "top level must be a mapping")
        tasks = document.get("tasks") or []
        if not isinstance(tasks, list):
            raise TaskFileError(str(self._path), "'tasks' must be a list")
        document["tasks"] = tasks
        return document

    def _parse_tasks(self, raw_tasks: list[Any]) -> list[Task]:
        tasks: list[Task] = []
        for position, raw in enumerate(raw_tasks):
            if not isinstance(raw, dict):
                raise TaskFileError(str(self._path), f"task #{position} is not a mapping")
            try:
                tasks.append(Task.model_validate({**raw, "position": position}))
            except ValidationError as e:
                raise TaskFileError(
                    str(self._path),
                    f"task #{position} is invalid: {e.errors()[0]['msg']}",
                ) from e
        return tasks

    def read(self) -> tuple[str | None, list[Task]]:
        """同步读取任务（按文件顺序，position 从 0 开始）

        Returns:
            (updated_at, tasks)
        """
        document = self._read_document()
        return _to_iso(document.get("updated_at")), self._parse_tasks(document["tasks"])

    async def load(self) -> tuple[str | None, list[Task]]:
        """读取任务文件"""
        async with self._lock:
            return self.read()

    async def update_task(self, task_id: str, changes: dict[str, Any]) -> Task | None:
        """局部更新任务并写回文件

        Returns:
            更新后的 Task；任务不存在时返回 None
        """
        async with self._lock:
            document = self._read_document()
            raw_tasks = document["tasks"]
            for position, raw in enumerate(raw_tasks):
                if isinstance(raw, dict) and str(raw.get("id")) == task_id:
                    break
            else:
                return None

            merged, task = merge_task_changes(raw, changes)
            raw_tasks[position] = merged
            document["updated_at"] = datetime.now(UTC).isoformat()
            atomic_write_text(
                self._path,
                yaml.safe_dump(document, sort_keys=False, allow_unicode=True),
            )
            log.info("task_file_updated", task_id=task_id, fields=sorted(changes))
            return task.model_copy(update={"position": position})
