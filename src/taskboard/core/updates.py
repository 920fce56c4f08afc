"""任务局部更新 -- 合并字段并重新校验

两个存储后端共用同一套合并规则，保证 PATCH 语义一致。
"""

from typing import Any

from pydantic import ValidationError

from .exceptions import InvalidTaskUpdateError
from .models import Task

# 不允许通过 PATCH 修改的字段（score 为派生值）
IMMUTABLE_FIELDS: frozenset[str] = frozenset({"id", "score", "position"})


def merge_task_changes(
    current: dict[str, Any],
    changes: dict[str, Any],
) -> tuple[dict[str, Any], Task]:
    """将局部字段合并到任务上

    framework 支持局部合并（只传 effort 时保留其余参数）。

    Args:
        current: 当前任务的原始字段
        changes: 待合并的字段

    Returns:
        (合并后的原始字段, 校验后的 Task)

    Raises:
        InvalidTaskUpdateError: 修改了只读字段或字段值非法
    """
    forbidden = IMMUTABLE_FIELDS & changes.keys()
    if forbidden:
        raise InvalidTaskUpdateError(
            f"Fields cannot be changed: {', '.join(sorted(forbidden))}"
        )

    merged = {**current, **changes}
    new_framework = changes.get("framework")
    old_framework = current.get("framework")
    if isinstance(new_framework, dict) and isinstance(old_framework, dict):
        merged["framework"] = {**old_framework, **new_framework}

    try:
        task = Task.model_validate(merged)
    except ValidationError as e:
        raise InvalidTaskUpdateError(f"Invalid task fields: {e.errors()[0]['msg']}") from e
    return merged, task
