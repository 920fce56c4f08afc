"""Taskboard Core Domain Models -- 公共类型导出

所有公共模型类型从此入口导入。
"""

from .action import Action
from .comment import Comment
from .enums import (
    TERMINAL_ACTION_STATES,
    VALID_ACTION_TRANSITIONS,
    ActionStatus,
    TaskStatus,
    validate_action_transition,
)
from .task import RiceFramework, Task, TaskBoard, TaskSummary

__all__ = [
    # 枚举
    "TaskStatus",
    "ActionStatus",
    # 状态机
    "VALID_ACTION_TRANSITIONS",
    "TERMINAL_ACTION_STATES",
    "validate_action_transition",
    # Task
    "Task",
    "RiceFramework",
    "TaskSummary",
    "TaskBoard",
    # Comment / Action
    "Comment",
    "Action",
]
