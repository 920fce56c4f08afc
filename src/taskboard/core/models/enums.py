"""枚举定义

包含 TaskStatus、ActionStatus 枚举，
以及 action 队列的 VALID_ACTION_TRANSITIONS 合法流转映射和 TERMINAL_ACTION_STATES 终态集合。
"""

from enum import StrEnum


class TaskStatus(StrEnum):
    """任务状态"""

    TODO = "todo"
    IN_PROGRESS = "in_progress"
    BLOCKED = "blocked"
    DONE = "done"


class ActionStatus(StrEnum):
    """Action 队列状态机"""

    QUEUED = "queued"
    RUNNING = "running"

    # 终态
    DONE = "done"
    FAILED = "failed"


# 合法状态流转（RUNNING -> RUNNING 为租约过期后的重新认领）
VALID_ACTION_TRANSITIONS: dict[ActionStatus, set[ActionStatus]] = {
    ActionStatus.QUEUED: {
        ActionStatus.RUNNING,
        ActionStatus.DONE,
        ActionStatus.FAILED,
    },
    ActionStatus.RUNNING: {
        ActionStatus.RUNNING,
        ActionStatus.DONE,
        ActionStatus.FAILED,
    },
    # 终态不可再流转
    ActionStatus.DONE: set(),
    ActionStatus.FAILED: set(),
}

TERMINAL_ACTION_STATES: set[ActionStatus] = {
    ActionStatus.DONE,
    ActionStatus.FAILED,
}


def validate_action_transition(
    from_status: ActionStatus,
    to_status: ActionStatus,
) -> bool:
    """验证 action 状态流转是否合法

    Args:
        from_status: 当前状态
        to_status: 目标状态

    Returns:
        True 如果流转合法，否则 False
    """
    allowed = VALID_ACTION_TRANSITIONS.get(from_status, set())
    return to_status in allowed
