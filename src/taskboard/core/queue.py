"""Action 队列规则 -- 两个存储后端共用

- 入队：评论正文含命令标记时，随评论一起生成 queued action
- 认领：最早的可认领 action（queued，或租约已过期的 running）
- 完成：只接受终态 done / failed
"""

from datetime import datetime, timedelta

from ulid import ULID

from .commands import extract_command
from .exceptions import InvalidActionStatusError
from .models import TERMINAL_ACTION_STATES, Action, ActionStatus, Comment


def build_comment_records(
    task_id: str,
    author: str,
    body: str,
    now: datetime,
) -> tuple[Comment, Action | None]:
    """构建评论及其触发的 action（如果有）"""
    comment = Comment(
        id=str(ULID()),
        task_id=task_id,
        author=author,
        body=body,
        created_at=now,
    )
    command = extract_command(body)
    if command is None:
        return comment, None

    action = Action(
        id=str(ULID()),
        task_id=task_id,
        comment_id=comment.id,
        command=command,
        status=ActionStatus.QUEUED,
        created_at=now,
        updated_at=now,
    )
    return comment, action


def stale_before(now: datetime, lease_s: int) -> datetime | None:
    """租约截止时间：claimed_at 早于此时间的 running action 可被重新认领

    lease_s <= 0 时不回收，返回 None。
    """
    if lease_s <= 0:
        return None
    return now - timedelta(seconds=lease_s)


def is_claimable(action: Action, now: datetime, lease_s: int) -> bool:
    """判断 action 当前是否可被认领"""
    if action.status == ActionStatus.QUEUED:
        return True
    cutoff = stale_before(now, lease_s)
    return (
        action.status == ActionStatus.RUNNING
        and cutoff is not None
        and action.claimed_at is not None
        and action.claimed_at < cutoff
    )


def parse_completion_status(status: str | None) -> ActionStatus:
    """解析完成状态，缺省为 done

    Raises:
        InvalidActionStatusError: 状态不是终态
    """
    if not status:
        return ActionStatus.DONE
    try:
        parsed = ActionStatus(status)
    except ValueError as e:
        raise InvalidActionStatusError(status) from e
    if parsed not in TERMINAL_ACTION_STATES:
        raise InvalidActionStatusError(status)
    return parsed
