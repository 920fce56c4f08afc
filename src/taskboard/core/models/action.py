"""Action 领域模型

由含命令标记的评论隐式创建，由外部 worker 认领并完成。
claimed_at 是 running 状态的租约时间戳，用于识别长时间未完成的认领。
"""

from datetime import datetime

from pydantic import BaseModel, Field

from .enums import ActionStatus


class Action(BaseModel):
    """Action 队列项"""

    id: str = Field(description="唯一标识，ULID 格式")
    task_id: str = Field(description="所属任务 ID")
    comment_id: str = Field(description="触发该 action 的评论 ID")
    command: str = Field(description="命令文本（标记之后的内容）")
    status: ActionStatus = Field(default=ActionStatus.QUEUED, description="当前状态")
    result: str | None = Field(default=None, description="worker 返回的结果")
    created_at: datetime = Field(description="创建时间")
    updated_at: datetime = Field(description="更新时间")
    claimed_at: datetime | None = Field(default=None, description="最近一次被认领的时间")
