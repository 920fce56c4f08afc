"""Comment 领域模型 -- 创建后不可变"""

from datetime import datetime

from pydantic import BaseModel, Field


class Comment(BaseModel):
    """任务评论"""

    id: str = Field(description="唯一标识，ULID 格式")
    task_id: str = Field(description="所属任务 ID")
    author: str = Field(description="作者")
    body: str = Field(description="评论正文")
    created_at: datetime = Field(description="创建时间")
