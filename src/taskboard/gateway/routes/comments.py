"""评论路由

GET /api/tasks/{task_id}/comments: 评论列表（新的在前）。
POST /api/tasks/{task_id}/comments: 追加评论；正文含 @TARS 标记时同时入队 action。
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from ..deps import get_task_service, require_session
from ..errors import task_not_found
from ..services.task_service import TaskService

router = APIRouter(dependencies=[Depends(require_session)])


class CommentRequest(BaseModel):
    """评论请求体"""

    body: str | None = Field(default=None, description="评论正文")
    author: str | None = Field(default=None, description="作者，缺省使用配置的默认作者")


@router.get("/api/tasks/{task_id}/comments")
async def list_comments(
    task_id: str,
    service: TaskService = Depends(get_task_service),
):
    """查询任务评论"""
    comments = await service.list_comments(task_id)
    if comments is None:
        return task_not_found(task_id)
    return {"comments": [c.model_dump(mode="json") for c in comments]}


@router.post("/api/tasks/{task_id}/comments")
async def add_comment(
    task_id: str,
    body: CommentRequest,
    service: TaskService = Depends(get_task_service),
):
    """追加评论

    - 成功返回 {ok: true, comment, action}（action 为 null 表示未入队）
    - 正文为空返回 400
    - 任务不存在返回 404
    """
    records = await service.add_comment(task_id, body.body, body.author)
    if records is None:
        return task_not_found(task_id)

    comment, action = records
    return {
        "ok": True,
        "comment": comment.model_dump(mode="json"),
        "action": action.model_dump(mode="json") if action else None,
    }
