"""Action 队列路由（worker 轮询接口）

POST /api/actions/next: 认领最早的 queued action。
POST /api/actions/{action_id}/complete: 上报 action 终态与结果。

两个接口均要求 x-worker-token 请求头，与用户会话 cookie 无关。
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from ..deps import get_task_service, require_worker_token
from ..services.task_service import TaskService

router = APIRouter(dependencies=[Depends(require_worker_token)])


class CompleteActionRequest(BaseModel):
    """完成 action 请求体"""

    status: str | None = Field(default=None, description="终态：done（默认）/ failed")
    result: str | None = Field(default=None, description="执行结果文本")


@router.post("/api/actions/next")
async def claim_next_action(
    service: TaskService = Depends(get_task_service),
):
    """认领下一个 action：{ok: true, action}，队列为空时 action 为 null"""
    action = await service.claim_next_action()
    return {"ok": True, "action": action.model_dump(mode="json") if action else None}


@router.post("/api/actions/{action_id}/complete")
async def complete_action(
    action_id: str,
    body: CompleteActionRequest | None = None,
    service: TaskService = Depends(get_task_service),
):
    """完成 action

    - 更新成功返回 {ok: true}
    - action 不存在或已在终态返回 {ok: false}
    - 状态不是 done / failed 返回 400
    """
    request = body or CompleteActionRequest()
    ok = await service.complete_action(action_id, request.status, request.result)
    return {"ok": ok}
