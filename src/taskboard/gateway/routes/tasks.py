"""任务路由

GET /api/tasks: 按分数倒序的任务看板，支持 status 筛选。
GET /api/tasks/{task_id}: 任务详情。
PATCH /api/tasks/{task_id}: 局部更新任务字段（主要用于状态变更）。
"""

from typing import Any

from fastapi import APIRouter, Body, Depends, Query
from taskboard.core.models import TaskStatus

from ..deps import get_task_service, require_session
from ..errors import task_not_found
from ..services.task_service import TaskService

router = APIRouter(dependencies=[Depends(require_session)])


@router.get("/api/tasks")
async def list_tasks(
    status: TaskStatus | None = Query(default=None, description="按状态筛选"),
    service: TaskService = Depends(get_task_service),
):
    """查询任务看板：{updated_at, tasks, summary, source}"""
    board = await service.load_board(status.value if status else None)
    # warnings 为空时省略
    exclude = set() if board.warnings else {"warnings"}
    return board.model_dump(mode="json", exclude=exclude, by_alias=True)


@router.get("/api/tasks/{task_id}")
async def get_task(
    task_id: str,
    service: TaskService = Depends(get_task_service),
):
    """查询任务详情"""
    task = await service.get_task(task_id)
    if task is None:
        return task_not_found(task_id)
    return {"task": task.model_dump(mode="json")}


@router.patch("/api/tasks/{task_id}")
async def patch_task(
    task_id: str,
    changes: dict[str, Any] = Body(description="待更新的字段"),
    service: TaskService = Depends(get_task_service),
):
    """局部更新任务

    - 成功返回 {success: true, task}
    - 任务不存在返回 404
    - 字段只读或取值非法返回 400
    """
    task = await service.update_task(task_id, changes)
    if task is None:
        return task_not_found(task_id)
    return {"success": True, "task": task.model_dump(mode="json")}
