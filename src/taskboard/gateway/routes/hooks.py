"""Webhook 路由

POST /api/hooks/task-events: 接收外部系统的任务事件。
x-task-signature 必须等于原始请求体的 HMAC-SHA256 十六进制摘要。
目前只处理 comment.created 事件，其余事件返回 {ok: true, ignored: true}。
"""

import json

import structlog
from fastapi import APIRouter, Depends, Request

from ..config import WEBHOOK_SIGNATURE_HEADER, GatewayConfig
from ..deps import get_config, get_task_service
from ..errors import error_response, task_not_found
from ..security import verify_signature
from ..services.task_service import TaskService

log = structlog.get_logger()

router = APIRouter()


@router.post("/api/hooks/task-events")
async def task_events(
    request: Request,
    config: GatewayConfig = Depends(get_config),
    service: TaskService = Depends(get_task_service),
):
    """处理任务事件 webhook"""
    raw_body = await request.body()
    signature = request.headers.get(WEBHOOK_SIGNATURE_HEADER)
    if not verify_signature(raw_body, signature, config.webhook_secret):
        log.warning("webhook_signature_rejected", has_signature=bool(signature))
        return error_response(401, "INVALID_SIGNATURE", "Invalid signature")

    try:
        event = json.loads(raw_body)
    except ValueError:
        return error_response(400, "INVALID_JSON", "Request body must be valid JSON")
    if not isinstance(event, dict):
        return error_response(400, "INVALID_JSON", "Request body must be a JSON object")

    parsed = service.parse_comment_event(event)
    if parsed is None:
        return {"ok": True, "ignored": True}

    task_id, body, author = parsed
    records = await service.add_comment(task_id, body, author)
    if records is None:
        return task_not_found(task_id)

    comment, _ = records
    return {"ok": True, "comment": comment.model_dump(mode="json")}
