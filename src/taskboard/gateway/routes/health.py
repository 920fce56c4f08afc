"""健康检查路由

GET /health: Liveness 检查，永远返回 200。
GET /ready: Readiness 检查，包含数据库连通性、任务文件、运行时状态文件与降级计数。
"""

import structlog
from fastapi import APIRouter, Depends
from starlette.responses import JSONResponse
from taskboard.core.storage import StorageClient

from ..deps import get_storage

log = structlog.get_logger()

router = APIRouter()


@router.get("/health")
async def health():
    """Liveness 检查 -- 永远返回 200"""
    return {"status": "ok"}


@router.get("/ready")
async def ready(storage: StorageClient = Depends(get_storage)):
    """Readiness 检查

    检查项：
    1. database: 数据库连通性（ok / disabled / error）
    2. tasks_file: 任务文件是否存在
    3. state_file: 运行时状态文件（ok / empty）
    4. fallback_reads / diverted_writes: 降级计数

    任务文件缺失时返回 503；仅数据库异常时文件存储仍可服务，返回 200 + degraded。
    """
    checks = await storage.check_health()

    if checks["tasks_file"] != "ok":
        status_code, status_text = 503, "not_ready"
    elif str(checks["database"]).startswith("error"):
        status_code, status_text = 200, "degraded"
    else:
        status_code, status_text = 200, "ready"

    if status_code != 200:
        log.warning("readiness_check_failed", checks=checks)

    return JSONResponse(
        status_code=status_code,
        content={"status": status_text, "checks": checks},
    )
