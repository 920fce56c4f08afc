"""StorageClient -- 存储后端选择与降级

由调用方（FastAPI lifespan / CLI）在进程启动时构建一次，并通过依赖注入传入各处理函数。

降级策略：
- 启动时若配置了数据库，则尝试连接并建表；失败时整个进程使用文件存储
- 每次调用先尝试数据库，失败（连接、查询、提交等）则本次调用降级到文件存储
- 文件存储失败直接向上抛出（没有更下一级的存储）
- 降级读会在 TaskBoard.warnings 中标记；降级写会累计计数，
  因为此时同一逻辑数据可能分散在两个存储中
"""

from pathlib import Path
from typing import Any

import structlog

from .exceptions import TaskboardError
from .models import Action, ActionStatus, Comment, Task, TaskBoard
from .store import create_store_group
from .store.database import DatabaseBackend
from .store.file_backend import FileBackend
from .store.runtime_state import RuntimeStateStore
from .store.task_file import TaskFile

log = structlog.get_logger()


class StorageClient:
    """存储客户端 -- 数据库优先，文件兜底"""

    def __init__(
        self,
        file_backend: FileBackend,
        database: DatabaseBackend | None = None,
        database_configured: bool | None = None,
        startup_error: str | None = None,
    ) -> None:
        """初始化存储客户端

        Args:
            file_backend: 文件存储后端（必需，作为最后一级）
            database: 数据库后端，None 表示未配置或启动时不可用
            database_configured: 是否配置了数据库（默认与 database 是否存在一致）
            startup_error: 启动时数据库不可用的原因
        """
        self._file = file_backend
        self._database = database
        self._database_configured = (
            database is not None if database_configured is None else database_configured
        )
        self._startup_error = startup_error
        self._fallback_reads = 0
        self._diverted_writes = 0
        self._last_error: str | None = None

    @property
    def file_backend(self) -> FileBackend:
        return self._file

    @property
    def database(self) -> DatabaseBackend | None:
        return self._database

    @property
    def diverted_writes(self) -> int:
        return self._diverted_writes

    @property
    def fallback_reads(self) -> int:
        return self._fallback_reads

    async def _call(self, operation: str, *args: Any, write: bool = False) -> tuple[Any, str]:
        """先尝试数据库后端，失败则降级到文件后端

        Returns:
            (结果, 应答后端名称)

        Raises:
            TaskboardError: 不可恢复的错误（如字段校验失败）直接抛出，不降级
        """
        if self._database is not None:
            try:
                result = await getattr(self._database, operation)(*args)
                return result, self._database.name
            except TaskboardError as e:
                if not e.recoverable:
                    raise
                primary_error: Exception = e
            except Exception as e:
                primary_error = e

            self._last_error = f"{type(primary_error).__name__}: {primary_error}"
            if write:
                self._diverted_writes += 1
            else:
                self._fallback_reads += 1
            log.warning(
                "primary_backend_failed",
                operation=operation,
                error=str(primary_error),
                error_type=type(primary_error).__name__,
                diverted_write=write,
            )

        result = await getattr(self._file, operation)(*args)
        return result, self._file.name

    def _warnings(self, source: str) -> list[str]:
        warnings: list[str] = []
        if not self._database_configured:
            return warnings
        if self._database is None:
            warnings.append(
                f"Database configured but unavailable since startup: {self._startup_error}"
            )
        elif source != self._database.name:
            warnings.append(
                f"Database unavailable, served from file fallback: {self._last_error}"
            )
        if self._diverted_writes:
            warnings.append(
                f"{self._diverted_writes} write(s) were stored in the file fallback "
                "while the database was failing; views may diverge"
            )
        return warnings

    async def load_board(self, status: str | None = None) -> TaskBoard:
        """加载任务看板（source 标识应答后端）"""
        board, source = await self._call("load_board", status)
        warnings = self._warnings(source)
        if warnings:
            board = board.model_copy(update={"warnings": warnings})
        return board

    async def get_task(self, task_id: str) -> Task | None:
        task, _ = await self._call("get_task", task_id)
        return task

    async def update_task(self, task_id: str, changes: dict[str, Any]) -> Task | None:
        task, _ = await self._call("update_task", task_id, changes, write=True)
        return task

    async def list_comments(self, task_id: str) -> list[Comment]:
        comments, _ = await self._call("list_comments", task_id)
        return comments

    async def add_comment(
        self,
        task_id: str,
        author: str,
        body: str,
    ) -> tuple[Comment, Action | None]:
        records, _ = await self._call("add_comment", task_id, author, body, write=True)
        comment, action = records
        if action is not None:
            log.info(
                "action_enqueued",
                action_id=action.id,
                task_id=task_id,
                comment_id=comment.id,
            )
        return comment, action

    async def claim_next_action(self) -> Action | None:
        action, source = await self._call("claim_next_action", write=True)
        if action is not None:
            log.info("action_claimed", action_id=action.id, task_id=action.task_id, source=source)
        return action

    async def complete_action(
        self,
        action_id: str,
        status: ActionStatus,
        result: str | None = None,
    ) -> bool:
        ok, source = await self._call(
            "complete_action", action_id, status, result, write=True
        )
        log.info(
            "action_completed" if ok else "action_complete_rejected",
            action_id=action_id,
            status=status.value,
            source=source,
        )
        return ok

    async def list_actions(self, task_id: str | None = None) -> list[Action]:
        actions, _ = await self._call("list_actions", task_id)
        return actions

    async def seed(self) -> int:
        """显式执行 seed 迁移（未配置数据库时返回 0）"""
        if self._database is None:
            return 0
        return await self._database.ensure_seeded()

    async def check_health(self) -> dict[str, Any]:
        """检查各存储组件状态（重新探测数据库连通性）"""
        checks: dict[str, Any] = {}

        if self._database is not None:
            try:
                await self._database.ping()
                checks["database"] = "ok"
            except Exception as e:
                checks["database"] = f"error: {e}"
        elif self._database_configured:
            checks["database"] = f"error: {self._startup_error}"
        else:
            checks["database"] = "disabled"

        task_file = self._file.task_file
        checks["tasks_file"] = "ok" if task_file.exists() else "error: file not found"

        # 运行时状态文件首次写入时才创建，缺失不算错误
        state_file = self._file.runtime_state.path
        checks["state_file"] = "ok" if state_file.is_file() else "empty"
        checks["fallback_reads"] = self._fallback_reads
        checks["diverted_writes"] = self._diverted_writes
        return checks

    async def close(self) -> None:
        if self._database is not None:
            await self._database.close()


async def create_storage_client(
    tasks_file: str | Path,
    state_file: str | Path,
    db_path: str | None = None,
    lease_s: int = 0,
) -> StorageClient:
    """创建存储客户端

    Args:
        tasks_file: YAML 任务文件路径
        state_file: 运行时状态 JSON 文件路径
        db_path: SQLite 数据库路径，None 表示仅使用文件存储
        lease_s: running action 租约秒数，0 表示不回收

    Returns:
        StorageClient 实例（数据库不可用时仅含文件后端）
    """
    task_file = TaskFile(tasks_file)
    file_backend = FileBackend(task_file, RuntimeStateStore(state_file, lease_s=lease_s))

    if not db_path:
        log.info("storage_initialized", mode="file", tasks_file=str(tasks_file))
        return StorageClient(file_backend)

    try:
        stores = await create_store_group(db_path)
    except Exception as e:
        log.error(
            "database_unavailable_at_startup",
            db_path=db_path,
            error=str(e),
            error_type=type(e).__name__,
        )
        return StorageClient(
            file_backend,
            database=None,
            database_configured=True,
            startup_error=f"{type(e).__name__}: {e}",
        )

    database = DatabaseBackend(stores, task_file, lease_s=lease_s)
    log.info("storage_initialized", mode="database", db_path=db_path)
    return StorageClient(file_backend, database=database)
