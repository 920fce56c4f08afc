"""TaskStore SQLite 实现

tasks 表由任务文件一次性 seed 而来，之后由 PATCH 更新。
列表查询按 SCORE_SQL 倒序、position 正序，与 Python 端 sort_tasks() 保持一致。
"""

import asyncio
import json

import aiosqlite

from ..models import Task
from ..scoring import SCORE_SQL

_COLUMNS = (
    "id, position, title, status, owner, due, "
    "reach, impact, confidence, effort, extra, updated_at"
)


class SqliteTaskStore:
    """TaskStore 的 SQLite 实现"""

    def __init__(
        self,
        conn: aiosqlite.Connection,
        write_lock: asyncio.Lock | None = None,
    ) -> None:
        self._conn = conn
        self._write_lock = write_lock or asyncio.Lock()

    async def count_tasks(self) -> int:
        cursor = await self._conn.execute("SELECT COUNT(*) FROM tasks")
        row = await cursor.fetchone()
        return row[0] if row else 0

    async def insert_tasks(self, tasks: list[Task], updated_at: str) -> None:
        """批量写入任务

        注意：此方法不自动提交事务，需由调用方管理事务。
        """
        await self._conn.executemany(
            f"INSERT INTO tasks ({_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
            [self._task_to_params(task, updated_at) for task in tasks],
        )

    async def get_task(self, task_id: str) -> Task | None:
        """根据 id 查询任务"""
        cursor = await self._conn.execute(
            f"SELECT {_COLUMNS} FROM tasks WHERE id = ?",
            (task_id,),
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return self._row_to_task(row)

    async def list_tasks(self) -> list[Task]:
        """查询任务列表，按分数倒序、position 正序"""
        cursor = await self._conn.execute(
            f"SELECT {_COLUMNS} FROM tasks ORDER BY {SCORE_SQL} DESC, position ASC"
        )
        rows = await cursor.fetchall()
        return [self._row_to_task(row) for row in rows]

    async def latest_updated_at(self) -> str | None:
        cursor = await self._conn.execute("SELECT MAX(updated_at) FROM tasks")
        row = await cursor.fetchone()
        return row[0] if row else None

    async def update_task(self, task: Task, updated_at: str) -> None:
        """覆盖写入任务的全部可变字段（立即提交）"""
        params = self._task_to_params(task, updated_at)
        async with self._write_lock:
            try:
                await self._conn.execute(
                    """
                    UPDATE tasks
                    SET title = ?, status = ?, owner = ?, due = ?,
                        reach = ?, impact = ?, confidence = ?, effort = ?,
                        extra = ?, updated_at = ?
                    WHERE id = ?
                    """,
                    (*params[2:], task.id),
                )
                await self._conn.commit()
            except Exception:
                await self._conn.rollback()
                raise

    @staticmethod
    def _task_to_params(task: Task, updated_at: str) -> tuple:
        f = task.framework
        return (
            task.id,
            task.position,
            task.title,
            task.status.value,
            task.owner,
            task.due,
            f.reach,
            f.impact,
            f.confidence,
            f.effort,
            json.dumps(task.model_extra or {}, ensure_ascii=False, default=str),
            updated_at,
        )

    @staticmethod
    def _row_to_task(row: aiosqlite.Row) -> Task:
        """将数据库行转换为 Task 模型"""
        extra = json.loads(row[10]) if row[10] else {}
        return Task(
            **extra,
            id=row[0],
            position=row[1],
            title=row[2],
            status=row[3],
            owner=row[4],
            due=row[5],
            framework={
                "reach": row[6],
                "impact": row[7],
                "confidence": row[8],
                "effort": row[9],
            },
        )
