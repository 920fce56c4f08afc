"""ActionStore SQLite 实现

认领（claim）由单条 UPDATE ... WHERE id = (子查询) ... RETURNING 完成：
子查询选出最早的可认领行，外层条件再次校验状态，
并发认领时同一 action 只会被一个调用方拿到。
"""

import asyncio
from datetime import datetime

import aiosqlite

from ..models import Action, ActionStatus

_COLUMNS = "id, task_id, comment_id, command, status, result, created_at, updated_at, claimed_at"

# 可认领条件：queued，或租约已过期的 running
_CLAIMABLE = """
(status = 'queued'
 OR (status = 'running' AND :stale_before IS NOT NULL AND claimed_at < :stale_before))
"""

_CLAIM_SQL = f"""
UPDATE actions
SET status = 'running', claimed_at = :now, updated_at = :now
WHERE id = (
    SELECT id FROM actions
    WHERE {_CLAIMABLE}
    ORDER BY created_at ASC, id ASC
    LIMIT 1
)
AND {_CLAIMABLE}
RETURNING {_COLUMNS}
"""


def _parse_ts(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


class SqliteActionStore:
    """ActionStore 的 SQLite 实现"""

    def __init__(
        self,
        conn: aiosqlite.Connection,
        write_lock: asyncio.Lock | None = None,
    ) -> None:
        self._conn = conn
        self._write_lock = write_lock or asyncio.Lock()

    async def append_action(self, action: Action) -> None:
        """追加 action

        注意：此方法不自动提交事务，需由调用方管理事务。
        """
        await self._conn.execute(
            f"INSERT INTO actions ({_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)",
            (
                action.id,
                action.task_id,
                action.comment_id,
                action.command,
                action.status.value,
                action.result,
                action.created_at.isoformat(),
                action.updated_at.isoformat(),
                action.claimed_at.isoformat() if action.claimed_at else None,
            ),
        )

    async def get_action(self, action_id: str) -> Action | None:
        cursor = await self._conn.execute(
            f"SELECT {_COLUMNS} FROM actions WHERE id = ?",
            (action_id,),
        )
        row = await cursor.fetchone()
        return self._row_to_action(row) if row else None

    async def list_actions(self, task_id: str | None = None) -> list[Action]:
        """查询 action，按创建时间正序"""
        if task_id:
            cursor = await self._conn.execute(
                f"SELECT {_COLUMNS} FROM actions WHERE task_id = ? ORDER BY created_at, id",
                (task_id,),
            )
        else:
            cursor = await self._conn.execute(
                f"SELECT {_COLUMNS} FROM actions ORDER BY created_at, id"
            )
        rows = await cursor.fetchall()
        return [self._row_to_action(row) for row in rows]

    async def claim_next(
        self,
        now: datetime,
        stale_before: datetime | None = None,
    ) -> Action | None:
        """原子认领最早的可认领 action 并置为 running

        Args:
            now: 当前时间（写入 claimed_at / updated_at）
            stale_before: claimed_at 早于此时间的 running action 可被重新认领；None 表示不回收

        Returns:
            认领到的 Action；队列为空时返回 None
        """
        async with self._write_lock:
            try:
                cursor = await self._conn.execute(
                    _CLAIM_SQL,
                    {
                        "now": now.isoformat(),
                        "stale_before": stale_before.isoformat() if stale_before else None,
                    },
                )
                row = await cursor.fetchone()
                await cursor.close()
                await self._conn.commit()
            except Exception:
                await self._conn.rollback()
                raise
        return self._row_to_action(row) if row else None

    async def complete(
        self,
        action_id: str,
        status: ActionStatus,
        result: str | None,
        now: datetime,
    ) -> bool:
        """完成 action（仅非终态 action 可被完成）

        Returns:
            True 如果更新成功；action 不存在或已在终态时返回 False
        """
        async with self._write_lock:
            try:
                cursor = await self._conn.execute(
                    """
                    UPDATE actions
                    SET status = ?, result = ?, updated_at = ?
                    WHERE id = ? AND status IN ('queued', 'running')
                    """,
                    (status.value, result, now.isoformat(), action_id),
                )
                updated = cursor.rowcount
                await self._conn.commit()
            except Exception:
                await self._conn.rollback()
                raise
        return updated > 0

    @staticmethod
    def _row_to_action(row: aiosqlite.Row) -> Action:
        """将数据库行转换为 Action 模型"""
        return Action(
            id=row[0],
            task_id=row[1],
            comment_id=row[2],
            command=row[3],
            status=row[4],
            result=row[5],
            created_at=datetime.fromisoformat(row[6]),
            updated_at=datetime.fromisoformat(row[7]),
            claimed_at=_parse_ts(row[8]),
        )
