"""CommentStore SQLite 实现 -- 评论只允许插入，不允许更新或删除"""

from datetime import datetime

import aiosqlite

from ..models import Comment


class SqliteCommentStore:
    """CommentStore 的 SQLite 实现"""

    def __init__(self, conn: aiosqlite.Connection) -> None:
        self._conn = conn

    async def append_comment(self, comment: Comment) -> None:
        """追加评论

        注意：此方法不自动提交事务，需由调用方管理事务。
        """
        await self._conn.execute(
            """
            INSERT INTO comments (id, task_id, author, body, created_at)
            VALUES (?, ?, ?, ?, ?)
            """,
            (
                comment.id,
                comment.task_id,
                comment.author,
                comment.body,
                comment.created_at.isoformat(),
            ),
        )

    async def list_comments(self, task_id: str) -> list[Comment]:
        """查询指定任务的评论，按创建时间倒序"""
        cursor = await self._conn.execute(
            """
            SELECT id, task_id, author, body, created_at FROM comments
            WHERE task_id = ?
            ORDER BY created_at DESC, id DESC
            """,
            (task_id,),
        )
        rows = await cursor.fetchall()
        return [
            Comment(
                id=row[0],
                task_id=row[1],
                author=row[2],
                body=row[3],
                created_at=datetime.fromisoformat(row[4]),
            )
            for row in rows
        ]
