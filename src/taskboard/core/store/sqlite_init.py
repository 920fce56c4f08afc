"""SQLite 数据库初始化

PRAGMA 配置 + 三张表 DDL + 索引创建。
tasks 表只存 RICE 参数，score 在读取时由 SCORE_SQL 派生，不落库。
"""

import aiosqlite

from ..scoring import SCORE_FUNCTION_NAME, compute_score

# tasks 表 DDL
_TASKS_DDL = """
CREATE TABLE IF NOT EXISTS tasks (
    id          TEXT PRIMARY KEY,
    position    INTEGER NOT NULL DEFAULT 0,
    title       TEXT NOT NULL DEFAULT '',
    status      TEXT NOT NULL DEFAULT 'todo',
    owner       TEXT NOT NULL DEFAULT '',
    due         TEXT,
    reach       REAL NOT NULL DEFAULT 1,
    impact      REAL NOT NULL DEFAULT 1,
    confidence  REAL NOT NULL DEFAULT 1,
    effort      REAL NOT NULL DEFAULT 1,
    extra       TEXT NOT NULL DEFAULT '{}',
    updated_at  TEXT NOT NULL
);
"""

_TASKS_INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_tasks_status ON tasks(status);",
]

# comments 表 DDL（创建后不可变）
_COMMENTS_DDL = """
CREATE TABLE IF NOT EXISTS comments (
    id          TEXT PRIMARY KEY,
    task_id     TEXT NOT NULL,
    author      TEXT NOT NULL,
    body        TEXT NOT NULL,
    created_at  TEXT NOT NULL,

    FOREIGN KEY (task_id) REFERENCES tasks(id)
);
"""

_COMMENTS_INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_comments_task_created ON comments(task_id, created_at DESC);",
]

# actions 表 DDL
_ACTIONS_DDL = """
CREATE TABLE IF NOT EXISTS actions (
    id          TEXT PRIMARY KEY,
    task_id     TEXT NOT NULL,
    comment_id  TEXT NOT NULL,
    command     TEXT NOT NULL,
    status      TEXT NOT NULL DEFAULT 'queued',
    result      TEXT,
    created_at  TEXT NOT NULL,
    updated_at  TEXT NOT NULL,
    claimed_at  TEXT,

    FOREIGN KEY (task_id) REFERENCES tasks(id),
    FOREIGN KEY (comment_id) REFERENCES comments(id)
);
"""

_ACTIONS_INDEXES = [
    # 认领时按 status + created_at 查找最早的 action
    "CREATE INDEX IF NOT EXISTS idx_actions_status_created ON actions(status, created_at);",
    "CREATE INDEX IF NOT EXISTS idx_actions_task_id ON actions(task_id);",
]

_PRAGMAS = (
    "PRAGMA journal_mode = WAL;",
    "PRAGMA foreign_keys = ON;",
    # 并发认领时等待写锁而不是立即报 SQLITE_BUSY
    "PRAGMA busy_timeout = 5000;",
)


async def register_score_function(conn: aiosqlite.Connection) -> None:
    """在连接上注册 rice_score(reach, impact, confidence, effort)

    SQL 排序与 Task.score 共用 compute_score。函数注册只对当前连接有效，
    每个新连接都要调用一次（init_db 已包含）。
    """
    await conn.create_function(SCORE_FUNCTION_NAME, 4, compute_score, deterministic=True)


async def init_db(conn: aiosqlite.Connection) -> None:
    """幂等建表：注册评分函数、PRAGMA、tasks/comments/actions 三张表及索引，最后提交"""
    await register_score_function(conn)

    for pragma in _PRAGMAS:
        await conn.execute(pragma)

    for ddl in (_TASKS_DDL, _COMMENTS_DDL, _ACTIONS_DDL):
        await conn.execute(ddl)

    for idx_sql in (*_TASKS_INDEXES, *_COMMENTS_INDEXES, *_ACTIONS_INDEXES):
        await conn.execute(idx_sql)

    await conn.commit()
