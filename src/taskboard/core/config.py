"""配置常量模块 -- 可通过环境变量覆盖

包含任务文件路径、运行时状态文件路径、数据库路径、action 租约等可配置项。
"""

import os
from pathlib import Path


def _get_base_dir() -> Path:
    """获取项目 data 基础目录"""
    return Path(os.environ.get("TASKBOARD_DATA_DIR", "data"))


def get_tasks_file() -> Path:
    """获取 YAML 任务文件路径（任务的原始来源）"""
    return Path(
        os.environ.get(
            "TASKBOARD_TASKS_FILE",
            str(_get_base_dir() / "tasks.yaml"),
        )
    )


def get_state_file() -> Path:
    """获取运行时状态 JSON 文件路径（文件模式下的评论与 action）"""
    return Path(
        os.environ.get(
            "TASKBOARD_STATE_FILE",
            str(_get_base_dir() / "runtime-state.json"),
        )
    )


def get_db_path() -> str | None:
    """获取 SQLite 数据库路径

    未配置时返回 None，表示仅使用文件存储。
    """
    return os.environ.get("TASKBOARD_DB_PATH") or None


def get_action_lease_s() -> int:
    """获取 running action 的租约秒数（0 表示永不回收）"""
    return int(os.environ.get("TASKBOARD_ACTION_LEASE_S", "0"))


# 评论中触发 action 的标记
COMMAND_MARKER: str = "@TARS"
