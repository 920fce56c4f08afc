"""全局测试配置 -- 示例任务文件与临时存储路径"""

from pathlib import Path

import pytest

# t1 = 3*2*0.8/2 = 2.4；t2、t3 同为 1.0，按文件顺序排列
SAMPLE_TASKS_YAML = """\
updated_at: 2024-05-01T10:00:00Z
tasks:
  - id: t1
    title: Ship onboarding flow
    status: todo
    owner: alex
    due: 2024-05-10
    framework: {reach: 3, impact: 2, confidence: 0.8, effort: 2}
  - id: t2
    title: Fix login redirect
    status: in_progress
    owner: sam
    framework: {reach: 1, impact: 1, confidence: 1, effort: 1}
  - id: t3
    title: Write API docs
    status: blocked
    owner: kim
    labels: [docs]
    framework: {reach: 2, impact: 1, confidence: 0.5, effort: 1}
"""


@pytest.fixture
def tasks_file(tmp_path: Path) -> Path:
    """写入示例任务文件"""
    path = tmp_path / "tasks.yaml"
    path.write_text(SAMPLE_TASKS_YAML, encoding="utf-8")
    return path


@pytest.fixture
def state_file(tmp_path: Path) -> Path:
    """运行时状态文件路径（初始不存在）"""
    return tmp_path / "runtime-state.json"


@pytest.fixture
def db_path(tmp_path: Path) -> str:
    """临时 SQLite 数据库路径"""
    return str(tmp_path / "sqlite" / "taskboard.db")
