"""任务看板组装 -- 排序与汇总

排序规则：score 倒序，同分时按任务文件中的顺序（position）正序。
"""

from collections.abc import Iterable

from .models import Task, TaskBoard, TaskStatus, TaskSummary


def sort_tasks(tasks: Iterable[Task]) -> list[Task]:
    """按 score 倒序排序，同分按 position 正序"""
    return sorted(tasks, key=lambda t: (-t.score, t.position))


def summarize(tasks: list[Task]) -> TaskSummary:
    """统计各状态数量和最高分（tasks 需已排序）"""
    counts = {status: 0 for status in TaskStatus}
    for task in tasks:
        counts[task.status] += 1
    return TaskSummary(
        total=len(tasks),
        todo=counts[TaskStatus.TODO],
        in_progress=counts[TaskStatus.IN_PROGRESS],
        blocked=counts[TaskStatus.BLOCKED],
        done=counts[TaskStatus.DONE],
        top_score=tasks[0].score if tasks else 0.0,
    )


def build_board(
    tasks: Iterable[Task],
    source: str,
    updated_at: str | None = None,
    status: str | None = None,
) -> TaskBoard:
    """组装统一的看板返回结构

    summary 始终统计全部任务；status 仅筛选返回的任务列表。
    """
    ordered = sort_tasks(tasks)
    visible = [t for t in ordered if t.status == status] if status else ordered
    return TaskBoard(
        updated_at=updated_at,
        tasks=visible,
        summary=summarize(ordered),
        source=source,
    )
