"""DatabaseBackend 测试 -- seed 一次、排序一致、任务更新与评论"""

import asyncio
from pathlib import Path

import pytest
from taskboard.core.exceptions import InvalidTaskUpdateError
from taskboard.core.models import ActionStatus
from taskboard.core.store.database import DatabaseBackend
from taskboard.core.store.file_backend import FileBackend
from taskboard.core.store.task_file import TaskFile


class TestSeed:
    """seed 迁移测试"""

    async def test_seed_imports_file_once(self, database_backend: DatabaseBackend):
        assert await database_backend.ensure_seeded() == 3
        assert database_backend.seeded
        assert await database_backend.ensure_seeded() == 0
        assert await database_backend.stores.task_store.count_tasks() == 3

    async def test_seed_idempotent_across_instances(
        self, database_backend: DatabaseBackend, tasks_file: Path
    ):
        await database_backend.ensure_seeded()

        # 新实例看到非空表，不再导入
        second = DatabaseBackend(database_backend.stores, TaskFile(tasks_file))
        assert await second.ensure_seeded() == 0
        assert await second.stores.task_store.count_tasks() == 3

    async def test_concurrent_first_calls_seed_once(self, database_backend: DatabaseBackend):
        results = await asyncio.gather(*[database_backend.ensure_seeded() for _ in range(5)])
        assert sorted(results) == [0, 0, 0, 0, 3]
        assert await database_backend.stores.task_store.count_tasks() == 3

    async def test_file_edits_after_seed_not_imported(
        self, database_backend: DatabaseBackend, tasks_file: Path
    ):
        await database_backend.load_board()
        tasks_file.write_text("tasks:\n  - id: new\n", encoding="utf-8")

        board = await database_backend.load_board()
        assert [t.id for t in board.tasks] == ["t1", "t2", "t3"]

    async def test_missing_file_skips_seed_until_available(
        self, store_group, tmp_path: Path, tasks_file: Path
    ):
        missing = tmp_path / "later.yaml"
        backend = DatabaseBackend(store_group, TaskFile(missing))

        board = await backend.load_board()
        assert board.tasks == []
        assert not backend.seeded

        missing.write_text(tasks_file.read_text(encoding="utf-8"), encoding="utf-8")
        board = await backend.load_board()
        assert len(board.tasks) == 3
        assert backend.seeded


class TestBoard:
    async def test_same_order_as_file_backend(
        self, database_backend: DatabaseBackend, file_backend: FileBackend
    ):
        db_board = await database_backend.load_board()
        file_board = await file_backend.load_board()

        assert db_board.source == "database"
        assert file_board.source == "file"
        assert [t.id for t in db_board.tasks] == [t.id for t in file_board.tasks] == [
            "t1",
            "t2",
            "t3",
        ]
        assert [t.score for t in db_board.tasks] == [2.4, 1.0, 1.0]
        assert db_board.summary == file_board.summary

    async def test_extra_fields_round_trip(self, database_backend: DatabaseBackend):
        task = await database_backend.get_task("t3")
        assert task.model_extra == {"labels": ["docs"]}
        assert task.position == 2
        assert task.due is None

    async def test_status_filter(self, database_backend: DatabaseBackend):
        board = await database_backend.load_board("in_progress")
        assert [t.id for t in board.tasks] == ["t2"]
        assert board.summary.total == 3


class TestUpdateTask:
    async def test_update_persists(self, database_backend: DatabaseBackend, tasks_file: Path):
        before = tasks_file.read_text(encoding="utf-8")
        task = await database_backend.update_task("t2", {"status": "done", "framework": {"reach": 5}})

        assert task.status == "done"
        assert task.score == 5.0
        assert task.position == 1

        stored = await database_backend.get_task("t2")
        assert stored.status == "done"
        assert stored.framework.reach == 5.0
        assert stored.framework.effort == 1.0

        board = await database_backend.load_board()
        assert [t.id for t in board.tasks] == ["t2", "t1", "t3"]
        # 数据库模式不回写任务文件
        assert tasks_file.read_text(encoding="utf-8") == before

    async def test_update_unknown(self, database_backend: DatabaseBackend):
        assert await database_backend.update_task("nope", {"status": "done"}) is None

    async def test_invalid_update(self, database_backend: DatabaseBackend):
        with pytest.raises(InvalidTaskUpdateError):
            await database_backend.update_task("t1", {"status": "archived"})


class TestComments:
    async def test_comment_with_command(self, database_backend: DatabaseBackend):
        await database_backend.ensure_seeded()
        comment, action = await database_backend.add_comment(
            "t1", "Owner", "@TARS summarize this thread"
        )
        assert action.command == "summarize this thread"

        comments = await database_backend.list_comments("t1")
        assert [c.id for c in comments] == [comment.id]
        actions = await database_backend.list_actions("t1")
        assert [a.id for a in actions] == [action.id]

        claimed = await database_backend.claim_next_action()
        assert claimed.id == action.id
        assert await database_backend.complete_action(action.id, ActionStatus.DONE, "summary")
        assert not await database_backend.complete_action(action.id, ActionStatus.FAILED, "late")
