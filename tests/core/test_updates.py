"""任务局部更新合并规则测试"""

import pytest
from taskboard.core.exceptions import InvalidTaskUpdateError
from taskboard.core.models import TaskStatus
from taskboard.core.updates import merge_task_changes

CURRENT = {
    "id": "t1",
    "title": "Ship onboarding flow",
    "status": "todo",
    "labels": ["ux"],
    "framework": {"reach": 3, "impact": 2, "confidence": 0.8, "effort": 2},
}


class TestMergeTaskChanges:
    def test_status_change(self):
        merged, task = merge_task_changes(CURRENT, {"status": "done"})
        assert merged["status"] == "done"
        assert merged["labels"] == ["ux"]
        assert task.status == TaskStatus.DONE

    def test_framework_merged_per_field(self):
        merged, task = merge_task_changes(CURRENT, {"framework": {"effort": 4}})
        assert merged["framework"] == {"reach": 3, "impact": 2, "confidence": 0.8, "effort": 4}
        assert task.score == 1.2

    def test_current_not_mutated(self):
        merge_task_changes(CURRENT, {"title": "changed", "framework": {"reach": 9}})
        assert CURRENT["title"] == "Ship onboarding flow"
        assert CURRENT["framework"]["reach"] == 3

    @pytest.mark.parametrize("field", ["id", "score", "position"])
    def test_immutable_fields_rejected(self, field):
        with pytest.raises(InvalidTaskUpdateError):
            merge_task_changes(CURRENT, {field: "x"})

    def test_invalid_status_rejected(self):
        with pytest.raises(InvalidTaskUpdateError) as exc_info:
            merge_task_changes(CURRENT, {"status": "archived"})
        assert exc_info.value.recoverable is False
