"""端到端流程测试

登录 -> 看板 -> 评论 @TARS -> worker 认领并完成 -> 查看结果，
文件模式与数据库模式行为一致。
"""

import json

from httpx import ASGITransport, AsyncClient
from taskboard.gateway.security import compute_signature
from taskboard.worker import WorkerClient


class TestEndToEnd:
    async def test_board(self, client: AsyncClient, integration_app):
        data = (await client.get("/api/tasks")).json()
        assert data["source"] == integration_app.state.mode
        assert [t["id"] for t in data["tasks"]] == ["t1", "t2", "t3"]
        assert [t["score"] for t in data["tasks"]] == [2.4, 1.0, 1.0]
        assert data["summary"]["topScore"] == 2.4
        assert "warnings" not in data

    async def test_comment_to_worker_round_trip(self, client: AsyncClient, integration_app):
        created = (
            await client.post(
                "/api/tasks/t1/comments", json={"body": "@TARS summarize this thread"}
            )
        ).json()
        action_id = created["action"]["id"]

        async def summarize(action):
            assert action.command == "summarize this thread"
            return "Three comments, no blockers."

        async with WorkerClient(
            base_url="http://test",
            token="tok",
            transport=ASGITransport(app=integration_app),
        ) as worker:
            assert await worker.health_check()
            handled = await worker.run_once(summarize)
            assert handled.id == action_id
            assert await worker.run_once(summarize) is None
            # 已完成的 action 不能再次完成
            assert await worker.complete(action_id, "failed") is False

        (action,) = await integration_app.state.storage.list_actions("t1")
        assert action.status == "done"
        assert action.result == "Three comments, no blockers."
        assert action.claimed_at is not None

        comments = (await client.get("/api/tasks/t1/comments")).json()["comments"]
        assert [c["id"] for c in comments] == [created["comment"]["id"]]

    async def test_status_change_reorders_summary(self, client: AsyncClient):
        resp = await client.patch("/api/tasks/t1", json={"status": "done"})
        assert resp.json()["task"]["status"] == "done"

        data = (await client.get("/api/tasks", params={"status": "todo"})).json()
        assert data["tasks"] == []
        assert data["summary"]["done"] == 1
        assert data["summary"]["todo"] == 0

    async def test_webhook_comment(self, client: AsyncClient, integration_app):
        raw = json.dumps(
            {"type": "comment.created", "task_id": "t2", "body": "@TARS triage"}
        ).encode("utf-8")
        resp = await client.post(
            "/api/hooks/task-events",
            content=raw,
            headers={"x-task-signature": compute_signature(raw, "hook-secret")},
        )
        assert resp.status_code == 200

        (action,) = await integration_app.state.storage.list_actions("t2")
        assert action.command == "triage"
        assert action.status == "queued"
