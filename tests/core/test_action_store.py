"""ActionStore SQLite 测试 -- 原子认领、租约回收与完成"""

import asyncio
import sqlite3
from datetime import UTC, datetime, timedelta

import aiosqlite
import pytest
import pytest_asyncio
from taskboard.core.models import ActionStatus
from taskboard.core.queue import build_comment_records
from taskboard.core.store import StoreGroup
from taskboard.core.store.transaction import append_comment_with_action

T0 = datetime(2024, 5, 1, 12, 0, tzinfo=UTC)


@pytest_asyncio.fixture
async def stores(core_db: aiosqlite.Connection) -> StoreGroup:
    return StoreGroup(core_db)


async def _enqueue(stores: StoreGroup, body: str, at: datetime):
    comment, action = build_comment_records("t1", "Owner", body, at)
    await append_comment_with_action(
        stores.conn, stores.write_lock, stores.comment_store, stores.action_store, comment, action
    )
    return comment, action


class TestClaim:
    async def test_claim_empty_queue(self, stores: StoreGroup):
        assert await stores.action_store.claim_next(T0) is None

    async def test_claim_oldest_and_mark_running(self, stores: StoreGroup):
        _, later = await _enqueue(stores, "@TARS later", T0 + timedelta(seconds=5))
        _, earlier = await _enqueue(stores, "@TARS earlier", T0)

        now = T0 + timedelta(minutes=1)
        claimed = await stores.action_store.claim_next(now)
        assert claimed.id == earlier.id
        assert claimed.status == ActionStatus.RUNNING
        assert claimed.claimed_at == now
        assert claimed.updated_at == now
        assert claimed.command == "earlier"

        assert (await stores.action_store.claim_next(now)).id == later.id
        assert await stores.action_store.claim_next(now) is None

    async def test_concurrent_claims_get_distinct_actions(self, stores: StoreGroup):
        for i in range(3):
            await _enqueue(stores, f"@TARS job {i}", T0 + timedelta(seconds=i))

        results = await asyncio.gather(*[stores.action_store.claim_next(T0) for _ in range(6)])
        claimed = [r.id for r in results if r is not None]
        assert len(claimed) == 3
        assert len(set(claimed)) == 3

    async def test_stale_running_reclaimed(self, stores: StoreGroup):
        _, action = await _enqueue(stores, "@TARS go", T0)
        await stores.action_store.claim_next(T0)

        later = T0 + timedelta(minutes=10)
        # 未启用租约
        assert await stores.action_store.claim_next(later, stale_before=None) is None
        # 租约 60 秒
        reclaimed = await stores.action_store.claim_next(
            later, stale_before=later - timedelta(seconds=60)
        )
        assert reclaimed.id == action.id
        assert reclaimed.claimed_at == later


class TestComplete:
    async def test_complete_running_action(self, stores: StoreGroup):
        _, action = await _enqueue(stores, "@TARS go", T0)
        await stores.action_store.claim_next(T0)

        done_at = T0 + timedelta(seconds=5)
        assert await stores.action_store.complete(action.id, ActionStatus.DONE, "ok", done_at)

        stored = await stores.action_store.get_action(action.id)
        assert stored.status == ActionStatus.DONE
        assert stored.result == "ok"
        assert stored.updated_at == done_at
        assert stored.claimed_at == T0

    async def test_complete_unknown(self, stores: StoreGroup):
        assert not await stores.action_store.complete("missing", ActionStatus.DONE, None, T0)

    async def test_terminal_never_reopened(self, stores: StoreGroup):
        _, action = await _enqueue(stores, "@TARS go", T0)
        assert await stores.action_store.complete(action.id, ActionStatus.FAILED, "boom", T0)
        assert not await stores.action_store.complete(action.id, ActionStatus.DONE, "again", T0)
        assert await stores.action_store.claim_next(
            T0 + timedelta(days=1), stale_before=T0 + timedelta(days=1)
        ) is None

        stored = await stores.action_store.get_action(action.id)
        assert stored.status == ActionStatus.FAILED
        assert stored.result == "boom"


class TestCommentAction:
    async def test_comment_and_action_committed_together(self, stores: StoreGroup):
        comment, action = await _enqueue(stores, "@TARS summarize this thread", T0)

        comments = await stores.comment_store.list_comments("t1")
        actions = await stores.action_store.list_actions("t1")
        assert [c.id for c in comments] == [comment.id]
        assert [a.id for a in actions] == [action.id]
        assert actions[0].comment_id == comment.id

    async def test_rollback_on_failure(self, stores: StoreGroup):
        # 外键约束失败：任务不存在
        comment, action = build_comment_records("ghost", "Owner", "@TARS go", T0)
        with pytest.raises(sqlite3.IntegrityError):
            await append_comment_with_action(
                stores.conn,
                stores.write_lock,
                stores.comment_store,
                stores.action_store,
                comment,
                action,
            )

        assert await stores.comment_store.list_comments("ghost") == []
        assert await stores.action_store.list_actions() == []

    async def test_failed_transaction_keeps_concurrent_write(self, stores: StoreGroup):
        good = build_comment_records("t1", "Owner", "@TARS keep me", T0)
        bad = build_comment_records("ghost", "Owner", "@TARS go", T0)

        results = await asyncio.gather(
            append_comment_with_action(
                stores.conn, stores.write_lock, stores.comment_store, stores.action_store, *good
            ),
            append_comment_with_action(
                stores.conn, stores.write_lock, stores.comment_store, stores.action_store, *bad
            ),
            return_exceptions=True,
        )

        assert results[0] is None
        assert isinstance(results[1], sqlite3.IntegrityError)
        assert [c.id for c in await stores.comment_store.list_comments("t1")] == [good[0].id]
        assert [a.id for a in await stores.action_store.list_actions()] == [good[1].id]

    async def test_failed_transaction_keeps_concurrent_claim(self, stores: StoreGroup):
        _, action = await _enqueue(stores, "@TARS go", T0)
        bad = build_comment_records("ghost", "Owner", "@TARS go", T0)

        claimed, failed = await asyncio.gather(
            stores.action_store.claim_next(T0),
            append_comment_with_action(
                stores.conn, stores.write_lock, stores.comment_store, stores.action_store, *bad
            ),
            return_exceptions=True,
        )

        assert claimed.id == action.id
        assert isinstance(failed, sqlite3.IntegrityError)
        stored = await stores.action_store.get_action(action.id)
        assert stored.status == ActionStatus.RUNNING
