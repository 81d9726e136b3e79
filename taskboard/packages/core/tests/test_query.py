"""TaskQuery 单元测试

测试内容：
1. 构造器不可变、可链式组合
2. SQL 渲染：归档模式总是生效，过滤条件以 AND 组合
3. 在真实数据库上的过滤与排序
"""

from datetime import UTC, datetime, timedelta

import pytest
from pydantic import ValidationError
from taskboard.core.models import ArchiveMode, Assignee, TaskStatus
from taskboard.core.query import TaskOrder, TaskQuery
from taskboard.core.store.task_store import SqliteTaskStore

BASE_TIME = datetime(2026, 3, 1, 9, 0, tzinfo=UTC)


class TestBuilder:
    def test_chaining_returns_new_instances(self):
        base = TaskQuery()
        filtered = base.for_assignee("sparky").with_status("backlog")
        assert base.assignee is None
        assert filtered.assignee == Assignee.SPARKY
        assert filtered.status == TaskStatus.BACKLOG

    def test_default_mode_is_active(self):
        assert TaskQuery().archive_mode == ArchiveMode.ACTIVE
        assert TaskQuery().archived().archive_mode == ArchiveMode.ARCHIVED
        assert TaskQuery().with_archived().archive_mode == ArchiveMode.ALL

    def test_invalid_values_rejected(self):
        with pytest.raises(ValueError):
            TaskQuery().with_status("archived")

    def test_frozen(self):
        with pytest.raises(ValidationError):
            TaskQuery().assignee = Assignee.SPARKY  # type: ignore[misc]


class TestToSql:
    def test_default(self):
        where, order, params = TaskQuery().to_sql()
        assert where == "WHERE archived = 0"
        assert order.startswith("ORDER BY updated_at DESC")
        assert params == []

    def test_all_mode_has_no_archive_clause(self):
        where, _, _ = TaskQuery().with_archived().to_sql()
        assert where == ""

    def test_filters_compose_with_archive_mode(self):
        where, _, params = (
            TaskQuery().archived().for_assignee("mechdog").with_priority("high").to_sql()
        )
        assert where == "WHERE archived = 1 AND assignee = ? AND priority = ?"
        assert params == ["mechdog", "high"]

    def test_limit_param_comes_last(self):
        where, order, params = TaskQuery().with_status("done").limit(3).to_sql()
        assert order.endswith("LIMIT ?")
        assert params == ["done", 3]

    def test_dormant_threshold(self):
        where, _, params = TaskQuery().dormant(BASE_TIME, days=7).to_sql()
        assert "(last_worked_on IS NULL OR last_worked_on < ?)" in where
        assert params == [(BASE_TIME - timedelta(days=7)).isoformat(timespec="microseconds")]

    def test_ordered_accepts_names(self):
        assert TaskQuery().ordered("priority").order == TaskOrder.PRIORITY


class TestQueryExecution:
    async def _seed(self, conn, tasks):
        store = SqliteTaskStore(conn)
        for task in tasks:
            await store.create_task(task)
        await conn.commit()
        return store

    async def test_archived_tasks_never_in_default_listing(self, core_db, make_task):
        store = await self._seed(
            core_db,
            [
                make_task(assignee="sparky"),
                make_task(assignee="sparky", archived=True),
                make_task(assignee="mechdog", status="done", archived=True),
            ],
        )
        for query in (
            TaskQuery(),
            TaskQuery().for_assignee("sparky"),
            TaskQuery().with_status("done"),
            TaskQuery().dormant(BASE_TIME),
            TaskQuery().by_priority(),
        ):
            assert all(not t.archived for t in await store.list_tasks(query))

        assert len(await store.list_tasks(TaskQuery().archived())) == 2
        assert len(await store.list_tasks(TaskQuery().with_archived())) == 3

    async def test_assignee_filter_excludes_archived(self, core_db, make_task):
        a1 = make_task(assignee="sparky")
        a2 = make_task(assignee="sparky", archived=True)
        make_b = make_task(assignee="mechdog")
        store = await self._seed(core_db, [a1, a2, make_b])

        tasks = await store.list_tasks(TaskQuery().for_assignee("sparky"))
        assert [t.task_id for t in tasks] == [a1.task_id]

    async def test_by_last_worked_puts_nulls_last(self, core_db, make_task):
        old = make_task(last_worked_on=BASE_TIME - timedelta(days=5))
        new = make_task(last_worked_on=BASE_TIME - timedelta(days=1))
        never = make_task()
        store = await self._seed(core_db, [old, never, new])

        tasks = await store.list_tasks(TaskQuery().by_last_worked())
        assert [t.task_id for t in tasks] == [new.task_id, old.task_id, never.task_id]

    async def test_by_priority(self, core_db, make_task):
        low = make_task(priority="low")
        urgent = make_task(priority="urgent")
        medium = make_task(priority="medium")
        high = make_task(priority="high")
        store = await self._seed(core_db, [low, urgent, medium, high])

        tasks = await store.list_tasks(TaskQuery().by_priority())
        assert [t.priority.value for t in tasks] == ["urgent", "high", "medium", "low"]

    async def test_recent_ties_broken_newest_first(self, core_db, make_task):
        first = make_task()
        second = make_task()
        store = await self._seed(core_db, [first, second])

        tasks = await store.list_tasks(TaskQuery().recent())
        assert [t.task_id for t in tasks] == [second.task_id, first.task_id]

    async def test_dormant(self, core_db, make_task):
        stale = make_task(last_worked_on=BASE_TIME - timedelta(days=8))
        fresh = make_task(last_worked_on=BASE_TIME - timedelta(days=2))
        never = make_task()
        store = await self._seed(core_db, [stale, fresh, never])

        tasks = await store.list_tasks(TaskQuery().dormant(BASE_TIME).by_last_worked())
        assert [t.task_id for t in tasks] == [stale.task_id, never.task_id]

    async def test_limit(self, core_db, make_task):
        store = await self._seed(core_db, [make_task() for _ in range(4)])
        assert len(await store.list_tasks(TaskQuery().limit(2))) == 2
