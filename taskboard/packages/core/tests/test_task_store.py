"""SqliteTaskStore 单元测试

测试内容：
1. 创建 / 查询往返（含时间戳与枚举）
2. get_task 的归档可见性
3. 列写入、归档标记翻转、物理删除
4. 计数与分组计数
5. 枚举列的 CHECK 约束
"""

from datetime import UTC, datetime, timedelta

import aiosqlite
import pytest
from taskboard.core.models import ArchiveMode, Priority, TaskStatus
from taskboard.core.query import TaskQuery
from taskboard.core.store.task_store import SqliteTaskStore


@pytest.fixture
def store(core_db):
    return SqliteTaskStore(core_db)


class TestTaskStore:
    async def test_create_and_get(self, store, core_db, make_task):
        worked = datetime(2026, 2, 20, 17, 45, 12, 345678, tzinfo=UTC)
        task = make_task(
            description="详细说明",
            priority="urgent",
            last_worked_on=worked,
            owner="mechdog",
        )
        await store.create_task(task)
        await core_db.commit()

        loaded = await store.get_task(task.task_id)
        assert loaded == task
        assert loaded.last_worked_on == worked
        assert loaded.priority == Priority.URGENT

    async def test_get_missing(self, store):
        assert await store.get_task("01JMISSING000000000000000X") is None

    async def test_archive_visibility(self, store, core_db, make_task):
        task = make_task(archived=True)
        await store.create_task(task)
        await core_db.commit()

        assert await store.get_task(task.task_id) is None
        assert await store.get_task(task.task_id, ArchiveMode.ARCHIVED) is not None
        assert await store.get_task(task.task_id, ArchiveMode.ALL) is not None

    async def test_update_columns(self, store, core_db, make_task):
        task = make_task()
        await store.create_task(task)
        later = task.updated_at + timedelta(hours=1)
        await store.update_columns(
            task.task_id,
            {"status": TaskStatus.SPRINT, "title": "", "updated_at": later},
        )
        await core_db.commit()

        loaded = await store.get_task(task.task_id)
        assert loaded.status == TaskStatus.SPRINT
        assert loaded.title == ""
        assert loaded.updated_at == later

    async def test_update_columns_rejects_unknown(self, store, make_task):
        with pytest.raises(ValueError):
            await store.update_columns("x", {"task_id": "y"})

    async def test_set_archived_keeps_updated_at(self, store, core_db, make_task):
        task = make_task()
        await store.create_task(task)
        await store.set_archived(task.task_id, True)
        await core_db.commit()

        loaded = await store.get_task(task.task_id, ArchiveMode.ALL)
        assert loaded.archived is True
        assert loaded.updated_at == task.updated_at

    async def test_delete(self, store, core_db, make_task):
        task = make_task()
        await store.create_task(task)
        assert await store.delete_task(task.task_id) is True
        assert await store.delete_task(task.task_id) is False
        await core_db.commit()
        assert await store.get_task(task.task_id, ArchiveMode.ALL) is None

    async def test_counts(self, store, core_db, make_task):
        for task in (
            make_task(assignee="sparky", status="backlog"),
            make_task(assignee="sparky", status="done"),
            make_task(assignee="mechdog", status="backlog"),
            make_task(assignee="mechdog", status="backlog", archived=True),
        ):
            await store.create_task(task)
        await core_db.commit()

        assert await store.count_tasks() == 3
        assert await store.count_tasks(TaskQuery().with_archived()) == 4
        assert await store.count_by("status") == {"backlog": 2, "done": 1}
        assert await store.count_by("assignee") == {"sparky": 2, "mechdog": 1}

    async def test_count_by_rejects_unknown_column(self, store):
        with pytest.raises(ValueError):
            await store.count_by("title")

    @pytest.mark.parametrize(
        ("column", "value"),
        [("status", "bogus"), ("assignee", "nobody"), ("priority", "someday")],
    )
    async def test_enum_columns_reject_unknown_values(
        self, store, core_db, make_task, column, value
    ):
        task = make_task()
        await store.create_task(task)
        await core_db.commit()

        with pytest.raises(aiosqlite.IntegrityError):
            await store.update_columns(task.task_id, {column: value})
        await core_db.rollback()

        assert await store.get_task(task.task_id) == task
