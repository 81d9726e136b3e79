"""活动记录推导单元测试

测试内容：
1. 主活动类型按固定优先级选择
2. 描述文本的拼接顺序与格式
3. changeset 序列化（枚举 -> 字符串，时间 -> ISO-8601）
4. 空变化不产生记录
5. 创建 / 删除 / 归档 / 恢复的专门推导
"""

from datetime import UTC, datetime

import pytest
from taskboard.core.activity import (
    archive_activity,
    build_description,
    creation_activity,
    deletion_activity,
    derive_update_activity,
    determine_activity_type,
    diff_fields,
    restore_activity,
    to_changeset,
)
from taskboard.core.models import ActivityType, Assignee, Priority, TaskStatus

TS = datetime(2026, 3, 2, 8, 30, tzinfo=UTC)


class TestActivityType:
    @pytest.mark.parametrize(
        "fields,expected",
        [
            (["status", "priority"], ActivityType.STATUS_CHANGED),
            (["assignee", "title"], ActivityType.ASSIGNEE_CHANGED),
            (["priority", "description"], ActivityType.PRIORITY_CHANGED),
            (["title", "description"], ActivityType.TITLE_CHANGED),
            (["description"], ActivityType.DESCRIPTION_CHANGED),
            (["last_worked_on"], ActivityType.UPDATED),
        ],
    )
    def test_priority_order(self, fields, expected):
        changes = {field: ("a", "b") for field in fields}
        assert determine_activity_type(changes) == expected


class TestDescription:
    def test_status_and_priority(self):
        changes = {
            "priority": (Priority.LOW, Priority.HIGH),
            "status": (TaskStatus.BACKLOG, TaskStatus.IN_PROGRESS),
        }
        assert build_description(changes) == (
            "Status changed from 'backlog' to 'in_progress', "
            "Priority changed from 'low' to 'high'"
        )

    def test_clause_order_is_fixed(self):
        changes = {
            "description": ("a", "b"),
            "title": ("旧", "新"),
            "assignee": (Assignee.SPARKY, Assignee.MECHDOG),
        }
        assert build_description(changes) == (
            "Assignee changed from 'sparky' to 'mechdog', Title updated, Description updated"
        )

    def test_fallback_text(self):
        assert build_description({"last_worked_on": (None, TS)}) == "Task updated"


class TestChangeset:
    def test_enum_and_datetime_values_are_plain(self):
        changeset = to_changeset(
            {
                "status": (TaskStatus.HOLD, TaskStatus.BACKLOG),
                "last_worked_on": (None, TS),
            }
        )
        assert changeset == {
            "status": {"from": "hold", "to": "backlog"},
            "last_worked_on": {"from": None, "to": TS.isoformat()},
        }

    def test_diff_fields_keeps_real_changes(self, make_task):
        task = make_task(title="标题", priority="low")
        changes = diff_fields(task, {"title": "标题", "priority": Priority.HIGH})
        assert changes == {"priority": (Priority.LOW, Priority.HIGH)}


class TestDeriveUpdate:
    def test_empty_changes_produce_nothing(self):
        assert derive_update_activity("01JTASK0000000000000000001", {}, None, TS) is None

    def test_status_and_priority_change(self):
        activity = derive_update_activity(
            "01JTASK0000000000000000001",
            {
                "status": (TaskStatus.BACKLOG, TaskStatus.IN_PROGRESS),
                "priority": (Priority.MEDIUM, Priority.URGENT),
            },
            "mechdog",
            TS,
        )
        assert activity is not None
        assert activity.activity_type == ActivityType.STATUS_CHANGED
        assert "Status changed" in activity.description
        assert "Priority changed" in activity.description
        assert activity.actor == "mechdog"
        assert activity.created_at == TS
        assert activity.new_value("priority") == "urgent"
        assert len(activity.activity_id) == 26


class TestDedicatedDerivations:
    def test_creation(self, make_task):
        task = make_task(status="sprint", priority="high")
        activity = creation_activity(task, "mechdog", TS)
        assert activity.activity_type == ActivityType.CREATED
        assert activity.description == "Task created with status 'sprint' and priority 'high'"
        assert activity.changeset == {}

    def test_deletion(self, make_task):
        activity = deletion_activity(make_task(title="旧任务"), None, TS)
        assert activity.activity_type == ActivityType.DELETED
        assert activity.description == "Task '旧任务' was deleted"

    def test_archive_names_actor_or_system(self, make_task):
        task = make_task()
        assert archive_activity(task, "mechdog", TS).description == "Task archived by mechdog"
        assert archive_activity(task, None, TS).description == "Task archived by system"

    def test_restore(self, make_task):
        activity = restore_activity(make_task(), None, TS)
        assert activity.activity_type == ActivityType.RESTORED
        assert activity.description == "Task restored by system"
