"""活动记录推导 -- 把一次写入的字段变化转换为一条 TaskActivity

changes 形如 {"status": ("backlog", "in_progress")}，即 字段 -> (旧值, 新值)。
一次写入最多产生一条活动记录；changes 为空时不产生记录。
创建 / 删除 / 归档 / 恢复各有专门的推导，不经过 diff 流程。
"""

from collections.abc import Mapping
from datetime import datetime
from enum import Enum
from typing import Any

from ulid import ULID

from .models.activity import TaskActivity
from .models.enums import ActivityType
from .models.task import Task

# 按优先级排列：status 永远优先
_TYPE_PRIORITY: tuple[tuple[str, ActivityType], ...] = (
    ("status", ActivityType.STATUS_CHANGED),
    ("assignee", ActivityType.ASSIGNEE_CHANGED),
    ("priority", ActivityType.PRIORITY_CHANGED),
    ("title", ActivityType.TITLE_CHANGED),
    ("description", ActivityType.DESCRIPTION_CHANGED),
)

# 描述中回显新旧值的字段
_ECHOED_FIELDS: tuple[str, ...] = ("status", "assignee", "priority")
# 只提示"已更新"的字段（正文可能很长）
_SILENT_FIELDS: tuple[str, ...] = ("title", "description")

SYSTEM_ACTOR = "system"

Changes = Mapping[str, tuple[Any, Any]]


def _plain(value: Any) -> Any:
    """转换为可 JSON 序列化的值"""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat()
    return value


def determine_activity_type(changes: Changes) -> ActivityType:
    """按固定优先级选出主活动类型"""
    for field, activity_type in _TYPE_PRIORITY:
        if field in changes:
            return activity_type
    return ActivityType.UPDATED


def build_description(changes: Changes) -> str:
    """按 status, assignee, priority, title, description 的顺序拼接描述"""
    parts: list[str] = []
    for field in _ECHOED_FIELDS:
        if field in changes:
            old, new = changes[field]
            parts.append(
                f"{field.capitalize()} changed from '{_plain(old)}' to '{_plain(new)}'"
            )
    for field in _SILENT_FIELDS:
        if field in changes:
            parts.append(f"{field.capitalize()} updated")
    return ", ".join(parts) if parts else "Task updated"


def to_changeset(changes: Changes) -> dict[str, dict[str, Any]]:
    return {
        field: {"from": _plain(old), "to": _plain(new)}
        for field, (old, new) in changes.items()
    }


def diff_fields(task: Task, updates: Mapping[str, Any]) -> dict[str, tuple[Any, Any]]:
    """比较任务当前值与更新值，只保留真正变化的字段"""
    changes: dict[str, tuple[Any, Any]] = {}
    for field, new in updates.items():
        old = getattr(task, field)
        if old != new:
            changes[field] = (old, new)
    return changes


def _new_activity(
    task_id: str,
    activity_type: ActivityType,
    description: str,
    actor: str | None,
    ts: datetime,
    changeset: dict[str, dict[str, Any]] | None = None,
) -> TaskActivity:
    return TaskActivity(
        activity_id=str(ULID()),
        task_id=task_id,
        activity_type=activity_type,
        description=description,
        changeset=changeset or {},
        actor=actor,
        created_at=ts,
    )


def derive_update_activity(
    task_id: str,
    changes: Changes,
    actor: str | None,
    ts: datetime,
) -> TaskActivity | None:
    """由一次写入的变化推导活动记录

    Returns:
        TaskActivity；changes 为空时返回 None
    """
    if not changes:
        return None
    return _new_activity(
        task_id,
        determine_activity_type(changes),
        build_description(changes),
        actor,
        ts,
        changeset=to_changeset(changes),
    )


def creation_activity(task: Task, actor: str | None, ts: datetime) -> TaskActivity:
    return _new_activity(
        task.task_id,
        ActivityType.CREATED,
        f"Task created with status '{task.status.value}' and priority '{task.priority.value}'",
        actor,
        ts,
    )


def deletion_activity(task: Task, actor: str | None, ts: datetime) -> TaskActivity:
    return _new_activity(
        task.task_id,
        ActivityType.DELETED,
        f"Task '{task.title}' was deleted",
        actor,
        ts,
    )


def archive_activity(task: Task, actor: str | None, ts: datetime) -> TaskActivity:
    return _new_activity(
        task.task_id,
        ActivityType.ARCHIVED,
        f"Task archived by {actor or SYSTEM_ACTOR}",
        actor,
        ts,
    )


def restore_activity(task: Task, actor: str | None, ts: datetime) -> TaskActivity:
    return _new_activity(
        task.task_id,
        ActivityType.RESTORED,
        f"Task restored by {actor or SYSTEM_ACTOR}",
        actor,
        ts,
    )
