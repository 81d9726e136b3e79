"""枚举定义 -- 看板任务的封闭词表

包含 TaskStatus 有序状态链、Assignee、Priority、ActivityType、ArchiveMode，
以及 STATUS_SEQUENCE 顺序表和 next_status / previous_status 流转查询。
枚举值即持久化存储值，属于存储契约，不可随意改名。
"""

from enum import StrEnum


class TaskStatus(StrEnum):
    """Task 状态 -- 定义顺序即工作流顺序（左 -> 右）"""

    HOLD = "hold"
    BACKLOG = "backlog"
    IN_PROGRESS = "in_progress"
    SPRINT = "sprint"
    DAILY = "daily"
    DONE = "done"


# 严格线性链：index 0..5
STATUS_SEQUENCE: tuple[TaskStatus, ...] = tuple(TaskStatus)

DEFAULT_STATUS: TaskStatus = TaskStatus.BACKLOG

TERMINAL_STATUS: TaskStatus = STATUS_SEQUENCE[-1]
INITIAL_STATUS: TaskStatus = STATUS_SEQUENCE[0]


class Assignee(StrEnum):
    """任务负责方（人 + 助手）"""

    MECHDOG = "mechdog"
    SPARKY = "sparky"


class Priority(StrEnum):
    """优先级"""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


# 排序用：urgent 最前
PRIORITY_RANK: dict[Priority, int] = {
    Priority.URGENT: 0,
    Priority.HIGH: 1,
    Priority.MEDIUM: 2,
    Priority.LOW: 3,
}


class ActivityType(StrEnum):
    """活动记录类型"""

    CREATED = "created"
    UPDATED = "updated"
    STATUS_CHANGED = "status_changed"
    ASSIGNEE_CHANGED = "assignee_changed"
    PRIORITY_CHANGED = "priority_changed"
    TITLE_CHANGED = "title_changed"
    DESCRIPTION_CHANGED = "description_changed"
    DELETED = "deleted"
    MOVED = "moved"
    ARCHIVED = "archived"
    RESTORED = "restored"


class ArchiveMode(StrEnum):
    """归档可见性模式，所有查询都隐式带上（默认 active）"""

    ACTIVE = "active"
    ARCHIVED = "archived"
    ALL = "all"


def _status_index(status: TaskStatus | str | None) -> int | None:
    """返回状态在链上的位置，无法识别时返回 None"""
    if status is None:
        return None
    try:
        return STATUS_SEQUENCE.index(TaskStatus(status))
    except ValueError:
        return None


def next_status(status: TaskStatus | str | None) -> TaskStatus | None:
    """下一个状态

    Args:
        status: 当前状态

    Returns:
        链上的下一个状态；已在 done 或状态无法识别时返回 None
    """
    index = _status_index(status)
    if index is None or index >= len(STATUS_SEQUENCE) - 1:
        return None
    return STATUS_SEQUENCE[index + 1]


def previous_status(status: TaskStatus | str | None) -> TaskStatus | None:
    """上一个状态

    Returns:
        链上的上一个状态；已在 hold 或状态无法识别时返回 None
    """
    index = _status_index(status)
    if index is None or index <= 0:
        return None
    return STATUS_SEQUENCE[index - 1]
