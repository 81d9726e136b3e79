"""Taskboard Core Domain Models -- 公共类型导出

所有公共模型类型从此入口导入。
"""

from .activity import TaskActivity
from .enums import (
    DEFAULT_STATUS,
    INITIAL_STATUS,
    PRIORITY_RANK,
    STATUS_SEQUENCE,
    TERMINAL_STATUS,
    ActivityType,
    ArchiveMode,
    Assignee,
    Priority,
    TaskStatus,
    next_status,
    previous_status,
)
from .quick_note import NoteAge, QuickNote, QuickNoteCreate, QuickNoteUpdate
from .task import EDITABLE_FIELDS, WORK_TRACKING_FIELDS, Task, TaskCreate, TaskUpdate

__all__ = [
    # 枚举
    "TaskStatus",
    "Assignee",
    "Priority",
    "ActivityType",
    "ArchiveMode",
    "PRIORITY_RANK",
    # 状态链
    "STATUS_SEQUENCE",
    "DEFAULT_STATUS",
    "INITIAL_STATUS",
    "TERMINAL_STATUS",
    "next_status",
    "previous_status",
    # Task
    "Task",
    "TaskCreate",
    "TaskUpdate",
    "EDITABLE_FIELDS",
    "WORK_TRACKING_FIELDS",
    # Activity
    "TaskActivity",
    # QuickNote
    "QuickNote",
    "QuickNoteCreate",
    "QuickNoteUpdate",
    "NoteAge",
]
