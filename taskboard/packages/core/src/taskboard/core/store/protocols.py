"""Store Protocol 接口定义

定义 TaskStore、ActivityStore、QuickNoteStore 的抽象接口，
使用 Python Protocol 实现结构化子类型（duck typing）。
"""

from collections.abc import Mapping
from typing import Any, Protocol

from ..models.activity import TaskActivity
from ..models.enums import ActivityType, ArchiveMode
from ..models.quick_note import QuickNote
from ..models.task import Task
from ..query import TaskQuery


class TaskStore(Protocol):
    """Task 存储接口"""

    async def create_task(self, task: Task) -> None:
        """创建任务记录"""
        ...

    async def get_task(
        self,
        task_id: str,
        archive_mode: ArchiveMode = ArchiveMode.ACTIVE,
    ) -> Task | None:
        """根据 task_id 查询任务"""
        ...

    async def list_tasks(self, query: TaskQuery | None = None) -> list[Task]:
        """按查询条件列出任务"""
        ...

    async def count_tasks(self, query: TaskQuery | None = None) -> int: ...

    async def count_by(
        self,
        column: str,
        query: TaskQuery | None = None,
    ) -> dict[str, int]: ...

    async def update_columns(self, task_id: str, columns: Mapping[str, Any]) -> None:
        """直接写入列值（不校验）"""
        ...

    async def set_archived(self, task_id: str, archived: bool) -> None: ...

    async def delete_task(self, task_id: str) -> bool: ...


class ActivityStore(Protocol):
    """TaskActivity 存储接口

    活动表 append-only：只允许插入，不允许更新或删除。
    """

    async def append_activity(self, activity: TaskActivity) -> None:
        """追加活动记录（append-only）"""
        ...

    async def recent_activities(
        self,
        task_id: str,
        limit: int | None = None,
    ) -> list[TaskActivity]:
        """最新的在前"""
        ...

    async def activities_of_type(
        self,
        task_id: str,
        activity_type: ActivityType,
    ) -> list[TaskActivity]: ...


class QuickNoteStore(Protocol):
    """QuickNote 存储接口"""

    async def create_note(self, note: QuickNote) -> None: ...

    async def get_note(self, note_id: str) -> QuickNote | None: ...

    async def list_notes(self, limit: int | None = None) -> list[QuickNote]: ...

    async def search_notes(self, term: str) -> list[QuickNote]: ...

    async def update_note(self, note_id: str, values: Mapping[str, Any]) -> None: ...

    async def delete_note(self, note_id: str) -> bool: ...
