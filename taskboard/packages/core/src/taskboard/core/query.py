"""任务查询构造器 -- 可自由组合（AND）的过滤条件 + 排序

每个方法返回新的 TaskQuery，原对象不变：

    TaskQuery().for_assignee("sparky").with_status("backlog").by_last_worked()

归档可见性总是生效，默认只看活跃任务；archived() / with_archived() 显式切换。
"""

from datetime import datetime, timedelta
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict

from .config import DORMANT_DAYS
from .models.enums import PRIORITY_RANK, ArchiveMode, Assignee, Priority, TaskStatus
from .timestamps import format_ts


class TaskOrder(StrEnum):
    """列表排序方式"""

    RECENT = "recent"
    LAST_WORKED = "last_worked"
    PRIORITY = "priority"


_PRIORITY_CASE = (
    "CASE priority "
    + " ".join(f"WHEN '{p.value}' THEN {rank}" for p, rank in PRIORITY_RANK.items())
    + " END"
)

# 同值时按写入顺序，新的在前
_ORDER_SQL: dict[TaskOrder, str] = {
    TaskOrder.RECENT: "updated_at DESC, rowid DESC",
    TaskOrder.LAST_WORKED: "last_worked_on IS NULL, last_worked_on DESC, rowid DESC",
    TaskOrder.PRIORITY: f"{_PRIORITY_CASE}, updated_at DESC, rowid DESC",
}


class TaskQuery(BaseModel):
    """不可变的任务查询描述"""

    model_config = ConfigDict(frozen=True)

    archive_mode: ArchiveMode = ArchiveMode.ACTIVE
    assignee: Assignee | None = None
    status: TaskStatus | None = None
    priority: Priority | None = None
    dormant_before: datetime | None = None
    order: TaskOrder = TaskOrder.RECENT
    max_rows: int | None = None

    def _with(self, **changes: Any) -> "TaskQuery":
        return self.model_copy(update=changes)

    # 过滤
    def for_assignee(self, assignee: Assignee | str) -> "TaskQuery":
        return self._with(assignee=Assignee(assignee))

    def with_status(self, status: TaskStatus | str) -> "TaskQuery":
        return self._with(status=TaskStatus(status))

    def with_priority(self, priority: Priority | str) -> "TaskQuery":
        return self._with(priority=Priority(priority))

    def dormant(self, now: datetime, days: int = DORMANT_DAYS) -> "TaskQuery":
        """last_worked_on 为空，或早于 now - days"""
        return self._with(dormant_before=now - timedelta(days=days))

    # 归档可见性
    def active(self) -> "TaskQuery":
        return self._with(archive_mode=ArchiveMode.ACTIVE)

    def archived(self) -> "TaskQuery":
        return self._with(archive_mode=ArchiveMode.ARCHIVED)

    def with_archived(self) -> "TaskQuery":
        return self._with(archive_mode=ArchiveMode.ALL)

    def in_mode(self, mode: ArchiveMode | str) -> "TaskQuery":
        return self._with(archive_mode=ArchiveMode(mode))

    # 排序 / 截断
    def recent(self) -> "TaskQuery":
        return self._with(order=TaskOrder.RECENT)

    def by_last_worked(self) -> "TaskQuery":
        return self._with(order=TaskOrder.LAST_WORKED)

    def by_priority(self) -> "TaskQuery":
        return self._with(order=TaskOrder.PRIORITY)

    def ordered(self, order: TaskOrder | str) -> "TaskQuery":
        return self._with(order=TaskOrder(order))

    def limit(self, rows: int) -> "TaskQuery":
        return self._with(max_rows=rows)

    def to_sql(self) -> tuple[str, str, list[Any]]:
        """渲染 (WHERE 子句, ORDER BY 子句, 参数)

        WHERE 子句可能为空串；limit 以 LIMIT ? 附在 ORDER BY 子句之后，
        参数顺序与子句拼接顺序一致。
        """
        clauses: list[str] = []
        params: list[Any] = []

        if self.archive_mode == ArchiveMode.ACTIVE:
            clauses.append("archived = 0")
        elif self.archive_mode == ArchiveMode.ARCHIVED:
            clauses.append("archived = 1")

        if self.assignee is not None:
            clauses.append("assignee = ?")
            params.append(self.assignee.value)
        if self.status is not None:
            clauses.append("status = ?")
            params.append(self.status.value)
        if self.priority is not None:
            clauses.append("priority = ?")
            params.append(self.priority.value)
        if self.dormant_before is not None:
            clauses.append("(last_worked_on IS NULL OR last_worked_on < ?)")
            params.append(format_ts(self.dormant_before))

        where = "WHERE " + " AND ".join(clauses) if clauses else ""
        order = f"ORDER BY {_ORDER_SQL[self.order]}"
        if self.max_rows is not None:
            order += " LIMIT ?"
            params.append(self.max_rows)
        return where, order, params
