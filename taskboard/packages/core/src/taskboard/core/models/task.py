"""Task Domain Model

Task 是看板上的一张卡片。模型本身只描述存储形态（允许加载历史脏数据，
例如数据库层面标题为空的行）；写入边界的校验由 TaskCreate / TaskUpdate 负责。
"""

from datetime import datetime, timedelta
from typing import Any

from pydantic import BaseModel, Field, field_validator

from .enums import (
    DEFAULT_STATUS,
    Assignee,
    Priority,
    TaskStatus,
    next_status,
    previous_status,
)
from .validators import reject_blank

# 手动修改需要走校验的字段（与 Task 字段同名）
EDITABLE_FIELDS: tuple[str, ...] = ("title", "description", "assignee", "status", "priority")

# 变化时自动刷新 last_worked_on 的字段
WORK_TRACKING_FIELDS: frozenset[str] = frozenset({"status", "assignee"})


class Task(BaseModel):
    """Task 数据模型"""

    task_id: str = Field(description="唯一标识，ULID 格式")
    created_at: datetime = Field(description="创建时间")
    updated_at: datetime = Field(description="更新时间")
    title: str = Field(description="任务标题")
    description: str | None = Field(default=None, description="任务描述")
    assignee: Assignee = Field(description="负责方")
    status: TaskStatus = Field(default=DEFAULT_STATUS, description="当前状态")
    priority: Priority = Field(default=Priority.MEDIUM, description="优先级")
    archived: bool = Field(default=False, description="是否已归档（软删除）")
    last_worked_on: datetime | None = Field(default=None, description="最近一次推进时间")
    owner: str | None = Field(default=None, description="创建者，自动化流程创建时为空")

    @property
    def next_status(self) -> TaskStatus | None:
        return next_status(self.status)

    @property
    def previous_status(self) -> TaskStatus | None:
        return previous_status(self.status)

    @property
    def is_done(self) -> bool:
        return self.status == TaskStatus.DONE

    def is_dormant(self, now: datetime, days: int = 7) -> bool:
        """从未推进过，或最近一次推进早于 now - days"""
        if self.last_worked_on is None:
            return True
        return self.last_worked_on < now - timedelta(days=days)


class TaskCreate(BaseModel):
    """创建任务的输入（未知字段忽略）"""

    title: str | None = Field(default=None, validate_default=True)
    description: str | None = None
    assignee: Assignee | None = Field(default=None, validate_default=True)
    status: TaskStatus = DEFAULT_STATUS
    priority: Priority = Priority.MEDIUM

    @field_validator("title", "assignee", "status", "priority", mode="before")
    @classmethod
    def _required(cls, value: Any) -> Any:
        return reject_blank(value)


class TaskUpdate(BaseModel):
    """部分更新的输入，只有显式传入的字段参与比较"""

    title: str | None = None
    description: str | None = None
    assignee: Assignee | None = None
    status: TaskStatus | None = None
    priority: Priority | None = None

    @field_validator("title", "assignee", "status", "priority", mode="before")
    @classmethod
    def _required(cls, value: Any) -> Any:
        return reject_blank(value)

    def provided(self) -> dict[str, Any]:
        """显式传入的字段 -> 值"""
        return self.model_dump(exclude_unset=True)
