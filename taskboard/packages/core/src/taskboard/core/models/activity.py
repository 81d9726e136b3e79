"""TaskActivity Domain Model

活动表 append-only，不允许更新或删除（任务被物理删除时级联删除）。
changeset 形如 {"status": {"from": "backlog", "to": "in_progress"}}。
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .enums import ActivityType


class TaskActivity(BaseModel):
    """TaskActivity 数据模型 -- 一次写入对应一条记录，创建后不可修改"""

    model_config = ConfigDict(frozen=True)

    activity_id: str = Field(description="唯一标识，ULID 格式")
    task_id: str = Field(description="关联的 Task ID")
    activity_type: ActivityType = Field(description="活动类型")
    description: str = Field(default="", description="可读描述")
    changeset: dict[str, dict[str, Any]] = Field(
        default_factory=dict,
        description="字段 -> {from, to}",
    )
    actor: str | None = Field(default=None, description="操作者，系统/API 操作时为空")
    created_at: datetime = Field(description="创建时间")

    def old_value(self, field: str) -> Any:
        return self.changeset.get(field, {}).get("from")

    def new_value(self, field: str) -> Any:
        return self.changeset.get(field, {}).get("to")
