"""QuickNote Domain Model

随手记：只有标题和内容，没有工作流。
"""

from datetime import datetime, timedelta
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field, field_validator

from .validators import reject_blank

QUICK_NOTE_TITLE_MAX: int = 255
QUICK_NOTE_CONTENT_MAX: int = 10_000


class NoteAge(StrEnum):
    """按最后更新时间划分的新旧程度"""

    FRESH = "fresh"
    RECENT = "recent"
    WEEK_OLD = "week_old"
    OLD = "old"


class QuickNote(BaseModel):
    """QuickNote 数据模型"""

    note_id: str = Field(description="唯一标识，ULID 格式")
    title: str = Field(description="标题")
    content: str | None = Field(default=None, description="内容")
    owner: str | None = Field(default=None, description="创建者")
    created_at: datetime = Field(description="创建时间")
    updated_at: datetime = Field(description="更新时间")

    @property
    def edited(self) -> bool:
        return self.updated_at > self.created_at

    def preview(self, length: int = 100) -> str:
        """卡片展示用的截断内容"""
        if not self.content:
            return ""
        if len(self.content) > length:
            return self.content[:length] + "..."
        return self.content

    def age_category(self, now: datetime) -> NoteAge:
        age = now - self.updated_at
        if age < timedelta(days=1):
            return NoteAge.FRESH
        if age < timedelta(days=3):
            return NoteAge.RECENT
        if age < timedelta(days=7):
            return NoteAge.WEEK_OLD
        return NoteAge.OLD


class QuickNoteCreate(BaseModel):
    """创建随手记的输入"""

    title: str | None = Field(
        default=None,
        max_length=QUICK_NOTE_TITLE_MAX,
        validate_default=True,
    )
    content: str | None = Field(default=None, max_length=QUICK_NOTE_CONTENT_MAX)

    @field_validator("title", mode="before")
    @classmethod
    def _title_required(cls, value: Any) -> Any:
        return reject_blank(value)


class QuickNoteUpdate(BaseModel):
    """部分更新随手记"""

    title: str | None = Field(default=None, max_length=QUICK_NOTE_TITLE_MAX)
    content: str | None = Field(default=None, max_length=QUICK_NOTE_CONTENT_MAX)

    @field_validator("title", mode="before")
    @classmethod
    def _title_required(cls, value: Any) -> Any:
        return reject_blank(value)

    def provided(self) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True)
