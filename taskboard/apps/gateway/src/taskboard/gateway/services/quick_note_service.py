"""QuickNoteService -- 随手记的增删改查"""

from collections.abc import Callable, Mapping
from datetime import datetime
from typing import Any

import structlog
from pydantic import ValidationError
from taskboard.core.exceptions import QuickNoteNotFoundError, TaskValidationError
from taskboard.core.models import QuickNote, QuickNoteCreate, QuickNoteUpdate
from taskboard.core.store import StoreGroup
from taskboard.core.timestamps import ensure_utc, utc_now
from ulid import ULID

log = structlog.get_logger()


class QuickNoteService:
    """随手记业务服务"""

    def __init__(
        self,
        store_group: StoreGroup,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._stores = store_group
        self._notes = store_group.quick_note_store
        self._clock = clock

    async def _require(self, note_id: str) -> QuickNote:
        note = await self._notes.get_note(note_id)
        if note is None:
            raise QuickNoteNotFoundError(note_id)
        return note

    async def get_note(self, note_id: str) -> QuickNote:
        return await self._require(note_id)

    async def list_notes(
        self,
        search: str | None = None,
        limit: int | None = None,
    ) -> list[QuickNote]:
        """search 非空时按标题 / 内容模糊匹配，否则按最近更新列出"""
        if search and search.strip():
            return await self._notes.search_notes(search.strip())
        return await self._notes.list_notes(limit)

    async def create_note(
        self,
        fields: Mapping[str, Any],
        owner: str | None = None,
    ) -> QuickNote:
        try:
            data = QuickNoteCreate.model_validate(dict(fields))
        except ValidationError as e:
            raise TaskValidationError.from_pydantic(e) from e

        now = ensure_utc(self._clock())
        note = QuickNote(
            note_id=str(ULID()),
            title=data.title,
            content=data.content,
            owner=owner,
            created_at=now,
            updated_at=now,
        )
        try:
            await self._notes.create_note(note)
            await self._stores.conn.commit()
        except Exception:
            await self._stores.conn.rollback()
            raise
        log.info("quick_note_created", note_id=note.note_id, owner=owner)
        return note

    async def update_note(self, note_id: str, fields: Mapping[str, Any]) -> QuickNote:
        try:
            data = QuickNoteUpdate.model_validate(dict(fields))
        except ValidationError as e:
            raise TaskValidationError.from_pydantic(e) from e

        note = await self._require(note_id)
        values = {
            field: value
            for field, value in data.provided().items()
            if getattr(note, field) != value
        }
        if not values:
            return note

        values["updated_at"] = ensure_utc(self._clock())
        await self._notes.update_note(note_id, values)
        await self._stores.conn.commit()
        log.info("quick_note_updated", note_id=note_id, fields=sorted(values))
        return await self._require(note_id)

    async def delete_note(self, note_id: str) -> None:
        await self._require(note_id)
        await self._notes.delete_note(note_id)
        await self._stores.conn.commit()
        log.info("quick_note_deleted", note_id=note_id)
