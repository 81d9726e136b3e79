"""QuickNoteStore SQLite 实现

写方法不自动提交事务，需由调用方管理事务。
"""

from collections.abc import Mapping
from datetime import datetime
from typing import Any

import aiosqlite

from ..models.quick_note import QuickNote
from ..timestamps import format_ts, parse_ts

_COLUMNS: tuple[str, ...] = (
    "note_id",
    "title",
    "content",
    "owner",
    "created_at",
    "updated_at",
)
_SELECT = f"SELECT {', '.join(_COLUMNS)} FROM quick_notes"
_NEWEST_FIRST = "ORDER BY updated_at DESC, rowid DESC"
_WRITABLE: frozenset[str] = frozenset({"title", "content", "updated_at"})


class SqliteQuickNoteStore:
    """QuickNoteStore 的 SQLite 实现"""

    def __init__(self, conn: aiosqlite.Connection) -> None:
        self._conn = conn

    async def create_note(self, note: QuickNote) -> None:
        await self._conn.execute(
            f"INSERT INTO quick_notes ({', '.join(_COLUMNS)}) VALUES (?, ?, ?, ?, ?, ?)",
            (
                note.note_id,
                note.title,
                note.content,
                note.owner,
                format_ts(note.created_at),
                format_ts(note.updated_at),
            ),
        )

    async def get_note(self, note_id: str) -> QuickNote | None:
        cursor = await self._conn.execute(
            f"{_SELECT} WHERE note_id = ?",
            (note_id,),
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return self._row_to_note(row)

    async def list_notes(self, limit: int | None = None) -> list[QuickNote]:
        """最近更新的在前"""
        sql = f"{_SELECT} {_NEWEST_FIRST}"
        params: tuple = ()
        if limit is not None:
            sql += " LIMIT ?"
            params = (limit,)
        cursor = await self._conn.execute(sql, params)
        rows = await cursor.fetchall()
        return [self._row_to_note(row) for row in rows]

    async def search_notes(self, term: str) -> list[QuickNote]:
        """标题或内容包含 term（不区分大小写）"""
        pattern = f"%{term}%"
        cursor = await self._conn.execute(
            f"{_SELECT} WHERE title LIKE ? OR content LIKE ? {_NEWEST_FIRST}",
            (pattern, pattern),
        )
        rows = await cursor.fetchall()
        return [self._row_to_note(row) for row in rows]

    async def update_note(self, note_id: str, values: Mapping[str, Any]) -> None:
        if not values:
            return
        unknown = set(values) - _WRITABLE
        if unknown:
            raise ValueError(f"不可写入的列: {sorted(unknown)}")
        assignments = ", ".join(f"{column} = ?" for column in values)
        params = [
            format_ts(value) if isinstance(value, datetime) else value
            for value in values.values()
        ]
        await self._conn.execute(
            f"UPDATE quick_notes SET {assignments} WHERE note_id = ?",
            (*params, note_id),
        )

    async def delete_note(self, note_id: str) -> bool:
        cursor = await self._conn.execute(
            "DELETE FROM quick_notes WHERE note_id = ?",
            (note_id,),
        )
        return cursor.rowcount > 0

    @staticmethod
    def _row_to_note(row: aiosqlite.Row) -> QuickNote:
        data = dict(zip(_COLUMNS, row, strict=True))
        return QuickNote(
            note_id=data["note_id"],
            title=data["title"],
            content=data["content"],
            owner=data["owner"],
            created_at=parse_ts(data["created_at"]),
            updated_at=parse_ts(data["updated_at"]),
        )
