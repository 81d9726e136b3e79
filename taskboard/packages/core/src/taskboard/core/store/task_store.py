"""TaskStore SQLite 实现

只负责行 <-> 模型的转换和 SQL 执行；校验、活动记录由上层负责。
写方法不自动提交事务，需由调用方管理事务。
"""

from collections.abc import Mapping
from datetime import datetime
from enum import Enum
from typing import Any

import aiosqlite

from ..models.enums import ArchiveMode
from ..models.task import Task
from ..query import TaskQuery
from ..timestamps import format_ts, parse_ts

_COLUMNS: tuple[str, ...] = (
    "task_id",
    "created_at",
    "updated_at",
    "title",
    "description",
    "assignee",
    "status",
    "priority",
    "archived",
    "last_worked_on",
    "owner",
)
_SELECT = f"SELECT {', '.join(_COLUMNS)} FROM tasks"

# update_columns 允许直接写入的列
_WRITABLE: frozenset[str] = frozenset(_COLUMNS) - {"task_id", "created_at"}

# count_by 允许分组的列
_GROUPABLE: frozenset[str] = frozenset({"status", "assignee", "priority"})


def _to_db(value: Any) -> Any:
    """模型值 -> 列值"""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return format_ts(value)
    if isinstance(value, bool):
        return int(value)
    return value


class SqliteTaskStore:
    """TaskStore 的 SQLite 实现"""

    def __init__(self, conn: aiosqlite.Connection) -> None:
        self._conn = conn

    async def create_task(self, task: Task) -> None:
        """创建任务记录"""
        placeholders = ", ".join("?" for _ in _COLUMNS)
        await self._conn.execute(
            f"INSERT INTO tasks ({', '.join(_COLUMNS)}) VALUES ({placeholders})",
            tuple(_to_db(getattr(task, column)) for column in _COLUMNS),
        )

    async def get_task(
        self,
        task_id: str,
        archive_mode: ArchiveMode = ArchiveMode.ACTIVE,
    ) -> Task | None:
        """根据 task_id 查询任务，归档可见性同样生效"""
        sql = f"{_SELECT} WHERE task_id = ?"
        if archive_mode == ArchiveMode.ACTIVE:
            sql += " AND archived = 0"
        elif archive_mode == ArchiveMode.ARCHIVED:
            sql += " AND archived = 1"
        cursor = await self._conn.execute(sql, (task_id,))
        row = await cursor.fetchone()
        if row is None:
            return None
        return self._row_to_task(row)

    async def list_tasks(self, query: TaskQuery | None = None) -> list[Task]:
        """按 TaskQuery 查询任务列表（默认：活跃任务，最近更新在前）"""
        where, order, params = (query or TaskQuery()).to_sql()
        cursor = await self._conn.execute(f"{_SELECT} {where} {order}", params)
        rows = await cursor.fetchall()
        return [self._row_to_task(row) for row in rows]

    async def count_tasks(self, query: TaskQuery | None = None) -> int:
        where, _, params = (query or TaskQuery()).to_sql()
        cursor = await self._conn.execute(
            f"SELECT COUNT(*) FROM tasks {where}",
            params[: where.count("?")],
        )
        row = await cursor.fetchone()
        return row[0] if row else 0

    async def count_by(
        self,
        column: str,
        query: TaskQuery | None = None,
    ) -> dict[str, int]:
        """按列分组计数，只包含出现过的值"""
        if column not in _GROUPABLE:
            raise ValueError(f"不支持按 {column} 分组")
        where, _, params = (query or TaskQuery()).to_sql()
        cursor = await self._conn.execute(
            f"SELECT {column}, COUNT(*) FROM tasks {where} GROUP BY {column}",
            params[: where.count("?")],
        )
        rows = await cursor.fetchall()
        return {row[0]: row[1] for row in rows}

    async def update_columns(self, task_id: str, columns: Mapping[str, Any]) -> None:
        """直接写入列值，不做校验、不刷新 updated_at"""
        if not columns:
            return
        unknown = set(columns) - _WRITABLE
        if unknown:
            raise ValueError(f"不可写入的列: {sorted(unknown)}")
        assignments = ", ".join(f"{column} = ?" for column in columns)
        await self._conn.execute(
            f"UPDATE tasks SET {assignments} WHERE task_id = ?",
            (*(_to_db(value) for value in columns.values()), task_id),
        )

    async def set_archived(self, task_id: str, archived: bool) -> None:
        """只翻转归档标记，其余列（含 updated_at）保持不变"""
        await self._conn.execute(
            "UPDATE tasks SET archived = ? WHERE task_id = ?",
            (int(archived), task_id),
        )

    async def delete_task(self, task_id: str) -> bool:
        """物理删除任务，活动记录随外键级联删除

        Returns:
            True 如果删除了记录
        """
        cursor = await self._conn.execute(
            "DELETE FROM tasks WHERE task_id = ?",
            (task_id,),
        )
        return cursor.rowcount > 0

    @staticmethod
    def _row_to_task(row: aiosqlite.Row) -> Task:
        """将数据库行转换为 Task 模型"""
        data = dict(zip(_COLUMNS, row, strict=True))
        return Task(
            task_id=data["task_id"],
            created_at=parse_ts(data["created_at"]),
            updated_at=parse_ts(data["updated_at"]),
            title=data["title"],
            description=data["description"],
            assignee=data["assignee"],
            status=data["status"],
            priority=data["priority"],
            archived=bool(data["archived"]),
            last_worked_on=parse_ts(data["last_worked_on"]),
            owner=data["owner"],
        )
