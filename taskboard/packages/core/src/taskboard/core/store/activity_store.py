"""ActivityStore SQLite 实现

活动表 append-only：只允许插入，不允许更新或删除。
同一时间戳内按写入顺序（rowid）排序，最新的在前。
"""

import json

import aiosqlite

from ..models.activity import TaskActivity
from ..models.enums import ActivityType
from ..timestamps import format_ts, parse_ts

_COLUMNS: tuple[str, ...] = (
    "activity_id",
    "task_id",
    "activity_type",
    "description",
    "changeset",
    "actor",
    "created_at",
)
_SELECT = f"SELECT {', '.join(_COLUMNS)} FROM task_activities"
_NEWEST_FIRST = "ORDER BY created_at DESC, rowid DESC"


class SqliteActivityStore:
    """ActivityStore 的 SQLite 实现"""

    def __init__(self, conn: aiosqlite.Connection) -> None:
        self._conn = conn

    async def append_activity(self, activity: TaskActivity) -> None:
        """追加活动记录（append-only）

        注意：此方法不自动提交事务，需由调用方管理事务。
        """
        await self._conn.execute(
            f"INSERT INTO task_activities ({', '.join(_COLUMNS)}) "
            "VALUES (?, ?, ?, ?, ?, ?, ?)",
            (
                activity.activity_id,
                activity.task_id,
                activity.activity_type.value,
                activity.description,
                json.dumps(activity.changeset, ensure_ascii=False),
                activity.actor,
                format_ts(activity.created_at),
            ),
        )

    async def recent_activities(
        self,
        task_id: str,
        limit: int | None = None,
    ) -> list[TaskActivity]:
        """查询指定任务的活动记录，最新的在前"""
        sql = f"{_SELECT} WHERE task_id = ? {_NEWEST_FIRST}"
        params: tuple = (task_id,)
        if limit is not None:
            sql += " LIMIT ?"
            params = (task_id, limit)
        cursor = await self._conn.execute(sql, params)
        rows = await cursor.fetchall()
        return [self._row_to_activity(row) for row in rows]

    async def activities_of_type(
        self,
        task_id: str,
        activity_type: ActivityType,
    ) -> list[TaskActivity]:
        cursor = await self._conn.execute(
            f"{_SELECT} WHERE task_id = ? AND activity_type = ? {_NEWEST_FIRST}",
            (task_id, activity_type.value),
        )
        rows = await cursor.fetchall()
        return [self._row_to_activity(row) for row in rows]

    async def count_for_task(self, task_id: str) -> int:
        cursor = await self._conn.execute(
            "SELECT COUNT(*) FROM task_activities WHERE task_id = ?",
            (task_id,),
        )
        row = await cursor.fetchone()
        return row[0] if row else 0

    @staticmethod
    def _row_to_activity(row: aiosqlite.Row) -> TaskActivity:
        """将数据库行转换为 TaskActivity 模型"""
        data = dict(zip(_COLUMNS, row, strict=True))
        return TaskActivity(
            activity_id=data["activity_id"],
            task_id=data["task_id"],
            activity_type=ActivityType(data["activity_type"]),
            description=data["description"],
            changeset=json.loads(data["changeset"]) if data["changeset"] else {},
            actor=data["actor"],
            created_at=parse_ts(data["created_at"]),
        )
