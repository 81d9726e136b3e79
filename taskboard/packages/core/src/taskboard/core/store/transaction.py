"""任务写入 + 活动记录原子事务封装

字段写入与活动记录在同一 SQLite 事务内提交，失败时一并回滚。
"""

from collections.abc import Mapping
from typing import Any

import aiosqlite

from ..models.activity import TaskActivity
from ..models.task import Task
from .activity_store import SqliteActivityStore
from .task_store import SqliteTaskStore


async def create_task_with_activity(
    conn: aiosqlite.Connection,
    task_store: SqliteTaskStore,
    activity_store: SqliteActivityStore,
    task: Task,
    activity: TaskActivity,
) -> None:
    """在同一事务内创建任务并写入 created 活动"""
    try:
        await task_store.create_task(task)
        await activity_store.append_activity(activity)
        await conn.commit()
    except Exception:
        await conn.rollback()
        raise


async def update_task_with_activity(
    conn: aiosqlite.Connection,
    task_store: SqliteTaskStore,
    activity_store: SqliteActivityStore,
    task_id: str,
    columns: Mapping[str, Any],
    activity: TaskActivity | None = None,
) -> None:
    """在同一事务内原子提交列更新和活动记录

    Args:
        conn: 数据库连接（需在同一连接上操作以保证事务性）
        task_store: TaskStore 实例
        activity_store: ActivityStore 实例
        task_id: 任务 ID
        columns: 要写入的列 -> 值
        activity: 要追加的活动；为 None 时只写列（不记录活动）

    Raises:
        Exception: 如果事务提交失败，自动回滚
    """
    try:
        await task_store.update_columns(task_id, columns)
        if activity is not None:
            await activity_store.append_activity(activity)
        await conn.commit()
    except Exception:
        await conn.rollback()
        raise


async def append_activity_only(
    conn: aiosqlite.Connection,
    activity_store: SqliteActivityStore,
    activity: TaskActivity,
) -> None:
    """仅写入活动记录（不改变任务）"""
    try:
        await activity_store.append_activity(activity)
        await conn.commit()
    except Exception:
        await conn.rollback()
        raise
