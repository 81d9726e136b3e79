"""SQLite 数据库初始化

PRAGMA 配置 + 三张表 DDL + 索引创建。
使用 aiosqlite 异步操作。
"""

import aiosqlite

from ..models.enums import Assignee, Priority, TaskStatus


def _one_of(column: str, enum_cls: type) -> str:
    """枚举列的 CHECK 约束，非法值在写入时即被拒绝"""
    values = ", ".join(f"'{member.value}'" for member in enum_cls)
    return f"CHECK ({column} IN ({values}))"


# tasks 表 DDL（时间列统一存 UTC 定长 ISO-8601 字符串）
_TASKS_DDL = f"""
CREATE TABLE IF NOT EXISTS tasks (
    task_id         TEXT PRIMARY KEY,
    created_at      TEXT NOT NULL,
    updated_at      TEXT NOT NULL,
    title           TEXT NOT NULL DEFAULT '',
    description     TEXT,
    assignee        TEXT NOT NULL {_one_of("assignee", Assignee)},
    status          TEXT NOT NULL DEFAULT 'backlog' {_one_of("status", TaskStatus)},
    priority        TEXT NOT NULL DEFAULT 'medium' {_one_of("priority", Priority)},
    archived        INTEGER NOT NULL DEFAULT 0,
    last_worked_on  TEXT,
    owner           TEXT
);
"""

_TASKS_INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_tasks_archived ON tasks(archived);",
    "CREATE INDEX IF NOT EXISTS idx_tasks_status ON tasks(status);",
    "CREATE INDEX IF NOT EXISTS idx_tasks_assignee ON tasks(assignee);",
    "CREATE INDEX IF NOT EXISTS idx_tasks_last_worked_on ON tasks(last_worked_on);",
    "CREATE INDEX IF NOT EXISTS idx_tasks_updated_at ON tasks(updated_at DESC);",
]

# task_activities 表 DDL
_ACTIVITIES_DDL = """
CREATE TABLE IF NOT EXISTS task_activities (
    activity_id    TEXT PRIMARY KEY,
    task_id        TEXT NOT NULL,
    activity_type  TEXT NOT NULL,
    description    TEXT NOT NULL DEFAULT '',
    changeset      TEXT NOT NULL DEFAULT '{}',
    actor          TEXT,
    created_at     TEXT NOT NULL,

    FOREIGN KEY (task_id) REFERENCES tasks(task_id) ON DELETE CASCADE
);
"""

_ACTIVITIES_INDEXES = [
    # 任务内按时间倒序读取最近活动
    "CREATE INDEX IF NOT EXISTS idx_activities_task_ts ON task_activities(task_id, created_at);",
    "CREATE INDEX IF NOT EXISTS idx_activities_type ON task_activities(activity_type);",
]

# quick_notes 表 DDL
_QUICK_NOTES_DDL = """
CREATE TABLE IF NOT EXISTS quick_notes (
    note_id     TEXT PRIMARY KEY,
    title       TEXT NOT NULL,
    content     TEXT,
    owner       TEXT,
    created_at  TEXT NOT NULL,
    updated_at  TEXT NOT NULL
);
"""

_QUICK_NOTES_INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_quick_notes_updated_at ON quick_notes(updated_at DESC);",
]


async def init_db(conn: aiosqlite.Connection) -> None:
    """初始化数据库：设置 PRAGMA + 创建表 + 创建索引

    Args:
        conn: aiosqlite 数据库连接
    """
    await conn.execute("PRAGMA journal_mode = WAL;")
    # ON DELETE CASCADE 依赖外键开关
    await conn.execute("PRAGMA foreign_keys = ON;")
    await conn.execute("PRAGMA busy_timeout = 5000;")

    await conn.execute(_TASKS_DDL)
    await conn.execute(_ACTIVITIES_DDL)
    await conn.execute(_QUICK_NOTES_DDL)

    for idx_sql in _TASKS_INDEXES + _ACTIVITIES_INDEXES + _QUICK_NOTES_INDEXES:
        await conn.execute(idx_sql)

    await conn.commit()


async def verify_wal_mode(conn: aiosqlite.Connection) -> bool:
    """验证 WAL 模式是否生效

    Returns:
        True 如果 WAL 模式已启用
    """
    cursor = await conn.execute("PRAGMA journal_mode;")
    row = await cursor.fetchone()
    return row is not None and row[0].lower() == "wal"
