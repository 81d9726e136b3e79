"""packages/core 测试配置 -- 核心层 fixture"""

from collections.abc import AsyncGenerator
from datetime import UTC, datetime
from pathlib import Path

import aiosqlite
import pytest
import pytest_asyncio

BASE_TIME = datetime(2026, 3, 1, 9, 0, tzinfo=UTC)


@pytest_asyncio.fixture
async def core_db_path(tmp_path: Path) -> Path:
    """核心层临时数据库路径"""
    return tmp_path / "core_test.db"


@pytest_asyncio.fixture
async def core_db(core_db_path: Path) -> AsyncGenerator[aiosqlite.Connection, None]:
    """核心层已初始化数据库连接"""
    from taskboard.core.store.sqlite_init import init_db

    conn = await aiosqlite.connect(str(core_db_path))
    await init_db(conn)
    yield conn
    await conn.close()


@pytest.fixture
def make_task():
    """Task 工厂：默认 sparky / backlog / medium，时间从 BASE_TIME 起"""
    from taskboard.core.models import Task

    counter = {"n": 0}

    def _make(**overrides):
        counter["n"] += 1
        n = counter["n"]
        data = {
            "task_id": f"01JTASK{n:019d}",
            "created_at": BASE_TIME,
            "updated_at": BASE_TIME,
            "title": f"任务 {n}",
            "assignee": "sparky",
        }
        data.update(overrides)
        return Task(**data)

    return _make
