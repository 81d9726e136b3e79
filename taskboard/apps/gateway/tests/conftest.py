"""apps/gateway 测试配置 -- 可控时钟 + Store + httpx AsyncClient"""

import os
from collections.abc import AsyncGenerator
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient


class FakeClock:
    """可手动拨动的时钟"""

    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2026, 3, 10, 9, 0, tzinfo=UTC))


@pytest_asyncio.fixture
async def store_group(tmp_path: Path):
    from taskboard.core.store import create_store_group

    group = await create_store_group(str(tmp_path / "sqlite" / "test.db"))
    yield group
    await group.conn.close()


@pytest_asyncio.fixture
async def task_service(store_group, clock):
    from taskboard.gateway.services.task_service import TaskService

    return TaskService(store_group, clock=clock)


@pytest_asyncio.fixture
async def app(tmp_path: Path, store_group, clock):
    """创建测试用 FastAPI app，手动初始化 lifespan 状态"""
    os.environ["TASKBOARD_DB_PATH"] = str(tmp_path / "sqlite" / "test.db")
    os.environ["LOGFIRE_SEND_TO_LOGFIRE"] = "false"

    from taskboard.gateway.main import create_app

    application = create_app()
    application.state.store_group = store_group
    application.state.clock = clock
    yield application

    for key in ["TASKBOARD_DB_PATH", "LOGFIRE_SEND_TO_LOGFIRE"]:
        os.environ.pop(key, None)


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """提供 httpx AsyncClient 用于测试"""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
