"""依赖注入模块 -- 通过 FastAPI Depends 注入 Store / Service 实例

Store 实例通过 app.state 管理，在 lifespan 中初始化/清理。
app.state.clock 可选，测试中用于固定当前时间。
"""

from fastapi import Depends, Header, Request
from taskboard.core.store import StoreGroup
from taskboard.core.timestamps import utc_now

from .services.quick_note_service import QuickNoteService
from .services.task_service import TaskService


def get_store_group(request: Request) -> StoreGroup:
    """从 app.state 获取 StoreGroup 实例"""
    return request.app.state.store_group


def get_clock(request: Request):
    return getattr(request.app.state, "clock", None) or utc_now


def get_task_service(
    store_group: StoreGroup = Depends(get_store_group),
    clock=Depends(get_clock),
) -> TaskService:
    return TaskService(store_group, clock=clock)


def get_quick_note_service(
    store_group: StoreGroup = Depends(get_store_group),
    clock=Depends(get_clock),
) -> QuickNoteService:
    return QuickNoteService(store_group, clock=clock)


def get_actor(x_actor: str | None = Header(default=None)) -> str | None:
    """操作者来自可选的 X-Actor 请求头，空值视为系统操作"""
    if x_actor is None or not x_actor.strip():
        return None
    return x_actor.strip()
