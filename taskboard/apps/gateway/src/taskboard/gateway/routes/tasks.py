"""任务路由

GET    /api/tasks                           列表（过滤 + 排序 + 归档模式）
POST   /api/tasks                           创建
GET    /api/tasks/{task_id}                 详情
PATCH  /api/tasks/{task_id}                 受追踪的部分更新
DELETE /api/tasks/{task_id}                 归档（软删除）
POST   /api/tasks/{task_id}/restore         从归档恢复
POST   /api/tasks/{task_id}/advance         向右移动一格
POST   /api/tasks/{task_id}/regress         向左移动一格
POST   /api/tasks/{task_id}/touch_last_worked
DELETE /api/tasks/{task_id}/purge           物理删除
GET    /api/tasks/{task_id}/activities      最近活动
"""

from typing import Any

from fastapi import APIRouter, Body, Depends, Query
from starlette.responses import JSONResponse, Response
from taskboard.core.config import ACTIVITY_LIMIT, DORMANT_DAYS
from taskboard.core.models import (
    ArchiveMode,
    Assignee,
    Priority,
    Task,
    TaskActivity,
    TaskStatus,
)
from taskboard.core.query import TaskOrder, TaskQuery

from ..deps import get_actor, get_clock, get_task_service
from ..services.task_service import TaskService, TransitionResult

router = APIRouter()

# PATCH 请求体中转交给 backdate 的字段
_BACKDATE_FIELD = "last_worked_on"


def task_data(task: Task) -> dict[str, Any]:
    """任务序列化（附带相邻状态，供前端渲染左右箭头）"""
    data = task.model_dump(mode="json")
    data["next_status"] = task.next_status.value if task.next_status else None
    data["previous_status"] = task.previous_status.value if task.previous_status else None
    return data


def activity_data(activity: TaskActivity) -> dict[str, Any]:
    return activity.model_dump(mode="json")


def _transition_data(result: TransitionResult) -> dict[str, Any]:
    return {"task": task_data(result.task), "moved": result.moved}


@router.get("/api/tasks")
async def list_tasks(
    assignee: Assignee | None = Query(default=None, description="按负责方筛选"),
    status: TaskStatus | None = Query(default=None, description="按状态筛选"),
    priority: Priority | None = Query(default=None, description="按优先级筛选"),
    archive_mode: ArchiveMode = Query(default=ArchiveMode.ACTIVE),
    order: TaskOrder = Query(default=TaskOrder.RECENT),
    dormant: bool = Query(default=False, description="只看休眠任务"),
    limit: int | None = Query(default=None, ge=1),
    service: TaskService = Depends(get_task_service),
    clock=Depends(get_clock),
):
    """查询任务列表，所有条件以 AND 组合"""
    query = TaskQuery().in_mode(archive_mode).ordered(order)
    if assignee is not None:
        query = query.for_assignee(assignee)
    if status is not None:
        query = query.with_status(status)
    if priority is not None:
        query = query.with_priority(priority)
    if dormant:
        query = query.dormant(clock(), DORMANT_DAYS)
    if limit is not None:
        query = query.limit(limit)

    tasks = await service.list_tasks(query)
    return {"tasks": [task_data(t) for t in tasks]}


@router.post("/api/tasks", status_code=201)
async def create_task(
    payload: dict[str, Any] = Body(...),
    service: TaskService = Depends(get_task_service),
    actor: str | None = Depends(get_actor),
):
    task = await service.create_task(payload, actor)
    return task_data(task)


@router.get("/api/tasks/{task_id}")
async def get_task(
    task_id: str,
    archive_mode: ArchiveMode = Query(default=ArchiveMode.ACTIVE),
    service: TaskService = Depends(get_task_service),
):
    task = await service.get_task(task_id, archive_mode)
    return task_data(task)


@router.patch("/api/tasks/{task_id}")
async def update_task(
    task_id: str,
    payload: dict[str, Any] = Body(...),
    service: TaskService = Depends(get_task_service),
    actor: str | None = Depends(get_actor),
):
    """部分更新；请求体中的 last_worked_on 走 backdate（显式 null 视为校验失败）

    backdate 的时间在任何写入之前校验，失败时其他字段也不会落库。
    """
    fields = dict(payload)
    backdating = _BACKDATE_FIELD in fields
    backdate_to = fields.pop(_BACKDATE_FIELD, None)
    if backdating:
        service.check_backdate(backdate_to)

    task = await service.update_task(task_id, fields, actor)
    if backdating:
        task = await service.backdate(task_id, backdate_to, actor)
    return task_data(task)


@router.delete("/api/tasks/{task_id}", status_code=204)
async def archive_task(
    task_id: str,
    service: TaskService = Depends(get_task_service),
    actor: str | None = Depends(get_actor),
):
    await service.archive_task(task_id, actor)
    return Response(status_code=204)


@router.post("/api/tasks/{task_id}/restore")
async def restore_task(
    task_id: str,
    service: TaskService = Depends(get_task_service),
    actor: str | None = Depends(get_actor),
):
    task = await service.restore_task(task_id, actor)
    return task_data(task)


@router.post("/api/tasks/{task_id}/advance")
async def advance_task(
    task_id: str,
    service: TaskService = Depends(get_task_service),
    actor: str | None = Depends(get_actor),
):
    """已在 done 时返回 200 + moved=false"""
    result = await service.advance(task_id, actor)
    return _transition_data(result)


@router.post("/api/tasks/{task_id}/regress")
async def regress_task(
    task_id: str,
    service: TaskService = Depends(get_task_service),
    actor: str | None = Depends(get_actor),
):
    result = await service.regress(task_id, actor)
    return _transition_data(result)


@router.post("/api/tasks/{task_id}/touch_last_worked")
async def touch_last_worked(
    task_id: str,
    service: TaskService = Depends(get_task_service),
):
    task = await service.touch_last_worked(task_id)
    return task_data(task)


@router.delete("/api/tasks/{task_id}/purge", status_code=204)
async def purge_task(
    task_id: str,
    service: TaskService = Depends(get_task_service),
    actor: str | None = Depends(get_actor),
):
    await service.purge_task(task_id, actor)
    return Response(status_code=204)


@router.get("/api/tasks/{task_id}/activities")
async def list_activities(
    task_id: str,
    limit: int = Query(default=ACTIVITY_LIMIT, ge=1),
    service: TaskService = Depends(get_task_service),
):
    activities = await service.recent_activities(task_id, limit)
    return JSONResponse(
        content={
            "task_id": task_id,
            "activities": [activity_data(a) for a in activities],
        }
    )
