"""统计路由 -- GET /api/stats

活跃任务总数及按负责方 / 状态的计数，所有枚举值都有条目。
"""

from fastapi import APIRouter, Depends

from ..deps import get_task_service
from ..services.task_service import TaskService

router = APIRouter()


@router.get("/api/stats")
async def get_stats(service: TaskService = Depends(get_task_service)):
    stats = await service.stats()
    return {
        "total": stats.total,
        "byAssignee": stats.by_assignee,
        "byStatus": stats.by_status,
    }
