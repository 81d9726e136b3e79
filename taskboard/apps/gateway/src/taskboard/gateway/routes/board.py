"""看板路由 -- GET /api/board

活跃任务按状态链顺序分列（列内按优先级），附最近的随手记。
"""

from fastapi import APIRouter, Depends

from ..deps import get_clock, get_task_service
from ..services.task_service import TaskService
from .quick_notes import quick_note_data
from .tasks import task_data

router = APIRouter()


@router.get("/api/board")
async def get_board(
    service: TaskService = Depends(get_task_service),
    clock=Depends(get_clock),
):
    board = await service.board()
    now = clock()
    return {
        "columns": [
            {
                "status": column.status.value,
                "count": len(column.tasks),
                "tasks": [task_data(t) for t in column.tasks],
            }
            for column in board.columns
        ],
        "quick_notes": [quick_note_data(n, now) for n in board.quick_notes],
    }
