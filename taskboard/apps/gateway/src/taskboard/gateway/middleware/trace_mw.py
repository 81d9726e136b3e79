"""TraceMiddleware -- 为单个任务的操作绑定 trace_id

/api/tasks/{task_id}[/...] 路径上的日志都带 trace_id=trace-{task_id}，
便于串起同一任务的流转、归档、恢复等操作。
"""

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

_ULID_LENGTH = 26


def extract_task_id(path: str) -> str | None:
    """从 /api/tasks/{task_id}... 中取出 task_id"""
    parts = path.strip("/").split("/")
    for i, part in enumerate(parts[:-1]):
        if part == "tasks" and len(parts[i + 1]) == _ULID_LENGTH:
            return parts[i + 1]
    return None


class TraceMiddleware(BaseHTTPMiddleware):
    """任务级追踪中间件"""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        task_id = extract_task_id(request.url.path)
        if task_id:
            structlog.contextvars.bind_contextvars(trace_id=f"trace-{task_id}")

        return await call_next(request)
