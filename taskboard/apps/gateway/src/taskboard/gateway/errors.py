"""异常 -> JSON 错误信封

{"error": {"code": ..., "message": ...[, "fields": {...}]}}
"""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from starlette.responses import JSONResponse
from taskboard.core.exceptions import (
    QuickNoteNotFoundError,
    TaskNotFoundError,
    TaskValidationError,
)


def error_response(
    status_code: int,
    code: str,
    message: str,
    fields: dict[str, list[str]] | None = None,
) -> JSONResponse:
    error: dict = {"code": code, "message": message}
    if fields is not None:
        error["fields"] = fields
    return JSONResponse(status_code=status_code, content={"error": error})


async def _task_not_found(request: Request, exc: TaskNotFoundError) -> JSONResponse:
    return error_response(404, "TASK_NOT_FOUND", str(exc))


async def _quick_note_not_found(
    request: Request, exc: QuickNoteNotFoundError
) -> JSONResponse:
    return error_response(404, "QUICK_NOTE_NOT_FOUND", str(exc))


async def _validation_failed(request: Request, exc: TaskValidationError) -> JSONResponse:
    return error_response(422, "VALIDATION_FAILED", str(exc), fields=exc.errors)


async def _request_invalid(request: Request, exc: RequestValidationError) -> JSONResponse:
    """查询参数 / 请求体格式错误，统一为 VALIDATION_FAILED"""
    fields: dict[str, list[str]] = {}
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ()) if part not in ("query", "body")]
        fields.setdefault(".".join(loc) or "base", []).append(error["msg"])
    return error_response(422, "VALIDATION_FAILED", "Request validation failed", fields)


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(TaskNotFoundError, _task_not_found)
    app.add_exception_handler(QuickNoteNotFoundError, _quick_note_not_found)
    app.add_exception_handler(TaskValidationError, _validation_failed)
    app.add_exception_handler(RequestValidationError, _request_invalid)
