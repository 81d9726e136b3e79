"""随手记路由

GET    /api/quick_notes              列表（q 参数模糊搜索）
POST   /api/quick_notes              创建
GET    /api/quick_notes/{note_id}    详情
PATCH  /api/quick_notes/{note_id}    部分更新
DELETE /api/quick_notes/{note_id}    删除
"""

from datetime import datetime
from typing import Any

from fastapi import APIRouter, Body, Depends, Query
from starlette.responses import Response
from taskboard.core.models import QuickNote

from ..deps import get_actor, get_clock, get_quick_note_service
from ..services.quick_note_service import QuickNoteService

router = APIRouter()


def quick_note_data(note: QuickNote, now: datetime) -> dict[str, Any]:
    data = note.model_dump(mode="json")
    data["preview"] = note.preview()
    data["edited"] = note.edited
    data["age"] = note.age_category(now).value
    return data


@router.get("/api/quick_notes")
async def list_quick_notes(
    q: str | None = Query(default=None, description="标题或内容关键字"),
    limit: int | None = Query(default=None, ge=1),
    service: QuickNoteService = Depends(get_quick_note_service),
    clock=Depends(get_clock),
):
    notes = await service.list_notes(search=q, limit=limit)
    now = clock()
    return {"quick_notes": [quick_note_data(n, now) for n in notes]}


@router.post("/api/quick_notes", status_code=201)
async def create_quick_note(
    payload: dict[str, Any] = Body(...),
    service: QuickNoteService = Depends(get_quick_note_service),
    actor: str | None = Depends(get_actor),
    clock=Depends(get_clock),
):
    note = await service.create_note(payload, owner=actor)
    return quick_note_data(note, clock())


@router.get("/api/quick_notes/{note_id}")
async def get_quick_note(
    note_id: str,
    service: QuickNoteService = Depends(get_quick_note_service),
    clock=Depends(get_clock),
):
    note = await service.get_note(note_id)
    return quick_note_data(note, clock())


@router.patch("/api/quick_notes/{note_id}")
async def update_quick_note(
    note_id: str,
    payload: dict[str, Any] = Body(...),
    service: QuickNoteService = Depends(get_quick_note_service),
    clock=Depends(get_clock),
):
    note = await service.update_note(note_id, payload)
    return quick_note_data(note, clock())


@router.delete("/api/quick_notes/{note_id}", status_code=204)
async def delete_quick_note(
    note_id: str,
    service: QuickNoteService = Depends(get_quick_note_service),
):
    await service.delete_note(note_id)
    return Response(status_code=204)
