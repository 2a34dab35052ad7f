from datetime import date

from fastapi import APIRouter, Depends, HTTPException
from starlette.concurrency import run_in_threadpool

from ..db import HEX_RE
from ..deps import get_care_repository, get_current_user_id, get_schedule_store
from ..schemas.care import (
    CareSchedule,
    CompleteTaskRequest,
    CompleteTaskResponse,
    ScheduleCreateRequest,
    ScheduleUpdateRequest,
)
from ..services import scheduling
from ..services.care_store import CareRepository
from ..services.completion import CompletionProcessor
from ..services.schedule_store import ScheduleStore

app = APIRouter()


def _check_id(id_hex: str) -> str:
    if not HEX_RE.match(id_hex or ""):
        raise HTTPException(status_code=400, detail="Invalid id")
    return id_hex.lower()


@app.get("/schedules", response_model=list[CareSchedule])
async def list_schedules(
    user_id: str = Depends(get_current_user_id),
    store: ScheduleStore = Depends(get_schedule_store),
) -> list[CareSchedule]:
    return await store.refresh_schedules(user_id)


@app.get("/schedules/due", response_model=list[CareSchedule])
async def list_due_schedules(
    user_id: str = Depends(get_current_user_id),
    repo: CareRepository = Depends(get_care_repository),
) -> list[CareSchedule]:
    return await run_in_threadpool(repo.list_due_schedules, user_id, date.today())


@app.post("/schedules", response_model=CareSchedule)
async def create_schedule(
    payload: ScheduleCreateRequest,
    user_id: str = Depends(get_current_user_id),
    repo: CareRepository = Depends(get_care_repository),
) -> CareSchedule:
    return await scheduling.create_schedule(
        repo,
        user_id,
        payload.plant_id,
        payload.care_type,
        payload.frequency_days,
        payload.next_due_date,
    )


@app.put("/schedules/{id_hex}", response_model=CareSchedule)
async def update_schedule(
    id_hex: str,
    payload: ScheduleUpdateRequest,
    user_id: str = Depends(get_current_user_id),
    repo: CareRepository = Depends(get_care_repository),
) -> CareSchedule:
    return await scheduling.update_schedule(
        repo, user_id, _check_id(id_hex), payload.model_dump(exclude_unset=True)
    )


@app.delete("/schedules/{id_hex}")
async def delete_schedule(
    id_hex: str,
    user_id: str = Depends(get_current_user_id),
    repo: CareRepository = Depends(get_care_repository),
):
    await run_in_threadpool(repo.delete_schedule, user_id, _check_id(id_hex))
    return {"ok": True}


@app.post("/schedules/{id_hex}/complete", response_model=CompleteTaskResponse)
async def complete_schedule(
    id_hex: str,
    payload: CompleteTaskRequest,
    user_id: str = Depends(get_current_user_id),
    repo: CareRepository = Depends(get_care_repository),
    store: ScheduleStore = Depends(get_schedule_store),
) -> CompleteTaskResponse:
    schedule_id = _check_id(id_hex)
    await store.refresh_schedules(user_id)
    processor = CompletionProcessor(store, repo)
    result = await processor.complete_task(schedule_id, payload.occurrence_date, payload.notes)
    return CompleteTaskResponse(schedule=result.schedule, log=result.log)
