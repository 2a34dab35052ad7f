import asyncio
from datetime import date

from fastapi import APIRouter, Depends
from starlette.concurrency import run_in_threadpool

from ..config import Settings
from ..deps import get_app_settings, get_care_repository, get_current_user_id
from ..schemas.calendar import DashboardResponse, DashboardStats
from ..services.care_store import CareRepository

app = APIRouter()

HEALTHY_SCORE = 80


@app.get("/dashboard", response_model=DashboardResponse)
async def dashboard(
    user_id: str = Depends(get_current_user_id),
    repo: CareRepository = Depends(get_care_repository),
    settings: Settings = Depends(get_app_settings),
) -> DashboardResponse:
    plants, due, logs = await asyncio.gather(
        run_in_threadpool(repo.list_plants, user_id),
        run_in_threadpool(repo.list_due_schedules, user_id, date.today()),
        run_in_threadpool(repo.list_logs, user_id, settings.recent_logs_limit),
    )
    healthy = sum(1 for p in plants if p.health_score >= HEALTHY_SCORE)
    return DashboardResponse(
        plants=plants,
        care_schedules=due,
        recent_logs=logs,
        stats=DashboardStats(
            total_plants=len(plants),
            due_today=len(due),
            healthy_plants=healthy,
            need_attention=len(plants) - healthy,
        ),
    )
