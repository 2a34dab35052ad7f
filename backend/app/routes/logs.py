from fastapi import APIRouter, Depends, Query

from ..config import Settings
from ..deps import get_app_settings, get_current_user_id, get_schedule_store
from ..schemas.care import CareLog
from ..services.schedule_store import ScheduleStore

app = APIRouter()


@app.get("/logs", response_model=list[CareLog])
async def list_logs(
    limit: int | None = Query(default=None, ge=1, le=500, description="Most recent logs to return"),
    user_id: str = Depends(get_current_user_id),
    store: ScheduleStore = Depends(get_schedule_store),
    settings: Settings = Depends(get_app_settings),
) -> list[CareLog]:
    return await store.refresh_logs(user_id, limit or settings.recent_logs_limit)
