from datetime import date

from fastapi import APIRouter, Depends, Query

from ..config import Settings
from ..deps import get_app_settings, get_current_user_id, get_schedule_store
from ..helpers import occurrences as occ
from ..schemas.calendar import CalendarOccurrence, CalendarResponse
from ..services.schedule_store import ScheduleStore

app = APIRouter()


@app.get("/calendar", response_model=CalendarResponse)
async def calendar_window(
    today: date | None = Query(default=None, description="Reference day; defaults to the server's date"),
    horizon_months: int | None = Query(default=None, ge=1, le=24),
    user_id: str = Depends(get_current_user_id),
    store: ScheduleStore = Depends(get_schedule_store),
    settings: Settings = Depends(get_app_settings),
) -> CalendarResponse:
    day = today or date.today()
    months = horizon_months or settings.calendar_horizon_months
    schedules = await store.refresh_schedules(user_id)
    items = occ.project_occurrences(
        schedules,
        day,
        horizon_months=months,
        max_events_per_schedule=settings.calendar_max_events_per_schedule,
    )
    return CalendarResponse(
        today=day,
        horizon_end=occ.horizon_end_for(day, months),
        occurrences=items,
        due_today=occ.due_today(items, day),
        upcoming=occ.upcoming(items, day),
        overdue=occ.overdue(items, day),
    )


@app.get("/calendar/{day}", response_model=list[CalendarOccurrence])
async def calendar_day(
    day: date,
    today: date | None = Query(default=None),
    user_id: str = Depends(get_current_user_id),
    store: ScheduleStore = Depends(get_schedule_store),
    settings: Settings = Depends(get_app_settings),
) -> list[CalendarOccurrence]:
    schedules = await store.refresh_schedules(user_id)
    items = occ.project_occurrences(
        schedules,
        today or date.today(),
        horizon_months=settings.calendar_horizon_months,
        max_events_per_schedule=settings.calendar_max_events_per_schedule,
    )
    return occ.occurrences_on(items, day)
