import datetime as dt
from typing import List

from pydantic import BaseModel

from .care import CareLog, CareSchedule, CareType
from .plant import Plant


class CalendarOccurrence(BaseModel):
    id: str
    schedule_id: str
    plant_id: str
    plant_name: str
    care_type: CareType
    date: dt.date
    # Completion is tracked on the schedule, so projected occurrences are never completed
    completed: bool = False


class CalendarResponse(BaseModel):
    today: dt.date
    horizon_end: dt.date
    occurrences: List[CalendarOccurrence]
    due_today: List[CalendarOccurrence]
    upcoming: List[CalendarOccurrence]
    overdue: List[CalendarOccurrence]


class DashboardStats(BaseModel):
    total_plants: int
    due_today: int
    healthy_plants: int
    need_attention: int


class DashboardResponse(BaseModel):
    plants: List[Plant]
    care_schedules: List[CareSchedule]
    recent_logs: List[CareLog]
    stats: DashboardStats
