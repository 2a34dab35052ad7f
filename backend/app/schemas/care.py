from datetime import date, datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, field_validator

from ..utils.date_time import parse_dt
from .plant import HexID


class CareType(str, Enum):
    WATER = "water"
    FERTILIZE = "fertilize"
    PRUNE = "prune"
    REPOT = "repot"
    MIST = "mist"
    ROTATE = "rotate"


class CareSchedule(BaseModel):
    id: HexID
    plant_id: HexID
    care_type: CareType
    frequency_days: int
    next_due_date: date
    is_active: bool = True
    # Joined from plants for display; not a column of care_schedules
    plant_name: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("frequency_days")
    @classmethod
    def _positive_frequency(cls, v: int) -> int:
        if v < 1:
            raise ValueError("frequency_days must be >= 1")
        return v


class CareLog(BaseModel):
    id: HexID
    plant_id: HexID
    care_type: CareType
    completed_at: datetime
    notes: Optional[str] = None
    plant_name: Optional[str] = None
    created_at: Optional[datetime] = None

    @field_validator("completed_at")
    @classmethod
    def _utc_completed_at(cls, v: datetime) -> datetime:
        return parse_dt(v)


# frequency_days is passed through unparsed; scheduling.validate_frequency
# rejects booleans, fractions and non-positive values with a 400 before any write.
class ScheduleCreateRequest(BaseModel):
    plant_id: HexID
    care_type: str
    frequency_days: Any
    next_due_date: date


class ScheduleUpdateRequest(BaseModel):
    care_type: Optional[str] = None
    frequency_days: Any = None
    next_due_date: Optional[date] = None
    is_active: Optional[bool] = None


class CompleteTaskRequest(BaseModel):
    occurrence_date: date
    notes: Optional[str] = None


class CompleteTaskResponse(BaseModel):
    schedule: CareSchedule
    log: CareLog
