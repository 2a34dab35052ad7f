"""
Validation and authoring of care schedules.
Input is checked here, before any write; ownership is left to the store.
"""
from __future__ import annotations

from datetime import date
from typing import Any, Dict, Optional

from starlette.concurrency import run_in_threadpool

from ..errors import ValidationError
from ..schemas.care import CareSchedule, CareType
from ..utils.date_time import parse_date
from .care_store import CareRepository
from .schedule_store import ScheduleStore


def validate_frequency(value: Any) -> int:
    # bool is an int subclass; True must not pass as one day
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError("Frequency must be a whole number of days")
    if value < 1:
        raise ValidationError("Frequency must be at least 1 day")
    return value


def validate_care_type(value: Any) -> CareType:
    try:
        return CareType(value)
    except ValueError:
        allowed = ", ".join(ct.value for ct in CareType)
        raise ValidationError(f"Unknown care type '{value}'. Expected one of: {allowed}")


def validate_due_date(value: Any) -> date:
    try:
        return parse_date(value)
    except (AttributeError, TypeError, ValueError):
        raise ValidationError("Due date must be a calendar date (YYYY-MM-DD)")


async def create_schedule(
    repository: CareRepository,
    user_id: str,
    plant_id: str,
    care_type: Any,
    frequency_days: Any,
    start_date: Any,
    *,
    store: Optional[ScheduleStore] = None,
) -> CareSchedule:
    """
    Create an active schedule whose first due date is start_date, verbatim.
    A past start_date is allowed and projects as overdue immediately.
    """
    ct = validate_care_type(care_type)
    freq = validate_frequency(frequency_days)
    start = validate_due_date(start_date)

    schedule = await run_in_threadpool(repository.create_schedule, user_id, plant_id, ct, freq, start, True)
    if store is not None:
        store.add_schedule(schedule)
    return schedule


async def update_schedule(
    repository: CareRepository,
    user_id: str,
    schedule_id: str,
    changes: Dict[str, Any],
    *,
    store: Optional[ScheduleStore] = None,
) -> CareSchedule:
    """Apply user edits (care type, frequency, due date, active flag)."""
    fields: Dict[str, Any] = {}
    if changes.get("care_type") is not None:
        fields["care_type"] = validate_care_type(changes["care_type"])
    if changes.get("frequency_days") is not None:
        fields["frequency_days"] = validate_frequency(changes["frequency_days"])
    if changes.get("next_due_date") is not None:
        fields["next_due_date"] = validate_due_date(changes["next_due_date"])
    if changes.get("is_active") is not None:
        fields["is_active"] = bool(changes["is_active"])

    schedule = await run_in_threadpool(repository.update_schedule, user_id, schedule_id, fields)
    if store is not None:
        store.update_schedule(schedule)
    return schedule
