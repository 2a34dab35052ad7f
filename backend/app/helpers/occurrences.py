"""
Expansion of recurring care schedules into concrete calendar occurrences.

Rules:
- Only active schedules project.
- Projection starts at the schedule's next_due_date and steps by frequency_days
  until horizon_end (inclusive) = today + horizon_months calendar months.
- Every cycle from next_due_date onward is emitted, including cycles that
  already lie before today; those classify as overdue.
- At most max_events_per_schedule occurrences per schedule (render bound only).
"""

from collections import defaultdict
from datetime import date, timedelta
from typing import Dict, Iterable, List

from ..schemas.calendar import CalendarOccurrence
from ..schemas.care import CareSchedule
from ..utils.date_time import add_months

DEFAULT_HORIZON_MONTHS = 3
DEFAULT_MAX_EVENTS_PER_SCHEDULE = 20
UPCOMING_DAYS = 7

OVERDUE = "overdue"
DUE_TODAY = "due_today"
UPCOMING = "upcoming"
SCHEDULED = "scheduled"


def horizon_end_for(today: date, horizon_months: int = DEFAULT_HORIZON_MONTHS) -> date:
    return add_months(today, horizon_months)


def project_schedule(
    schedule: CareSchedule,
    horizon_end: date,
    max_events: int = DEFAULT_MAX_EVENTS_PER_SCHEDULE,
) -> List[CalendarOccurrence]:
    if not schedule.is_active or max_events <= 0:
        return []

    step = timedelta(days=schedule.frequency_days)
    occurrences: List[CalendarOccurrence] = []
    cursor = schedule.next_due_date
    while cursor <= horizon_end and len(occurrences) < max_events:
        occurrences.append(
            CalendarOccurrence(
                id=f"{schedule.id}-{len(occurrences)}",
                schedule_id=schedule.id,
                plant_id=schedule.plant_id,
                plant_name=schedule.plant_name or "",
                care_type=schedule.care_type,
                date=cursor,
            )
        )
        cursor = cursor + step
    return occurrences


def project_occurrences(
    schedules: Iterable[CareSchedule],
    today: date,
    *,
    horizon_months: int = DEFAULT_HORIZON_MONTHS,
    max_events_per_schedule: int = DEFAULT_MAX_EVENTS_PER_SCHEDULE,
) -> List[CalendarOccurrence]:
    """Flat list of occurrences for all active schedules, grouped per schedule in date order."""
    horizon_end = horizon_end_for(today, horizon_months)
    results: List[CalendarOccurrence] = []
    for schedule in schedules:
        results.extend(project_schedule(schedule, horizon_end, max_events_per_schedule))
    return results


# --- Queries -----------------------------------------------------------------

def occurrences_on(occurrences: Iterable[CalendarOccurrence], day: date) -> List[CalendarOccurrence]:
    return [o for o in occurrences if o.date == day]


def due_today(occurrences: Iterable[CalendarOccurrence], today: date) -> List[CalendarOccurrence]:
    return occurrences_on(occurrences, today)


def upcoming(
    occurrences: Iterable[CalendarOccurrence], today: date, days: int = UPCOMING_DAYS
) -> List[CalendarOccurrence]:
    """Occurrences after today and up to today + days (inclusive)."""
    end = today + timedelta(days=days)
    return sorted((o for o in occurrences if today < o.date <= end), key=lambda o: o.date)


def overdue(occurrences: Iterable[CalendarOccurrence], today: date) -> List[CalendarOccurrence]:
    # Inactive schedules never project, so every past occurrence is still owed
    return sorted((o for o in occurrences if o.date < today), key=lambda o: o.date)


def classify(occurrence: CalendarOccurrence, today: date, days: int = UPCOMING_DAYS) -> str:
    if occurrence.date < today:
        return OVERDUE
    if occurrence.date == today:
        return DUE_TODAY
    if occurrence.date <= today + timedelta(days=days):
        return UPCOMING
    return SCHEDULED


def group_by_date(occurrences: Iterable[CalendarOccurrence]) -> Dict[date, List[CalendarOccurrence]]:
    """Calendar-cell lookup: date -> occurrences on that date, in input order."""
    grouped: Dict[date, List[CalendarOccurrence]] = defaultdict(list)
    for o in occurrences:
        grouped[o.date].append(o)
    return dict(grouped)
