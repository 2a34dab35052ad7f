"""Completing a care task: write a care log, then roll the schedule forward one period."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Callable, Optional

from starlette.concurrency import run_in_threadpool

from ..errors import FetchError, NotFoundError
from ..schemas.care import CareLog, CareSchedule
from ..utils.date_time import add_days, utc_now
from .care_store import CareRepository
from .schedule_store import ScheduleStore

COMPLETION_FAILED_MESSAGE = "Failed to complete task. Please try again."


@dataclass
class CompletionResult:
    schedule: CareSchedule
    log: CareLog


def next_due_after(occurrence_date: date, frequency_days: int) -> date:
    """The satisfied occurrence date plus one period; never based on wall-clock time."""
    return add_days(occurrence_date, frequency_days)


class CompletionProcessor:
    """
    Usage:
      processor = CompletionProcessor(store, repo)
      result = await processor.complete_task(schedule_id, occurrence_date)

    Not idempotent: every call writes a new log and advances one more period.
    The log write and the schedule update are ordered but not transactional.
    """

    def __init__(
        self,
        store: ScheduleStore,
        repository: CareRepository,
        *,
        clock: Optional[Callable[[], datetime]] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self._store = store
        self._repo = repository
        self._clock = clock or utc_now
        self._log = logger or logging.getLogger(__name__)

    async def complete_task(
        self, schedule_id: str, occurrence_date: date, notes: Optional[str] = None
    ) -> CompletionResult:
        schedule = self._store.get_schedule(schedule_id)
        user_id = self._store.user_id
        if schedule is None or user_id is None:
            raise NotFoundError("Care task not found. Refresh and try again.")

        try:
            log = await run_in_threadpool(
                self._repo.create_log,
                user_id,
                schedule.plant_id,
                schedule.care_type,
                self._clock(),
                notes,
            )
        except FetchError as exc:
            raise FetchError(COMPLETION_FAILED_MESSAGE) from exc

        new_due = next_due_after(occurrence_date, schedule.frequency_days)
        try:
            updated = await run_in_threadpool(
                self._repo.update_schedule,
                user_id,
                schedule.id,
                {"next_due_date": new_due, "is_active": True},
            )
        except Exception as exc:
            # The log row stays; the schedule still shows as due on the next refresh
            self._log.warning(
                "Care log %s written but schedule %s was not advanced to %s: %s",
                log.id,
                schedule.id,
                new_due,
                exc,
            )
            if isinstance(exc, FetchError):
                raise FetchError(COMPLETION_FAILED_MESSAGE) from exc
            raise

        self._store.add_log(log)
        self._store.update_schedule(updated)
        self._log.info(
            "Completed %s for plant %s on %s; next due %s",
            schedule.care_type.value,
            schedule.plant_id,
            occurrence_date,
            updated.next_due_date,
        )
        return CompletionResult(schedule=updated, log=log)
