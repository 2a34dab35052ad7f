"""
Per-session cache of a user's plants, care schedules and recent care logs.

The cache is filled by explicit refresh calls and edited by local mutators that
callers run only after the matching remote write succeeded. Mutators never touch
the network; refreshes never retry.
"""
from __future__ import annotations

import asyncio
import logging
from typing import List, Optional

from starlette.concurrency import run_in_threadpool

from ..helpers.collection_cache import CollectionCache
from ..schemas.care import CareLog, CareSchedule
from ..schemas.plant import Plant
from .care_store import CareRepository

DEFAULT_LOG_LIMIT = 10


class ScheduleStore:
    def __init__(self, repository: CareRepository, *, logger: Optional[logging.Logger] = None):
        self._repo = repository
        self._log = logger or logging.getLogger(__name__)
        self._plants: CollectionCache[Plant] = CollectionCache()
        self._schedules: CollectionCache[CareSchedule] = CollectionCache()
        self._logs: CollectionCache[CareLog] = CollectionCache()
        self.user_id: Optional[str] = None

    # --- getters --------------------------------------------------------------

    @property
    def plants(self) -> List[Plant]:
        return self._plants.items()

    @property
    def schedules(self) -> List[CareSchedule]:
        return self._schedules.items()

    @property
    def logs(self) -> List[CareLog]:
        return self._logs.items()

    def get_plant(self, plant_id: str) -> Optional[Plant]:
        return self._plants.get(plant_id)

    def get_schedule(self, schedule_id: str) -> Optional[CareSchedule]:
        return self._schedules.get(schedule_id)

    # --- refresh --------------------------------------------------------------

    def _bind_user(self, user_id: str) -> None:
        if self.user_id is not None and self.user_id != user_id:
            self._log.info("Cache owner changed; clearing cached data")
            self.clear()
        self.user_id = user_id

    async def refresh_plants(self, user_id: str) -> List[Plant]:
        self._bind_user(user_id)
        plants = await run_in_threadpool(self._repo.list_plants, user_id)
        self._plants.replace(plants)
        self._log.debug("Refreshed %d plants", len(plants))
        return plants

    async def refresh_schedules(self, user_id: str) -> List[CareSchedule]:
        """Replace cached schedules. On FetchError the previous contents stay as they were."""
        self._bind_user(user_id)
        schedules = await run_in_threadpool(self._repo.list_schedules, user_id)
        self._schedules.replace(schedules)
        self._log.debug("Refreshed %d care schedules", len(schedules))
        return schedules

    async def refresh_logs(self, user_id: str, limit: int = DEFAULT_LOG_LIMIT) -> List[CareLog]:
        self._bind_user(user_id)
        logs = await run_in_threadpool(self._repo.list_logs, user_id, limit)
        self._logs.replace(logs)
        self._log.debug("Refreshed %d care logs", len(logs))
        return logs

    async def refresh_all(self, user_id: str, log_limit: int = DEFAULT_LOG_LIMIT) -> None:
        self._bind_user(user_id)
        await asyncio.gather(
            self.refresh_plants(user_id),
            self.refresh_schedules(user_id),
            self.refresh_logs(user_id, log_limit),
        )

    # --- local mutators -------------------------------------------------------

    def add_plant(self, plant: Plant) -> None:
        self._plants.insert(plant)

    def update_plant(self, plant: Plant) -> None:
        self._plants.update(plant)
        # Keep the display name joined onto schedules in step with the plant
        for schedule in self._schedules.items():
            if schedule.plant_id == plant.id and schedule.plant_name != plant.name:
                self._schedules.update(schedule.model_copy(update={"plant_name": plant.name}))

    def delete_plant(self, plant_id: str) -> None:
        """Remove the plant and everything cached that references it."""
        self._plants.remove(plant_id)
        self._schedules.remove_where(lambda s: s.plant_id == plant_id)
        self._logs.remove_where(lambda log: log.plant_id == plant_id)

    def add_schedule(self, schedule: CareSchedule) -> None:
        self._schedules.insert(schedule)

    def update_schedule(self, schedule: CareSchedule) -> None:
        self._schedules.update(schedule)

    def delete_schedule(self, schedule_id: str) -> None:
        self._schedules.remove(schedule_id)

    def add_log(self, log: CareLog) -> None:
        self._logs.insert(log)

    def clear(self) -> None:
        """Drop all cached state (sign-out). Safe on a store that never loaded."""
        self._plants.clear()
        self._schedules.clear()
        self._logs.clear()
        self.user_id = None
