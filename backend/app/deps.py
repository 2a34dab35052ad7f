from typing import Callable

from fastapi import Depends, Header, HTTPException

from .config import Settings, get_settings
from .db import get_conn, normalize_hex_id
from .services.care_store import CareRepository
from .services.schedule_store import ScheduleStore


def get_conn_factory() -> Callable:
    """Connection factory handed to the repository; tests override it with a fake."""
    return get_conn


def get_current_user_id(x_user_id: str | None = Header(default=None)) -> str:
    """Opaque user id supplied by the auth layer in front of the API."""
    user_id = normalize_hex_id(x_user_id)
    if not user_id:
        raise HTTPException(status_code=401, detail="Missing or invalid user id")
    return user_id


def get_care_repository(get_conn_fn: Callable = Depends(get_conn_factory)) -> CareRepository:
    return CareRepository(get_conn_fn)


def get_schedule_store(repo: CareRepository = Depends(get_care_repository)) -> ScheduleStore:
    """A fresh, empty store per request; routes refresh what they need."""
    return ScheduleStore(repo)


def get_app_settings() -> Settings:
    return get_settings()
