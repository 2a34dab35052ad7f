import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PayloadError
from starlette.concurrency import run_in_threadpool

from ..config import Settings
from ..deps import get_app_settings
from ..helpers.usage_snapshot import save_snapshot
from ..schemas.user_data import UserDataLog, UserDataLogResponse

logger = logging.getLogger(__name__)

app = APIRouter()


@app.post("/user-data-log", response_model=UserDataLogResponse, response_model_exclude_none=True)
async def log_user_data(request: Request, settings: Settings = Depends(get_app_settings)):
    """
    Persist a usage snapshot for analytics and chat context.
    Callers treat this as fire-and-forget, so failures are reported in the body
    rather than raised.
    """
    try:
        body = await request.json()
    except ValueError:
        return JSONResponse(status_code=400, content={"success": False, "error": "Invalid JSON data"})

    try:
        snapshot = UserDataLog.model_validate(body)
    except PayloadError:
        return JSONResponse(status_code=400, content={"success": False, "error": "Invalid user data format"})
    if not snapshot.user.id:
        return JSONResponse(status_code=400, content={"success": False, "error": "Invalid user data format"})

    try:
        await run_in_threadpool(save_snapshot, settings.user_data_log_path, snapshot)
    except (OSError, ValueError) as exc:
        logger.error("Error saving usage snapshot: %s", exc)
        return JSONResponse(status_code=500, content={"success": False, "error": str(exc)})

    return UserDataLogResponse(success=True, message="User data saved successfully")
