from fastapi import APIRouter, Depends, HTTPException
from starlette.concurrency import run_in_threadpool

from ..db import HEX_RE
from ..deps import get_care_repository, get_current_user_id
from ..schemas.plant import Plant, PlantCreateRequest, PlantUpdateRequest
from ..services.care_store import CareRepository

app = APIRouter()


def normalize(s: str) -> str:
    return " ".join((s or "").split())


def _check_id(id_hex: str) -> str:
    if not HEX_RE.match(id_hex or ""):
        raise HTTPException(status_code=400, detail="Invalid id")
    return id_hex.lower()


@app.get("/plants", response_model=list[Plant])
async def list_plants(
    user_id: str = Depends(get_current_user_id),
    repo: CareRepository = Depends(get_care_repository),
) -> list[Plant]:
    return await run_in_threadpool(repo.list_plants, user_id)


@app.post("/plants", response_model=Plant)
async def create_plant(
    payload: PlantCreateRequest,
    user_id: str = Depends(get_current_user_id),
    repo: CareRepository = Depends(get_care_repository),
) -> Plant:
    name = normalize(payload.name)
    if not name:
        raise HTTPException(status_code=400, detail="Name cannot be empty")
    return await run_in_threadpool(repo.create_plant, user_id, payload.model_copy(update={"name": name}))


@app.get("/plants/{id_hex}", response_model=Plant)
async def get_plant(
    id_hex: str,
    user_id: str = Depends(get_current_user_id),
    repo: CareRepository = Depends(get_care_repository),
) -> Plant:
    return await run_in_threadpool(repo.get_plant, user_id, _check_id(id_hex))


@app.put("/plants/{id_hex}", response_model=Plant)
async def update_plant(
    id_hex: str,
    payload: PlantUpdateRequest,
    user_id: str = Depends(get_current_user_id),
    repo: CareRepository = Depends(get_care_repository),
) -> Plant:
    plant_id = _check_id(id_hex)
    if payload.name is not None:
        name = normalize(payload.name)
        if not name:
            raise HTTPException(status_code=400, detail="Name cannot be empty")
        payload = payload.model_copy(update={"name": name})
    return await run_in_threadpool(repo.update_plant, user_id, plant_id, payload)


@app.delete("/plants/{id_hex}")
async def delete_plant(
    id_hex: str,
    user_id: str = Depends(get_current_user_id),
    repo: CareRepository = Depends(get_care_repository),
):
    # Schedules and logs of the plant go with it
    await run_in_threadpool(repo.delete_plant, user_id, _check_id(id_hex))
    return {"ok": True}
