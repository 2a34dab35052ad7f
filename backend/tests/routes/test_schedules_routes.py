import uuid
from datetime import date

import pytest
from httpx import AsyncClient

pytestmark = pytest.mark.anyio


def _headers(user_id: str) -> dict:
    return {"X-User-Id": user_id}


async def test_create_schedule(async_client: AsyncClient, api_repo, user_id):
    plant = api_repo.seed_plant(user_id, "Aloe")

    r = await async_client.post(
        "/api/schedules",
        json={"plant_id": plant.id, "care_type": "water", "frequency_days": 7, "next_due_date": "2025-01-10"},
        headers=_headers(user_id),
    )

    assert r.status_code == 200
    body = r.json()
    assert body["care_type"] == "water"
    assert body["frequency_days"] == 7
    assert body["next_due_date"] == "2025-01-10"
    assert body["is_active"] is True
    assert body["plant_name"] == "Aloe"


@pytest.mark.parametrize("frequency", [0, -3])
async def test_create_rejects_non_positive_frequency(async_client: AsyncClient, api_repo, user_id, frequency):
    plant = api_repo.seed_plant(user_id)

    r = await async_client.post(
        "/api/schedules",
        json={"plant_id": plant.id, "care_type": "water", "frequency_days": frequency, "next_due_date": "2025-01-10"},
        headers=_headers(user_id),
    )

    assert r.status_code == 400
    assert r.json()["detail"] == "Frequency must be at least 1 day"
    assert api_repo.writes == []


@pytest.mark.parametrize("frequency", [True, 2.5, "7"])
async def test_create_rejects_non_integer_frequency(async_client: AsyncClient, api_repo, user_id, frequency):
    plant = api_repo.seed_plant(user_id)

    r = await async_client.post(
        "/api/schedules",
        json={"plant_id": plant.id, "care_type": "water", "frequency_days": frequency, "next_due_date": "2025-01-10"},
        headers=_headers(user_id),
    )

    assert r.status_code == 400
    assert r.json()["detail"] == "Frequency must be a whole number of days"
    assert api_repo.writes == []
    assert api_repo.schedules == {}


@pytest.mark.parametrize("frequency", [True, 2.5])
async def test_update_rejects_non_integer_frequency(async_client: AsyncClient, api_repo, user_id, frequency):
    plant = api_repo.seed_plant(user_id)
    schedule = api_repo.seed_schedule(plant, frequency_days=7)

    r = await async_client.put(
        f"/api/schedules/{schedule.id}", json={"frequency_days": frequency}, headers=_headers(user_id)
    )

    assert r.status_code == 400
    assert r.json()["detail"] == "Frequency must be a whole number of days"
    assert api_repo.schedules[schedule.id].frequency_days == 7


async def test_create_rejects_unknown_care_type(async_client: AsyncClient, api_repo, user_id):
    plant = api_repo.seed_plant(user_id)
    r = await async_client.post(
        "/api/schedules",
        json={"plant_id": plant.id, "care_type": "sing", "frequency_days": 3, "next_due_date": "2025-01-10"},
        headers=_headers(user_id),
    )
    assert r.status_code == 400
    assert r.json()["detail"].startswith("Unknown care type 'sing'")


async def test_create_for_foreign_plant(async_client: AsyncClient, api_repo, user_id):
    plant = api_repo.seed_plant(uuid.uuid4().hex)
    r = await async_client.post(
        "/api/schedules",
        json={"plant_id": plant.id, "care_type": "water", "frequency_days": 3, "next_due_date": "2025-01-10"},
        headers=_headers(user_id),
    )
    assert r.status_code == 400
    assert r.json()["detail"] == "Plant not found for this user"
    assert api_repo.schedules == {}


async def test_list_and_due_schedules(async_client: AsyncClient, api_repo, user_id):
    plant = api_repo.seed_plant(user_id)
    late = api_repo.seed_schedule(plant, next_due_date=date(2020, 1, 1))
    api_repo.seed_schedule(plant, next_due_date=date(2999, 1, 1))
    api_repo.seed_schedule(plant, next_due_date=date(2020, 1, 2), is_active=False)

    r = await async_client.get("/api/schedules", headers=_headers(user_id))
    assert r.status_code == 200
    assert [s["next_due_date"] for s in r.json()] == ["2020-01-01", "2020-01-02", "2999-01-01"]

    r = await async_client.get("/api/schedules/due", headers=_headers(user_id))
    assert [s["id"] for s in r.json()] == [late.id]


async def test_update_and_delete_schedule(async_client: AsyncClient, api_repo, user_id):
    plant = api_repo.seed_plant(user_id)
    schedule = api_repo.seed_schedule(plant)

    r = await async_client.put(
        f"/api/schedules/{schedule.id}", json={"frequency_days": 14, "is_active": False}, headers=_headers(user_id)
    )
    assert r.status_code == 200
    assert r.json()["frequency_days"] == 14
    assert r.json()["is_active"] is False

    r = await async_client.put(f"/api/schedules/{schedule.id}", json={"frequency_days": 0}, headers=_headers(user_id))
    assert r.status_code == 400

    r = await async_client.delete(f"/api/schedules/{schedule.id}", headers=_headers(user_id))
    assert r.json() == {"ok": True}
    assert api_repo.schedules == {}

    r = await async_client.delete(f"/api/schedules/{schedule.id}", headers=_headers(user_id))
    assert r.status_code == 404


async def test_complete_rolls_schedule_forward(async_client: AsyncClient, api_repo, user_id):
    plant = api_repo.seed_plant(user_id, "Pothos")
    schedule = api_repo.seed_schedule(plant, frequency_days=7, next_due_date=date(2025, 1, 10))

    r = await async_client.post(
        f"/api/schedules/{schedule.id}/complete",
        json={"occurrence_date": "2025-01-10", "notes": "soaked"},
        headers=_headers(user_id),
    )

    assert r.status_code == 200
    body = r.json()
    assert body["schedule"]["next_due_date"] == "2025-01-17"
    assert body["log"]["care_type"] == "water"
    assert body["log"]["notes"] == "soaked"
    assert body["log"]["plant_id"] == plant.id
    assert api_repo.writes == ["create_log", "update_schedule"]


async def test_complete_unknown_schedule_is_404(async_client: AsyncClient, api_repo, user_id):
    r = await async_client.post(
        f"/api/schedules/{uuid.uuid4().hex}/complete",
        json={"occurrence_date": "2025-01-10"},
        headers=_headers(user_id),
    )
    assert r.status_code == 404
    assert api_repo.writes == []


async def test_complete_store_failure_is_reported(async_client: AsyncClient, api_repo, user_id):
    plant = api_repo.seed_plant(user_id)
    schedule = api_repo.seed_schedule(plant)
    api_repo.fail_on.add("create_log")

    r = await async_client.post(
        f"/api/schedules/{schedule.id}/complete",
        json={"occurrence_date": "2025-01-10"},
        headers=_headers(user_id),
    )

    assert r.status_code == 503
    assert r.json()["detail"] == "Failed to complete task. Please try again."
    assert api_repo.schedules[schedule.id].next_due_date == date(2025, 1, 10)
