from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field, constr

HexID = constr(pattern=r"^[0-9a-f]{32}$")


class Plant(BaseModel):
    id: HexID
    user_id: HexID
    name: str
    species: Optional[str] = None
    health_score: int = Field(default=100, ge=0, le=100)
    location: Optional[str] = None
    notes: Optional[str] = None
    acquired_date: Optional[date] = None
    created_at: datetime
    updated_at: Optional[datetime] = None


class PlantCreateRequest(BaseModel):
    # Only name is required
    name: str
    species: Optional[str] = None
    health_score: int = Field(default=100, ge=0, le=100)
    location: Optional[str] = None
    notes: Optional[str] = None
    acquired_date: Optional[date] = None


class PlantUpdateRequest(BaseModel):
    name: Optional[str] = None
    species: Optional[str] = None
    health_score: Optional[int] = Field(default=None, ge=0, le=100)
    location: Optional[str] = None
    notes: Optional[str] = None
    acquired_date: Optional[date] = None
