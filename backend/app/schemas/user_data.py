from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class SnapshotUser(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    email: Optional[str] = None


class SnapshotAppUsage(BaseModel):
    model_config = ConfigDict(extra="allow")

    totalPlants: int = 0
    totalTasks: int = 0
    totalListings: int = 0
    completedTasksToday: int = 0


class UserDataLog(BaseModel):
    """Usage snapshot posted by the client. Field names follow the client payload."""

    model_config = ConfigDict(extra="allow")

    timestamp: Optional[str] = None
    sessionId: Optional[str] = None
    user: SnapshotUser
    plants: List[Dict[str, Any]] = Field(default_factory=list)
    careSchedules: List[Dict[str, Any]] = Field(default_factory=list)
    userListings: List[Dict[str, Any]] = Field(default_factory=list)
    appUsage: SnapshotAppUsage = Field(default_factory=SnapshotAppUsage)


class UserDataLogResponse(BaseModel):
    success: bool
    message: Optional[str] = None
    error: Optional[str] = None
