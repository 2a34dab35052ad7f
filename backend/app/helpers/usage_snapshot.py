"""
Append-only store for client usage snapshots.

Each snapshot is saved to a JSON array file together with a plain-text summary
used as chat context. Writes are serialized with a process-local lock.
"""

import json
import logging
import threading
from pathlib import Path
from typing import Any, Dict

from ..schemas.user_data import UserDataLog

logger = logging.getLogger(__name__)

_write_lock = threading.Lock()


def generate_user_message(snapshot: UserDataLog) -> str:
    usage = snapshot.appUsage
    lines = [
        "I'm a plant care user with the following profile:",
        "",
        "**User Profile:**",
        f"- Total Plants: {usage.totalPlants}",
        f"- Active Care Tasks: {usage.totalTasks}",
        f"- Marketplace Listings: {usage.totalListings}",
        f"- Completed Tasks Today: {usage.completedTasksToday}",
        "",
    ]

    if snapshot.plants:
        lines.append("**My Plants:**")
        for idx, plant in enumerate(snapshot.plants, start=1):
            lines.append(f"{idx}. {plant.get('name')} ({plant.get('species')}) - {plant.get('health_status')}")
        lines.append("")

    active = [s for s in snapshot.careSchedules if s.get("is_active")]
    if active:
        lines.append("**Active Care Tasks:**")
        for idx, schedule in enumerate(active, start=1):
            lines.append(f"{idx}. {schedule.get('task_type')} for {schedule.get('plant_name')} - {schedule.get('frequency')}")
        lines.append("")

    if snapshot.userListings:
        lines.append("**My Marketplace Listings:**")
        for idx, listing in enumerate(snapshot.userListings, start=1):
            lines.append(f"{idx}. {listing.get('title')} - ${listing.get('price')}")
        lines.append("")

    lines.append(
        "Please provide personalized plant care advice based on my profile "
        "and help me optimize my plant care routine."
    )
    return "\n".join(lines)


def build_entry(snapshot: UserDataLog) -> Dict[str, Any]:
    return {
        "timestamp": snapshot.timestamp,
        "sessionId": snapshot.sessionId,
        "userId": snapshot.user.id,
        "userEmail": snapshot.user.email,
        "message": generate_user_message(snapshot),
        "userData": snapshot.model_dump(mode="json"),
    }


def save_snapshot(path: str | Path, snapshot: UserDataLog) -> Dict[str, Any]:
    """Append the snapshot entry to the JSON array at path (created when missing)."""
    target = Path(path)
    entry = build_entry(snapshot)
    with _write_lock:
        entries = []
        if target.exists():
            content = target.read_text(encoding="utf-8").strip()
            if content:
                entries = json.loads(content)
            if not isinstance(entries, list):
                raise ValueError(f"{target} does not hold a JSON array")
        entries.append(entry)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(json.dumps(entries, indent=2), encoding="utf-8")
    logger.info("Saved usage snapshot for user %s (%d entries)", snapshot.user.id, len(entries))
    return entry
