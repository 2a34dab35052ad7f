from .care_log import CareLogFactory
from .plant import PlantFactory
from .schedule import ScheduleFactory

__all__ = [
    "PlantFactory",
    "ScheduleFactory",
    "CareLogFactory",
]
