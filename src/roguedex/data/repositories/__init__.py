"""Repository exports."""

from .base import RepositoryBase
from .cards_repo import CardsRepository
from .events_repo import EventsRepository
from .maps_repo import MapsRepository
from .passives_repo import PassivesRepository
from .progression_repo import ProgressionRepository
from .species_repo import SpeciesRepository

__all__ = [
    "CardsRepository",
    "EventsRepository",
    "MapsRepository",
    "PassivesRepository",
    "ProgressionRepository",
    "RepositoryBase",
    "SpeciesRepository",
]
