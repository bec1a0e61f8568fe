"""Service layer exports."""

from .assignment_service import AssignmentService
from .draft_service import DraftService
from .economy_service import EconomyService, SpendResult
from .engine import RunEngine, create_engine
from .errors import FactoryError, SaveLoadError
from .event_service import (
    EffectProcessResult,
    EventChoiceResult,
    EventService,
    InteractionChoice,
    PendingInteraction,
    resolve_outcome,
)
from .map_graph_validator import Issue, format_issue, validate_act_map
from .party_service import PartyService
from .roster_service import CombatantResult, RosterService
from .run_service import RunService
from .save_service import SaveService

__all__ = [
    "AssignmentService",
    "CombatantResult",
    "DraftService",
    "EconomyService",
    "EffectProcessResult",
    "EventChoiceResult",
    "EventService",
    "FactoryError",
    "InteractionChoice",
    "Issue",
    "PartyService",
    "PendingInteraction",
    "RosterService",
    "RunEngine",
    "RunService",
    "SaveLoadError",
    "SaveService",
    "SpendResult",
    "create_engine",
    "format_issue",
    "resolve_outcome",
    "validate_act_map",
]
