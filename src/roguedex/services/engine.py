"""Wires repositories and services into one run engine."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from roguedex.config import RunRules, load_rules
from roguedex.data.repositories import (
    CardsRepository,
    EventsRepository,
    MapsRepository,
    PassivesRepository,
    ProgressionRepository,
    SpeciesRepository,
)
from roguedex.services.assignment_service import AssignmentService
from roguedex.services.draft_service import DraftService
from roguedex.services.economy_service import EconomyService
from roguedex.services.event_service import EventService
from roguedex.services.party_service import PartyService
from roguedex.services.roster_service import RosterService
from roguedex.services.run_service import RunService
from roguedex.services.save_service import SaveService


@dataclass(slots=True)
class RunEngine:
    rules: RunRules
    species_repo: SpeciesRepository
    cards_repo: CardsRepository
    passives_repo: PassivesRepository
    progression_repo: ProgressionRepository
    events_repo: EventsRepository
    maps_repo: MapsRepository
    runs: RunService
    roster: RosterService
    party: PartyService
    economy: EconomyService
    drafts: DraftService
    events: EventService
    saves: SaveService


def create_engine(base_path: Path | str | None = None, rules: RunRules | None = None) -> RunEngine:
    """Construct every service over one definitions directory.

    ``rules`` defaults to the ``rules.json`` found alongside the definitions.
    """
    if rules is None:
        rules_path = Path(base_path) / "rules.json" if base_path is not None else None
        rules = load_rules(rules_path)
    species_repo = SpeciesRepository(base_path)
    cards_repo = CardsRepository(base_path)
    passives_repo = PassivesRepository(base_path)
    progression_repo = ProgressionRepository(
        base_path,
        species_repo=species_repo,
        cards_repo=cards_repo,
        passives_repo=passives_repo,
    )
    events_repo = EventsRepository(base_path)
    maps_repo = MapsRepository(base_path)

    assignment_service = AssignmentService(events_repo=events_repo, rules=rules)
    party_service = PartyService(
        species_repo=species_repo, progression_repo=progression_repo, rules=rules
    )
    economy_service = EconomyService(cards_repo=cards_repo, rules=rules)
    draft_service = DraftService(cards_repo=cards_repo, species_repo=species_repo, rules=rules)
    return RunEngine(
        rules=rules,
        species_repo=species_repo,
        cards_repo=cards_repo,
        passives_repo=passives_repo,
        progression_repo=progression_repo,
        events_repo=events_repo,
        maps_repo=maps_repo,
        runs=RunService(
            maps_repo=maps_repo,
            species_repo=species_repo,
            progression_repo=progression_repo,
            assignment_service=assignment_service,
            rules=rules,
        ),
        roster=RosterService(
            species_repo=species_repo,
            progression_repo=progression_repo,
            cards_repo=cards_repo,
            rules=rules,
        ),
        party=party_service,
        economy=economy_service,
        drafts=draft_service,
        events=EventService(
            events_repo=events_repo,
            party_service=party_service,
            economy_service=economy_service,
            draft_service=draft_service,
            rules=rules,
        ),
        saves=SaveService(species_repo=species_repo, rules=rules),
    )
