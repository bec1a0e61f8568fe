"""Factory for creating roster members from species definitions."""
from __future__ import annotations

from roguedex.config import MAX_LEVEL
from roguedex.data.repositories import ProgressionRepository, SpeciesRepository
from roguedex.domain.entities import GridPosition, RosterMember
from roguedex.domain.progression import build_member
from roguedex.services.errors import FactoryError


def create_roster_member(
    species_id: str,
    species_repo: SpeciesRepository,
    progression_repo: ProgressionRepository,
    *,
    level: int = 1,
    exp: int = 0,
    position: GridPosition | None = None,
) -> RosterMember:
    """Instantiate a member at ``level`` with every rung up to it applied."""
    try:
        species = species_repo.get(species_id)
    except KeyError as exc:
        raise FactoryError(f"Species '{species_id}' not found.") from exc
    if not 1 <= level <= MAX_LEVEL:
        raise FactoryError(f"Level {level} is outside 1..{MAX_LEVEL}.")

    tree = progression_repo.get_tree_for_form(species_id)
    return build_member(
        species,
        tree,
        species_repo.get,
        level=level,
        exp=exp,
        position=position,
    )
