"""Level-up rules applied to roster members."""
from __future__ import annotations

from dataclasses import replace
from typing import Callable

from roguedex.config import EXP_PER_LEVEL, MAX_LEVEL
from roguedex.domain.defs import ProgressionRung, ProgressionTree, SpeciesDef
from roguedex.domain.entities import GridPosition, RosterMember

SpeciesLookup = Callable[[str], SpeciesDef]


def can_level_up(
    level: int, exp: int, *, exp_per_level: int = EXP_PER_LEVEL, max_level: int = MAX_LEVEL
) -> bool:
    return level < max_level and exp >= exp_per_level


def _add_passive(passive_ids: tuple[str, ...], passive_id: str | None) -> tuple[str, ...]:
    if passive_id is None or passive_id in passive_ids:
        return passive_ids
    return passive_ids + (passive_id,)


def apply_rung(member: RosterMember, rung: ProgressionRung, species_lookup: SpeciesLookup) -> RosterMember:
    """Apply one rung's rewards without touching level or EXP.

    Max HP is recomputed from the resulting form plus the running modifier
    and the absolute damage taken is carried over.
    """
    form_id = rung.evolves_to or member.form_id
    max_hp_modifier = member.max_hp_modifier + rung.hp_boost
    new_max_hp = species_lookup(form_id).max_hp + max_hp_modifier
    damage_taken = member.max_hp - member.current_hp
    return replace(
        member,
        form_id=form_id,
        max_hp=new_max_hp,
        max_hp_modifier=max_hp_modifier,
        current_hp=max(0, new_max_hp - damage_taken),
        deck=member.deck + rung.cards_to_add,
        passive_ids=_add_passive(member.passive_ids, rung.passive_id),
    )


def apply_level_up(
    member: RosterMember,
    tree: ProgressionTree | None,
    species_lookup: SpeciesLookup,
    *,
    exp_per_level: int = EXP_PER_LEVEL,
    max_level: int = MAX_LEVEL,
) -> RosterMember:
    """Advance ``member`` one level, or return it unchanged when ineligible."""
    if tree is None:
        return member
    if not can_level_up(member.level, member.exp, exp_per_level=exp_per_level, max_level=max_level):
        return member
    rung = tree.rung_for_level(member.level + 1)
    if rung is None:
        return member
    leveled = apply_rung(member, rung, species_lookup)
    return replace(leveled, level=member.level + 1, exp=member.exp - exp_per_level)


def auto_level(
    member: RosterMember,
    tree: ProgressionTree | None,
    species_lookup: SpeciesLookup,
    *,
    exp_per_level: int = EXP_PER_LEVEL,
    max_level: int = MAX_LEVEL,
) -> RosterMember:
    """Level up repeatedly while eligible. Used for bench members."""
    current = member
    while True:
        leveled = apply_level_up(
            current, tree, species_lookup, exp_per_level=exp_per_level, max_level=max_level
        )
        if leveled is current:
            return current
        current = leveled


def build_member(
    species: SpeciesDef,
    tree: ProgressionTree | None,
    species_lookup: SpeciesLookup,
    *,
    level: int = 1,
    exp: int = 0,
    position: GridPosition | None = None,
) -> RosterMember:
    """Create a full-HP member with every rung up to ``level`` applied."""
    member = RosterMember(
        base_species_id=species.id,
        form_id=species.id,
        current_hp=species.max_hp,
        max_hp=species.max_hp,
        deck=species.deck,
        position=position or GridPosition(row="front", column=1),
        level=level,
        exp=exp,
    )
    if tree is None:
        return member
    for rung in tree.rungs:
        if rung.level > level:
            break
        member = apply_rung(member, rung, species_lookup)
    return replace(member, current_hp=member.max_hp)


__all__ = [
    "SpeciesLookup",
    "apply_level_up",
    "apply_rung",
    "auto_level",
    "build_member",
    "can_level_up",
]
