"""Run-persistent state of a single roster creature."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from roguedex.domain.entities.position import GridPosition


@dataclass(frozen=True, slots=True)
class RosterMember:
    """One creature's state across nodes.

    ``base_species_id`` never changes; ``form_id`` follows evolutions. The
    member's max HP is always the current form's base HP plus
    ``max_hp_modifier``, so evolution can recompute it without losing event
    and rung bonuses. ``knocked_out`` is sticky until an explicit revival.
    """

    base_species_id: str
    form_id: str
    current_hp: int
    max_hp: int
    deck: Tuple[str, ...]
    position: GridPosition
    max_hp_modifier: int = 0
    level: int = 1
    exp: int = 0
    passive_ids: Tuple[str, ...] = ()
    knocked_out: bool = False
    energy_modifier: int = 0
    draw_modifier: int = 0

    @property
    def is_alive(self) -> bool:
        """Eligible for targeted effects: not knocked out and above 0 HP."""
        return not self.knocked_out and self.current_hp > 0

    @property
    def missing_hp(self) -> int:
        return self.max_hp - self.current_hp
