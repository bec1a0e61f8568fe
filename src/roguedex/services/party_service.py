"""Bench management, recruitment and revival."""
from __future__ import annotations

import logging
from dataclasses import replace
from typing import List, Sequence

from roguedex.config import DEFAULT_RULES, RunRules
from roguedex.data.repositories import ProgressionRepository, SpeciesRepository
from roguedex.domain.defs import RecruitNode
from roguedex.domain.entities import GridPosition, RosterMember, all_positions
from roguedex.domain.roster_effects import revive
from roguedex.domain.state import RunState
from roguedex.services.factories import create_roster_member

logger = logging.getLogger(__name__)


def find_empty_position(party: Sequence[RosterMember]) -> GridPosition | None:
    """First free slot, front row before back row, left to right."""
    occupied = {(member.position.row, member.position.column) for member in party}
    for position in all_positions():
        if (position.row, position.column) not in occupied:
            return position
    return None


class PartyService:
    """Moves members between party, bench and graveyard."""

    def __init__(
        self,
        *,
        species_repo: SpeciesRepository,
        progression_repo: ProgressionRepository,
        rules: RunRules | None = None,
    ) -> None:
        self._species_repo = species_repo
        self._progression_repo = progression_repo
        self._rules = rules or DEFAULT_RULES

    def bench_has_space(self, state: RunState) -> bool:
        return len(state.bench) < self._rules.max_bench_size

    def swap(self, state: RunState, party_index: int, bench_index: int) -> RunState:
        """Exchange a party and bench member; the newcomer takes the old slot."""
        if not 0 <= party_index < len(state.active_party) or not 0 <= bench_index < len(state.bench):
            logger.debug("Rejected swap %s <-> %s", party_index, bench_index)
            return state
        leaving = state.active_party[party_index]
        joining = replace(state.bench[bench_index], position=leaving.position)
        party = list(state.active_party)
        bench = list(state.bench)
        party[party_index] = joining
        bench[bench_index] = leaving
        return replace(state, active_party=tuple(party), bench=tuple(bench))

    def promote(
        self, state: RunState, bench_index: int, position: GridPosition | None = None
    ) -> RunState:
        if len(state.active_party) >= self._rules.max_party_size:
            logger.debug("Party is full")
            return state
        if not 0 <= bench_index < len(state.bench):
            return state
        if position is None:
            position = find_empty_position(state.active_party)
        occupied = {(m.position.row, m.position.column) for m in state.active_party}
        if position is None or not position.is_valid or (position.row, position.column) in occupied:
            logger.debug("Promotion target slot is not free")
            return state
        promoted = replace(state.bench[bench_index], position=position)
        bench = state.bench[:bench_index] + state.bench[bench_index + 1 :]
        return replace(state, active_party=state.active_party + (promoted,), bench=bench)

    def demote(self, state: RunState, party_index: int) -> RunState:
        if len(state.active_party) <= 1 or not self.bench_has_space(state):
            logger.debug("Rejected demotion of party index %s", party_index)
            return state
        if not 0 <= party_index < len(state.active_party):
            return state
        member = state.active_party[party_index]
        party = state.active_party[:party_index] + state.active_party[party_index + 1 :]
        return replace(state, active_party=party, bench=state.bench + (member,))

    def rearrange(self, state: RunState, positions: Sequence[GridPosition]) -> RunState:
        """Assign new grid slots to the whole party at once."""
        if len(positions) != len(state.active_party):
            return state
        keys = {(position.row, position.column) for position in positions}
        if len(keys) != len(positions) or not all(position.is_valid for position in positions):
            logger.debug("Rejected rearrangement with duplicate or off-grid slots")
            return state
        party = tuple(
            replace(member, position=position) for member, position in zip(state.active_party, positions)
        )
        return replace(state, active_party=party)

    # Recruiting

    def recruit_level(self, state: RunState) -> int:
        """Lowest level in the active party, or 1 for an empty party."""
        if not state.active_party:
            return 1
        return min(member.level for member in state.active_party)

    def available_recruit_pool(self, state: RunState) -> List[str]:
        owned = state.owned_species_ids
        return [species_id for species_id in self._rules.recruit_pool if species_id not in owned]

    def recruit_species(self, state: RunState, species_id: str) -> RunState:
        """Add a fresh member of ``species_id`` to the bench."""
        if not self.bench_has_space(state):
            logger.debug("Bench is full; cannot recruit %s", species_id)
            return state
        if species_id in state.owned_species_ids:
            logger.debug("Species %s is already on the roster", species_id)
            return state
        member = create_roster_member(
            species_id,
            self._species_repo,
            self._progression_repo,
            level=self.recruit_level(state),
        )
        return replace(state, bench=state.bench + (member,))

    def recruit_from_node(self, state: RunState, node_id: str | None = None) -> RunState:
        node = state.get_node(node_id or state.current_node_id)
        if not isinstance(node, RecruitNode) or node.species_id is None or node.recruited:
            logger.debug("Nothing to recruit at %s", node_id or state.current_node_id)
            return state
        if node.id not in state.visited_node_ids:
            logger.debug("Recruit node %s has not been reached", node.id)
            return state
        updated = self.recruit_species(state, node.species_id)
        if updated is state:
            return state
        return updated.replace_node(replace(node, recruited=True))

    # Revival

    def revive(
        self, state: RunState, graveyard_index: int, hp_fraction: float | None = None
    ) -> RunState:
        """Return a fallen member to the bench with a marker card.

        The member comes back at ``hp_fraction`` of max HP, the run rules'
        revive fraction by default. Fractions outside (0, 1] are rejected.
        """
        fraction = self._rules.revive_hp_fraction if hp_fraction is None else hp_fraction
        if not 0 < fraction <= 1:
            logger.debug("Invalid revive fraction %s", fraction)
            return state
        if not 0 <= graveyard_index < len(state.graveyard):
            return state
        if not self.bench_has_space(state):
            logger.debug("Bench is full; cannot revive")
            return state
        member = revive(
            state.graveyard[graveyard_index],
            fraction,
            self._rules.revival_marker_card_id,
        )
        graveyard = state.graveyard[:graveyard_index] + state.graveyard[graveyard_index + 1 :]
        logger.info("Revived %s", member.form_id)
        return replace(state, graveyard=graveyard, bench=state.bench + (member,))


__all__ = ["PartyService", "find_empty_position"]
