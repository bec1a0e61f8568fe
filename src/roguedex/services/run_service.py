"""Run creation, map traversal and act transitions."""
from __future__ import annotations

import logging
import time
from dataclasses import replace
from typing import List, Sequence, Tuple

from roguedex.config import DEFAULT_RULES, RunRules
from roguedex.data.repositories import MapsRepository, ProgressionRepository, SpeciesRepository
from roguedex.domain.defs import (
    ActTransitionNode,
    BattleNode,
    CardRemovalNode,
    EventNode,
    MapNode,
    RecruitNode,
    RestNode,
    SpawnNode,
)
from roguedex.domain.entities import GridPosition, RosterMember, all_positions
from roguedex.domain.progression import auto_level
from roguedex.domain.roster_effects import grant_exp
from roguedex.domain.state import RunState
from roguedex.services.assignment_service import AssignmentService
from roguedex.services.factories import create_roster_member

logger = logging.getLogger(__name__)

BATTLE_EXP = 1


class RunService:
    """Owns the run lifecycle: start, move between nodes, change acts."""

    def __init__(
        self,
        *,
        maps_repo: MapsRepository,
        species_repo: SpeciesRepository,
        progression_repo: ProgressionRepository,
        assignment_service: AssignmentService,
        rules: RunRules | None = None,
    ) -> None:
        self._maps_repo = maps_repo
        self._species_repo = species_repo
        self._progression_repo = progression_repo
        self._assignment_service = assignment_service
        self._rules = rules or DEFAULT_RULES

    def start_run(
        self,
        species_ids: Sequence[str],
        positions: Sequence[GridPosition] | None = None,
        seed: int | None = None,
    ) -> RunState:
        """Create act 1 of a new run for the chosen starters.

        Raises ValueError for an empty, oversized or mispositioned party.
        """
        if not species_ids or len(species_ids) > self._rules.max_party_size:
            raise ValueError(f"A run needs 1..{self._rules.max_party_size} starters.")
        if len(set(species_ids)) != len(species_ids):
            raise ValueError("Starters must be distinct species.")
        if positions is None:
            positions = all_positions()[: len(species_ids)]
        if len(positions) != len(species_ids):
            raise ValueError("Every starter needs exactly one position.")
        if not _positions_are_legal(positions):
            raise ValueError("Starter positions must be unique grid slots.")

        actual_seed = seed if seed is not None else int(time.time() * 1000)
        recruit_seed = actual_seed + self._rules.recruit_seed_offset
        party = tuple(
            create_roster_member(
                species_id, self._species_repo, self._progression_repo, position=position
            )
            for species_id, position in zip(species_ids, positions)
        )
        nodes, spawn_id = self._load_act_nodes(1)
        assignment = self._assignment_service.prepare_act(
            nodes,
            act=1,
            recruit_seed=recruit_seed,
            owned_species_ids=[member.base_species_id for member in party],
            seen_event_ids=(),
        )
        logger.info("Started run with seed %s and party %s", actual_seed, ", ".join(species_ids))
        return RunState(
            seed=actual_seed,
            recruit_seed=recruit_seed,
            active_party=party,
            current_node_id=spawn_id,
            nodes=assignment.nodes,
            visited_node_ids=(spawn_id,),
            current_act=1,
            gold=self._rules.starting_gold,
            seen_event_ids=assignment.seen_event_ids,
        )

    def _load_act_nodes(self, act: int) -> Tuple[Tuple[MapNode, ...], str]:
        spawn_id = self._maps_repo.spawn_node_id(act)
        nodes = tuple(
            replace(node, completed=True) if node.id == spawn_id else node
            for node in self._maps_repo.nodes_for_act(act)
        )
        return nodes, spawn_id

    # Queries

    def current_node(self, state: RunState) -> MapNode | None:
        return state.current_node

    def available_next_nodes(self, state: RunState) -> List[MapNode]:
        node = state.current_node
        if node is None:
            return []
        result: List[MapNode] = []
        for node_id in node.connects_to:
            target = state.get_node(node_id)
            if target is not None:
                result.append(target)
        return result

    def current_stage(self, state: RunState) -> int:
        node = state.current_node
        return node.stage if node is not None else 0

    def current_battle_node(self, state: RunState) -> BattleNode | None:
        node = state.current_node
        return node if isinstance(node, BattleNode) else None

    def current_rest_node(self, state: RunState) -> RestNode | None:
        node = state.current_node
        return node if isinstance(node, RestNode) else None

    def current_event_node(self, state: RunState) -> EventNode | None:
        node = state.current_node
        return node if isinstance(node, EventNode) else None

    def current_recruit_node(self, state: RunState) -> RecruitNode | None:
        node = state.current_node
        return node if isinstance(node, RecruitNode) else None

    def current_card_removal_node(self, state: RunState) -> CardRemovalNode | None:
        node = state.current_node
        return node if isinstance(node, CardRemovalNode) else None

    def current_act_transition_node(self, state: RunState) -> ActTransitionNode | None:
        node = state.current_node
        return node if isinstance(node, ActTransitionNode) else None

    def is_at_act_transition(self, state: RunState) -> bool:
        return self.current_act_transition_node(state) is not None

    def is_act_complete(self, state: RunState) -> bool:
        """True once any node that ends the act has been completed."""
        return any(
            node.completed for node in state.nodes if node.id in _act_ending_node_ids(state.nodes)
        )

    def is_run_complete(self, state: RunState) -> bool:
        return state.current_act >= self._rules.final_act and self.is_act_complete(state)

    def is_party_wiped(self, state: RunState) -> bool:
        return not any(member.is_alive for member in state.active_party)

    def run_positions(self, state: RunState) -> Tuple[GridPosition, ...]:
        return tuple(member.position for member in state.active_party)

    # Transitions

    def move_to_node(self, state: RunState, node_id: str) -> RunState:
        """Step along an outgoing edge of the current node.

        Battle nodes grant EXP to the party and bench; bench members level
        up automatically. Unreachable targets leave the state unchanged.
        """
        target = state.get_node(node_id)
        current = state.current_node
        if target is None or current is None or node_id not in current.connects_to:
            logger.debug("Rejected move from %s to %s", state.current_node_id, node_id)
            return state
        if node_id in state.visited_node_ids:
            logger.debug("Node %s already visited", node_id)
            return state

        updated = state.replace_node(replace(target, completed=True))
        updated = replace(
            updated,
            current_node_id=node_id,
            visited_node_ids=state.visited_node_ids + (node_id,),
        )
        if isinstance(target, BattleNode):
            updated = replace(
                updated,
                active_party=tuple(grant_exp(member, BATTLE_EXP) for member in updated.active_party),
                bench=tuple(self._auto_level(grant_exp(member, BATTLE_EXP)) for member in updated.bench),
            )
        return updated

    def _auto_level(self, member: RosterMember) -> RosterMember:
        return auto_level(
            member,
            self._progression_repo.get_tree_for_form(member.base_species_id),
            self._species_repo.get,
            exp_per_level=self._rules.exp_per_level,
            max_level=self._rules.max_level,
        )

    def transition_to_act(self, state: RunState, act: int | None = None) -> RunState:
        """Load the next act's map while keeping roster, gold and seen events.

        Without an explicit ``act`` the player must stand on an
        act-transition node, whose target act is used.
        """
        if act is None:
            node = self.current_act_transition_node(state)
            if node is None:
                logger.debug("Act transition requested away from a transition node")
                return state
            act = node.next_act
        if act not in self._maps_repo.acts():
            logger.debug("Act %s has no map", act)
            return state

        nodes, spawn_id = self._load_act_nodes(act)
        assignment = self._assignment_service.prepare_act(
            nodes,
            act=act,
            recruit_seed=state.recruit_seed,
            owned_species_ids=state.owned_species_ids,
            seen_event_ids=state.seen_event_ids,
        )
        logger.info("Entering act %s", act)
        return replace(
            state,
            current_act=act,
            current_node_id=spawn_id,
            visited_node_ids=(spawn_id,),
            nodes=assignment.nodes,
            seen_event_ids=assignment.seen_event_ids,
        )


def _positions_are_legal(positions: Sequence[GridPosition]) -> bool:
    if not all(position.is_valid for position in positions):
        return False
    return len({(position.row, position.column) for position in positions}) == len(positions)


def _act_ending_node_ids(nodes: Sequence[MapNode]) -> set[str]:
    """Nodes feeding an act-transition node, plus non-transition sinks."""
    transition_ids = {node.id for node in nodes if isinstance(node, ActTransitionNode)}
    ending: set[str] = set()
    for node in nodes:
        if isinstance(node, (ActTransitionNode, SpawnNode)):
            continue
        if transition_ids.intersection(node.connects_to) or not node.connects_to:
            ending.add(node.id)
    return ending


__all__ = ["BATTLE_EXP", "RunService"]
