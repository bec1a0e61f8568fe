"""Domain-level run state."""
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Tuple

from roguedex.domain.defs import MapNode
from roguedex.domain.entities import RosterMember


@dataclass(frozen=True, slots=True)
class RunState:
    """The aggregate for one run.

    ``seed`` drives outcome rolls and drafts; ``recruit_seed`` drives map
    content assignment so the two streams never perturb each other.
    ``nodes`` holds the current act only and is replaced on act transition.
    ``seen_event_ids`` spans the whole run.
    """

    seed: int
    recruit_seed: int
    active_party: Tuple[RosterMember, ...]
    current_node_id: str
    nodes: Tuple[MapNode, ...]
    bench: Tuple[RosterMember, ...] = ()
    graveyard: Tuple[RosterMember, ...] = ()
    visited_node_ids: Tuple[str, ...] = ()
    current_act: int = 1
    gold: int = 0
    seen_event_ids: Tuple[str, ...] = ()

    def get_node(self, node_id: str) -> MapNode | None:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    @property
    def current_node(self) -> MapNode | None:
        return self.get_node(self.current_node_id)

    @property
    def full_roster(self) -> Tuple[RosterMember, ...]:
        """Party, bench and graveyard in that order."""
        return self.active_party + self.bench + self.graveyard

    @property
    def owned_species_ids(self) -> frozenset[str]:
        return frozenset(member.base_species_id for member in self.full_roster)

    def replace_node(self, node: MapNode) -> "RunState":
        """Return a copy with the node sharing ``node.id`` swapped out."""
        nodes = tuple(node if existing.id == node.id else existing for existing in self.nodes)
        return replace(self, nodes=nodes)
