"""Seeded assignment of recruit species and events onto open map nodes."""
from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Iterable, List, Sequence, Tuple

from roguedex.config import DEFAULT_RULES, RunRules
from roguedex.core import rng
from roguedex.data.repositories import EventsRepository
from roguedex.domain.defs import EventNode, MapNode, RecruitNode

logger = logging.getLogger(__name__)

ACT_SEED_STRIDE = 99999
EVENT_SEED_OFFSET = 77777


def recruit_stream_seed(recruit_seed: int, act: int) -> int:
    return recruit_seed + ACT_SEED_STRIDE * (act - 1)


def event_stream_seed(recruit_seed: int, act: int) -> int:
    return recruit_seed + EVENT_SEED_OFFSET + ACT_SEED_STRIDE * (act - 1)


@dataclass(frozen=True, slots=True)
class ActAssignment:
    nodes: Tuple[MapNode, ...]
    seen_event_ids: Tuple[str, ...]


class AssignmentService:
    """Fills open recruit and event slots for a freshly loaded act.

    Recruits never repeat within a pass and never offer a species the
    player already owns. Events never repeat within a run.
    """

    def __init__(self, *, events_repo: EventsRepository, rules: RunRules | None = None) -> None:
        self._events_repo = events_repo
        self._rules = rules or DEFAULT_RULES

    def assign_recruits(
        self, nodes: Sequence[MapNode], seed: int, owned_species_ids: Iterable[str]
    ) -> Tuple[MapNode, ...]:
        owned = set(owned_species_ids)
        pool = [species_id for species_id in self._rules.recruit_pool if species_id not in owned]
        current_seed = rng.coerce_seed(seed)
        used: set[str] = set()
        assigned: List[MapNode] = []
        for node in nodes:
            if not isinstance(node, RecruitNode) or node.species_id is not None:
                assigned.append(node)
                continue
            available = [species_id for species_id in pool if species_id not in used]
            if not available:
                logger.debug("No recruit candidates left for node %s", node.id)
                assigned.append(node)
                continue
            picked, current_seed = rng.pick(current_seed, available)
            used.add(picked)
            assigned.append(replace(node, species_id=picked))
        return tuple(assigned)

    def assign_events(
        self, nodes: Sequence[MapNode], seed: int, act: int, seen_event_ids: Sequence[str]
    ) -> ActAssignment:
        seen = list(seen_event_ids)
        pool = [event.id for event in self._events_repo.events_for_act(act) if event.id not in seen]
        current_seed = rng.coerce_seed(seed)
        assigned: List[MapNode] = []
        for node in nodes:
            if not isinstance(node, EventNode) or node.event_id is not None:
                assigned.append(node)
                continue
            available = [event_id for event_id in pool if event_id not in seen]
            if not available:
                logger.warning("Act %s event pool exhausted; node %s stays open", act, node.id)
                assigned.append(node)
                continue
            picked, current_seed = rng.pick(current_seed, available)
            seen.append(picked)
            assigned.append(replace(node, event_id=picked))
        return ActAssignment(nodes=tuple(assigned), seen_event_ids=tuple(seen))

    def prepare_act(
        self,
        nodes: Sequence[MapNode],
        *,
        act: int,
        recruit_seed: int,
        owned_species_ids: Iterable[str],
        seen_event_ids: Sequence[str],
    ) -> ActAssignment:
        """Run recruit then event assignment on the act's own seed streams."""
        with_recruits = self.assign_recruits(
            nodes, recruit_stream_seed(recruit_seed, act), owned_species_ids
        )
        return self.assign_events(
            with_recruits, event_stream_seed(recruit_seed, act), act, seen_event_ids
        )


__all__ = [
    "ACT_SEED_STRIDE",
    "ActAssignment",
    "AssignmentService",
    "EVENT_SEED_OFFSET",
    "event_stream_seed",
    "recruit_stream_seed",
]
