"""Static act map validation utilities."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Sequence

from roguedex.data.repositories import EventsRepository, SpeciesRepository
from roguedex.domain.defs import (
    ActMapDef,
    ActTransitionNode,
    BattleNode,
    EventNode,
    MapNode,
    RandomOutcome,
    RecruitNode,
    SetPathEffect,
    SpawnNode,
)

Severity = str

MAX_OUTDEGREE = 4


@dataclass(frozen=True, slots=True)
class Issue:
    severity: Severity
    code: str
    message: str
    context: dict[str, str]


def format_issue(issue: Issue) -> str:
    context = " ".join(f"{key}={value}" for key, value in issue.context.items())
    suffix = f" ({context})" if context else ""
    return f"[{issue.severity}] {issue.code}: {issue.message}{suffix}"


def validate_act_map(
    act_map: ActMapDef,
    *,
    species_repo: SpeciesRepository | None = None,
    events_repo: EventsRepository | None = None,
) -> list[Issue]:
    """Check one act's graph for structural and reference problems.

    Connections written by ``set_path`` effects of fixed events count as
    edges, so hidden branches are reachable.
    """
    issues: list[Issue] = []
    act = str(act_map.act)
    nodes: Dict[str, MapNode] = {}
    for node in act_map.nodes:
        if node.id in nodes:
            issues.append(
                Issue(
                    severity="ERROR",
                    code="DUPLICATE_NODE_ID",
                    message="Duplicate map node id detected.",
                    context={"act": act, "node_id": node.id},
                )
            )
            continue
        nodes[node.id] = node

    spawn_ids = [node.id for node in nodes.values() if isinstance(node, SpawnNode)]
    if len(spawn_ids) != 1:
        issues.append(
            Issue(
                severity="ERROR",
                code="SPAWN_COUNT",
                message=f"Act must have exactly one spawn node, found {len(spawn_ids)}.",
                context={"act": act},
            )
        )

    edges = {node_id: list(node.connects_to) for node_id, node in nodes.items()}
    for node_id, node in nodes.items():
        _validate_node_edges(act, node, nodes, issues)
        _validate_coordinates(act, node, issues)
        if events_repo is not None:
            edges[node_id].extend(_hidden_edges(act, node, events_repo, issues))
        if species_repo is not None:
            _validate_species_refs(act, node, species_repo, issues)

    _validate_cycles(act, nodes, edges, issues)
    if len(spawn_ids) == 1:
        _validate_reachability(act, spawn_ids[0], nodes, edges, issues)
    return issues


def _validate_node_edges(
    act: str, node: MapNode, nodes: Dict[str, MapNode], issues: list[Issue]
) -> None:
    for index, target in enumerate(node.connects_to):
        if target not in nodes:
            issues.append(
                Issue(
                    severity="ERROR",
                    code="MISSING_NODE_REF",
                    message="Edge references missing node.",
                    context={
                        "act": act,
                        "node_id": node.id,
                        "field_path": f"connects_to[{index}]",
                        "referenced_id": target,
                    },
                )
            )
    if len(node.connects_to) > MAX_OUTDEGREE:
        issues.append(
            Issue(
                severity="ERROR",
                code="TOO_MANY_EDGES",
                message=f"Node has more than {MAX_OUTDEGREE} outgoing edges.",
                context={"act": act, "node_id": node.id},
            )
        )
    if not node.connects_to and not isinstance(node, (ActTransitionNode, BattleNode)):
        issues.append(
            Issue(
                severity="ERROR",
                code="ILLEGAL_SINK",
                message="Only act transitions and final battles may have no outgoing edges.",
                context={"act": act, "node_id": node.id},
            )
        )
    if node.connects_to and isinstance(node, ActTransitionNode):
        issues.append(
            Issue(
                severity="WARN",
                code="TRANSITION_HAS_EDGES",
                message="Act transition node has outgoing edges that are never followed.",
                context={"act": act, "node_id": node.id},
            )
        )


def _validate_coordinates(act: str, node: MapNode, issues: list[Issue]) -> None:
    if 0.0 <= node.x <= 1.0 and 0.0 <= node.y <= 1.0:
        return
    issues.append(
        Issue(
            severity="WARN",
            code="COORDINATE_OUT_OF_RANGE",
            message="Layout coordinates must be normalized to [0, 1].",
            context={"act": act, "node_id": node.id, "x": str(node.x), "y": str(node.y)},
        )
    )


def _validate_species_refs(
    act: str, node: MapNode, species_repo: SpeciesRepository, issues: list[Issue]
) -> None:
    referenced: List[tuple[str, str]] = []
    if isinstance(node, BattleNode):
        referenced = [(f"enemies[{index}]", enemy) for index, enemy in enumerate(node.enemies)]
    elif isinstance(node, RecruitNode) and node.species_id is not None:
        referenced = [("species_id", node.species_id)]
    for field_path, species_id in referenced:
        if not species_repo.has(species_id):
            issues.append(
                Issue(
                    severity="ERROR",
                    code="UNKNOWN_SPECIES",
                    message="Node references unknown species.",
                    context={
                        "act": act,
                        "node_id": node.id,
                        "field_path": field_path,
                        "referenced_id": species_id,
                    },
                )
            )


def _hidden_edges(
    act: str, node: MapNode, events_repo: EventsRepository, issues: list[Issue]
) -> List[str]:
    if not isinstance(node, EventNode) or node.event_id is None:
        return []
    if not events_repo.has(node.event_id):
        issues.append(
            Issue(
                severity="ERROR",
                code="UNKNOWN_EVENT",
                message="Node references unknown event.",
                context={"act": act, "node_id": node.id, "referenced_id": node.event_id},
            )
        )
        return []
    hidden: List[str] = []
    for choice in events_repo.get(node.event_id).choices:
        if isinstance(choice.outcome, RandomOutcome):
            effect_lists = [branch.effects for branch in choice.outcome.branches]
        else:
            effect_lists = [choice.outcome.effects]
        for effects in effect_lists:
            for effect in effects:
                if isinstance(effect, SetPathEffect):
                    hidden.extend(effect.connections)
    return hidden


def _validate_cycles(
    act: str, nodes: Dict[str, MapNode], edges: Dict[str, List[str]], issues: list[Issue]
) -> None:
    visiting: set[str] = set()
    done: set[str] = set()
    reported: set[str] = set()

    def visit(node_id: str) -> None:
        visiting.add(node_id)
        for target in edges.get(node_id, []):
            if target not in nodes or target in done:
                continue
            if target in visiting:
                if target not in reported:
                    reported.add(target)
                    issues.append(
                        Issue(
                            severity="ERROR",
                            code="CYCLE",
                            message="Map graph contains a cycle.",
                            context={"act": act, "node_id": node_id, "referenced_id": target},
                        )
                    )
                continue
            visit(target)
        visiting.discard(node_id)
        done.add(node_id)

    for node_id in sorted(nodes):
        if node_id not in done:
            visit(node_id)


def _validate_reachability(
    act: str,
    spawn_id: str,
    nodes: Dict[str, MapNode],
    edges: Dict[str, List[str]],
    issues: list[Issue],
) -> None:
    reachable: set[str] = set()
    stack: list[str] = [spawn_id]
    while stack:
        node_id = stack.pop()
        if node_id in reachable:
            continue
        reachable.add(node_id)
        for target in edges.get(node_id, []):
            if target in nodes:
                stack.append(target)
    for node_id in sorted(set(nodes) - reachable):
        issues.append(
            Issue(
                severity="WARN",
                code="UNREACHABLE_NODE",
                message="Node is unreachable from the spawn node.",
                context={"act": act, "node_id": node_id},
            )
        )


def validate_all_maps(
    maps: Sequence[ActMapDef],
    *,
    species_repo: SpeciesRepository | None = None,
    events_repo: EventsRepository | None = None,
) -> list[Issue]:
    issues: list[Issue] = []
    for act_map in maps:
        issues.extend(validate_act_map(act_map, species_repo=species_repo, events_repo=events_repo))
    return issues


__all__ = ["Issue", "format_issue", "validate_act_map", "validate_all_maps"]
