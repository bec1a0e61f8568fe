"""Act map repository."""
from __future__ import annotations

from typing import Dict, List

from roguedex.core.types import COLUMNS, ROWS
from roguedex.data.errors import DataValidationError
from roguedex.data.repositories.base import RepositoryBase
from roguedex.domain.defs import (
    NODE_TYPES,
    ActMapDef,
    ActTransitionNode,
    BattleNode,
    CardRemovalNode,
    EventNode,
    MapNode,
    RecruitNode,
)
from roguedex.domain.entities import GridPosition


class MapsRepository(RepositoryBase[ActMapDef]):
    """Loads the authored node graph of each act.

    Definitions are keyed by the act number as a string. Node dataclasses
    are immutable, so handing out the cached tuple never lets one run's
    changes leak into another.
    """

    def __init__(self, base_path=None) -> None:
        super().__init__("maps.json", base_path)

    def _build(self, raw: dict[str, object]) -> Dict[str, ActMapDef]:
        acts: Dict[str, ActMapDef] = {}
        for act_key, payload in raw.items():
            context = f"act '{act_key}'"
            if not act_key.isdigit() or int(act_key) < 1:
                raise DataValidationError(f"{context} key must be a positive integer.")
            data = self._require_mapping(payload, context)
            entries = self._require_list(data.get("nodes"), f"{context} nodes")
            nodes = tuple(
                self._build_node(entry, f"{context} node {index}") for index, entry in enumerate(entries)
            )
            acts[act_key] = ActMapDef(
                act=int(act_key),
                name=self._require_str(data.get("name"), f"{context} name"),
                nodes=nodes,
            )
        return acts

    def _build_node(self, payload: object, context: str) -> MapNode:
        data = self._require_mapping(payload, context)
        node_id = self._require_str(data.get("id"), f"{context} id")
        context = f"node '{node_id}'"
        node_type = self._require_str(data.get("type"), f"{context} type")
        node_cls = NODE_TYPES.get(node_type)
        if node_cls is None:
            raise DataValidationError(f"{context} type '{node_type}' is unknown.")
        size = data.get("size")
        if size not in (None, "normal", "large"):
            raise DataValidationError(f"{context} size must be 'normal' or 'large'.")
        common = {
            "id": node_id,
            "stage": self._require_int(data.get("stage"), f"{context} stage"),
            "connects_to": tuple(
                self._require_str_list(data.get("connects_to", []), f"{context} connects_to")
            ),
            "x": self._require_number(data.get("x", 0.0), f"{context} x"),
            "y": self._require_number(data.get("y", 0.0), f"{context} y"),
            "size": size,
        }
        if node_cls is BattleNode:
            enemies = self._require_str_list(data.get("enemies"), f"{context} enemies")
            positions = self._build_positions(data.get("enemy_positions", []), context)
            if len(positions) != len(enemies):
                raise DataValidationError(f"{context} needs one enemy position per enemy.")
            multiplier = data.get("enemy_hp_multiplier")
            if multiplier is not None:
                multiplier = self._require_number(multiplier, f"{context} enemy_hp_multiplier")
            return BattleNode(
                enemies=tuple(enemies),
                enemy_positions=positions,
                enemy_hp_multiplier=multiplier,
                **common,
            )
        if node_cls is EventNode:
            return EventNode(
                event_id=self._require_optional_str(data.get("event_id"), f"{context} event_id"),
                **common,
            )
        if node_cls is RecruitNode:
            return RecruitNode(
                species_id=self._require_optional_str(data.get("species_id"), f"{context} species_id"),
                **common,
            )
        if node_cls is CardRemovalNode:
            max_removals = self._require_int(data.get("max_removals", 1), f"{context} max_removals")
            if max_removals < 1:
                raise DataValidationError(f"{context} max_removals must be positive.")
            return CardRemovalNode(max_removals=max_removals, **common)
        if node_cls is ActTransitionNode:
            return ActTransitionNode(
                next_act=self._require_int(data.get("next_act"), f"{context} next_act"), **common
            )
        return node_cls(**common)

    def _build_positions(self, payload: object, context: str) -> tuple[GridPosition, ...]:
        positions: List[GridPosition] = []
        for index, entry in enumerate(self._require_list(payload, f"{context} enemy_positions")):
            data = self._require_mapping(entry, f"{context} enemy_positions[{index}]")
            row = data.get("row")
            column = data.get("column")
            if row not in ROWS or column not in COLUMNS or isinstance(column, bool):
                raise DataValidationError(f"{context} enemy_positions[{index}] is off the grid.")
            positions.append(GridPosition(row=row, column=column))
        return tuple(positions)

    def get_act(self, act: int) -> ActMapDef:
        return self.get(str(act))

    def nodes_for_act(self, act: int) -> tuple[MapNode, ...]:
        """Fresh node tuple for ``act``. Raises KeyError for unknown acts."""
        return tuple(self.get_act(act).nodes)

    def spawn_node_id(self, act: int) -> str:
        return self.get_act(act).spawn_node_id

    def acts(self) -> List[int]:
        self._ensure_loaded()
        assert self._definitions is not None
        return sorted(int(key) for key in self._definitions)
