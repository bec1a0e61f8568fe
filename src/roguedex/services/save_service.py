"""Serialization and backward-compatible migration of persisted runs."""
from __future__ import annotations

import copy
import logging
from dataclasses import fields
from typing import Any, Dict, List, Mapping

from roguedex.config import DEFAULT_RULES, RunRules
from roguedex.core.types import COLUMNS, ROWS
from roguedex.data.repositories import SpeciesRepository
from roguedex.domain.defs import (
    NODE_TYPES,
    ActTransitionNode,
    BattleNode,
    CardRemovalNode,
    EventNode,
    MapNode,
    RecruitNode,
)
from roguedex.domain.entities import GridPosition, RosterMember
from roguedex.domain.state import RunState
from roguedex.services.errors import SaveLoadError

logger = logging.getLogger(__name__)

SavePayload = Dict[str, Any]

LEGACY_EVENT_TYPES = {
    "train": "training_camp",
    "meditate": "meditation_chamber",
    "forget": "move_tutor",
}

_MEMBER_DEFAULTS: Dict[str, Any] = {
    "max_hp_modifier": 0,
    "level": 1,
    "exp": 0,
    "passive_ids": [],
    "knocked_out": False,
    "energy_modifier": 0,
    "draw_modifier": 0,
}


class SaveService:
    """Converts run state to and from a JSON-ready payload.

    There is no version field. :meth:`migrate` backfills whatever an older
    payload lacks and is safe to run on current payloads.
    """

    def __init__(self, *, species_repo: SpeciesRepository, rules: RunRules | None = None) -> None:
        self._species_repo = species_repo
        self._rules = rules or DEFAULT_RULES

    # Serialization

    def serialize(self, state: RunState) -> SavePayload:
        return {
            "seed": state.seed,
            "recruit_seed": state.recruit_seed,
            "current_act": state.current_act,
            "current_node_id": state.current_node_id,
            "gold": state.gold,
            "visited_node_ids": list(state.visited_node_ids),
            "seen_event_ids": list(state.seen_event_ids),
            "active_party": [self._serialize_member(member) for member in state.active_party],
            "bench": [self._serialize_member(member) for member in state.bench],
            "graveyard": [self._serialize_member(member) for member in state.graveyard],
            "nodes": [self._serialize_node(node) for node in state.nodes],
        }

    @staticmethod
    def _serialize_member(member: RosterMember) -> Dict[str, Any]:
        return {
            "base_species_id": member.base_species_id,
            "form_id": member.form_id,
            "current_hp": member.current_hp,
            "max_hp": member.max_hp,
            "max_hp_modifier": member.max_hp_modifier,
            "deck": list(member.deck),
            "position": {"row": member.position.row, "column": member.position.column},
            "level": member.level,
            "exp": member.exp,
            "passive_ids": list(member.passive_ids),
            "knocked_out": member.knocked_out,
            "energy_modifier": member.energy_modifier,
            "draw_modifier": member.draw_modifier,
        }

    @staticmethod
    def _serialize_node(node: MapNode) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": node.id,
            "type": node.node_type,
            "stage": node.stage,
            "connects_to": list(node.connects_to),
            "completed": node.completed,
            "x": node.x,
            "y": node.y,
            "size": node.size,
        }
        if isinstance(node, BattleNode):
            data["enemies"] = list(node.enemies)
            data["enemy_positions"] = [
                {"row": position.row, "column": position.column} for position in node.enemy_positions
            ]
            data["enemy_hp_multiplier"] = node.enemy_hp_multiplier
        elif isinstance(node, EventNode):
            data["event_id"] = node.event_id
            data["resolved"] = node.resolved
        elif isinstance(node, RecruitNode):
            data["species_id"] = node.species_id
            data["recruited"] = node.recruited
        elif isinstance(node, CardRemovalNode):
            data["max_removals"] = node.max_removals
        elif isinstance(node, ActTransitionNode):
            data["next_act"] = node.next_act
        return data

    # Migration

    def migrate(self, payload: Mapping[str, Any]) -> SavePayload:
        """Backfill fields missing from older payloads.

        Present fields are never overwritten. The input is not modified.
        """
        if not isinstance(payload, Mapping):
            raise SaveLoadError("Save data must be a JSON object.")
        migrated: SavePayload = copy.deepcopy(dict(payload))
        changed: List[str] = []

        if "active_party" not in migrated and "party" in migrated:
            migrated["active_party"] = migrated.pop("party")
            changed.append("active_party")
        for key in ("bench", "graveyard", "seen_event_ids"):
            if key not in migrated:
                migrated[key] = []
                changed.append(key)
        seed = migrated.get("seed")
        recruit_seed = migrated.get("recruit_seed")
        if (recruit_seed is None or isinstance(recruit_seed, bool)) and _is_int(seed):
            migrated["recruit_seed"] = seed + self._rules.recruit_seed_offset
            changed.append("recruit_seed")
        if "gold" not in migrated:
            migrated["gold"] = 0
            changed.append("gold")
        if "current_act" not in migrated:
            migrated["current_act"] = 1
            changed.append("current_act")
        if "visited_node_ids" not in migrated and isinstance(migrated.get("current_node_id"), str):
            migrated["visited_node_ids"] = [migrated["current_node_id"]]
            changed.append("visited_node_ids")

        nodes = migrated.get("nodes")
        if isinstance(nodes, list):
            for node in nodes:
                if isinstance(node, dict) and _migrate_node(node):
                    if "nodes" not in changed:
                        changed.append("nodes")
        for roster_key in ("active_party", "bench", "graveyard"):
            members = migrated.get(roster_key)
            if not isinstance(members, list):
                continue
            for member in members:
                if isinstance(member, dict) and _migrate_member(member):
                    if roster_key not in changed:
                        changed.append(roster_key)

        if changed:
            logger.info("Migrated save payload fields: %s", ", ".join(changed))
        return migrated

    # Deserialization

    def deserialize(self, payload: Mapping[str, Any]) -> RunState:
        """Migrate and rebuild a RunState, raising SaveLoadError when malformed."""
        data = self.migrate(payload)
        nodes = tuple(
            self._coerce_node(entry, f"nodes[{index}]")
            for index, entry in enumerate(self._require_list(data.get("nodes"), "nodes"))
        )
        node_ids = {node.id for node in nodes}
        if len(node_ids) != len(nodes):
            raise SaveLoadError("Save data contains duplicate node ids.")
        current_node_id = self._require_str(data.get("current_node_id"), "current_node_id")
        if current_node_id not in node_ids:
            raise SaveLoadError(f"current_node_id '{current_node_id}' is not on the map.")
        visited = tuple(self._coerce_str_list(data.get("visited_node_ids"), "visited_node_ids"))
        if len(set(visited)) != len(visited):
            raise SaveLoadError("visited_node_ids contains duplicates.")

        active_party = self._coerce_members(data.get("active_party"), "active_party")
        if len(active_party) > self._rules.max_party_size:
            raise SaveLoadError("active_party is larger than the party limit.")
        bench = self._coerce_members(data.get("bench"), "bench")
        if len(bench) > self._rules.max_bench_size:
            raise SaveLoadError("bench is larger than the bench limit.")

        gold = self._require_int(data.get("gold"), "gold")
        if gold < 0:
            raise SaveLoadError("gold must be non-negative.")
        return RunState(
            seed=self._require_int(data.get("seed"), "seed"),
            recruit_seed=self._require_int(data.get("recruit_seed"), "recruit_seed"),
            active_party=active_party,
            current_node_id=current_node_id,
            nodes=nodes,
            bench=bench,
            graveyard=self._coerce_members(data.get("graveyard"), "graveyard"),
            visited_node_ids=visited,
            current_act=self._require_int(data.get("current_act"), "current_act"),
            gold=gold,
            seen_event_ids=tuple(self._coerce_str_list(data.get("seen_event_ids"), "seen_event_ids")),
        )

    def _coerce_members(self, value: Any, context: str) -> tuple[RosterMember, ...]:
        return tuple(
            self._coerce_member(entry, f"{context}[{index}]")
            for index, entry in enumerate(self._require_list(value, context))
        )

    def _coerce_member(self, value: Any, context: str) -> RosterMember:
        data = self._require_dict(value, context)
        form_id = self._require_str(data.get("form_id"), f"{context}.form_id")
        if not self._species_repo.has(form_id):
            raise SaveLoadError(f"{context}.form_id '{form_id}' is not a known species.")
        max_hp = self._require_int(data.get("max_hp"), f"{context}.max_hp")
        current_hp = self._require_int(data.get("current_hp"), f"{context}.current_hp")
        if max_hp < 1 or not 0 <= current_hp <= max_hp:
            raise SaveLoadError(f"{context} has inconsistent HP values.")
        knocked_out = data.get("knocked_out")
        if not isinstance(knocked_out, bool):
            raise SaveLoadError(f"{context}.knocked_out must be a boolean.")
        return RosterMember(
            base_species_id=self._require_str(data.get("base_species_id"), f"{context}.base_species_id"),
            form_id=form_id,
            current_hp=current_hp,
            max_hp=max_hp,
            deck=tuple(self._coerce_str_list(data.get("deck"), f"{context}.deck")),
            position=self._coerce_position(data.get("position"), f"{context}.position"),
            max_hp_modifier=self._require_int(data.get("max_hp_modifier"), f"{context}.max_hp_modifier"),
            level=self._require_int(data.get("level"), f"{context}.level"),
            exp=self._require_int(data.get("exp"), f"{context}.exp"),
            passive_ids=tuple(self._coerce_str_list(data.get("passive_ids"), f"{context}.passive_ids")),
            knocked_out=knocked_out,
            energy_modifier=self._require_int(data.get("energy_modifier"), f"{context}.energy_modifier"),
            draw_modifier=self._require_int(data.get("draw_modifier"), f"{context}.draw_modifier"),
        )

    def _coerce_node(self, value: Any, context: str) -> MapNode:
        data = self._require_dict(value, context)
        node_type = data.get("type")
        node_cls = NODE_TYPES.get(node_type) if isinstance(node_type, str) else None
        if node_cls is None:
            raise SaveLoadError(f"{context}.type {node_type!r} is unknown.")
        allowed = {field.name for field in fields(node_cls)}
        kwargs = {key: val for key, val in data.items() if key in allowed}
        kwargs["id"] = self._require_str(data.get("id"), f"{context}.id")
        kwargs["connects_to"] = tuple(self._coerce_str_list(data.get("connects_to", []), f"{context}.connects_to"))
        if "enemies" in kwargs:
            kwargs["enemies"] = tuple(self._coerce_str_list(kwargs["enemies"], f"{context}.enemies"))
        if "enemy_positions" in kwargs:
            kwargs["enemy_positions"] = tuple(
                self._coerce_position(entry, f"{context}.enemy_positions[{index}]")
                for index, entry in enumerate(self._require_list(kwargs["enemy_positions"], context))
            )
        try:
            return node_cls(**kwargs)
        except TypeError as exc:
            raise SaveLoadError(f"{context} is missing required fields: {exc}") from exc

    def _coerce_position(self, value: Any, context: str) -> GridPosition:
        data = self._require_dict(value, context)
        row = data.get("row")
        column = data.get("column")
        if row not in ROWS or not _is_int(column) or column not in COLUMNS:
            raise SaveLoadError(f"{context} is not a valid grid position.")
        return GridPosition(row=row, column=column)

    @staticmethod
    def _require_dict(value: Any, context: str) -> Dict[str, Any]:
        if not isinstance(value, dict):
            raise SaveLoadError(f"{context} must be an object.")
        return value

    @staticmethod
    def _require_list(value: Any, context: str) -> List[Any]:
        if not isinstance(value, list):
            raise SaveLoadError(f"{context} must be a list.")
        return value

    @staticmethod
    def _require_str(value: Any, context: str) -> str:
        if not isinstance(value, str) or not value:
            raise SaveLoadError(f"{context} must be a non-empty string.")
        return value

    @staticmethod
    def _require_int(value: Any, context: str) -> int:
        if not _is_int(value):
            raise SaveLoadError(f"{context} must be an integer.")
        return value

    def _coerce_str_list(self, value: Any, context: str) -> List[str]:
        items = self._require_list(value, context)
        for index, entry in enumerate(items):
            self._require_str(entry, f"{context}[{index}]")
        return list(items)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _migrate_node(node: Dict[str, Any]) -> bool:
    changed = False
    for key in ("x", "y"):
        if node.get(key) is None:
            node[key] = 0
            changed = True
    if node.get("type") == "event" and "event_id" not in node:
        legacy = node.pop("event_type", None)
        node["event_id"] = LEGACY_EVENT_TYPES.get(legacy) if isinstance(legacy, str) else None
        changed = True
    return changed


def _migrate_member(member: Dict[str, Any]) -> bool:
    changed = False
    for key, default in _MEMBER_DEFAULTS.items():
        if key not in member:
            member[key] = copy.copy(default)
            changed = True
    if "form_id" not in member and isinstance(member.get("base_species_id"), str):
        member["form_id"] = member["base_species_id"]
        changed = True
    return changed


__all__ = ["LEGACY_EVENT_TYPES", "SavePayload", "SaveService"]
