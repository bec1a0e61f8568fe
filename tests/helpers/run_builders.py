from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from typing import Sequence

from roguedex.domain.defs import BattleNode, MapNode, RestNode, SpawnNode
from roguedex.domain.entities import GridPosition, RosterMember
from roguedex.domain.state import RunState
from roguedex.services.engine import RunEngine, create_engine


@lru_cache(maxsize=1)
def shipped_engine() -> RunEngine:
    """Engine over the bundled definitions, shared across tests."""
    return create_engine()


def write_json(path: Path, data: object) -> None:
    path.write_text(json.dumps(data), encoding="utf-8")


def make_member(
    species_id: str = "charmander",
    *,
    form_id: str | None = None,
    current_hp: int = 40,
    max_hp: int = 40,
    deck: Sequence[str] = ("tackle", "tackle", "ember", "growl", "scratch"),
    row: str = "front",
    column: int = 0,
    level: int = 1,
    exp: int = 0,
    max_hp_modifier: int = 0,
    passive_ids: Sequence[str] = (),
    knocked_out: bool = False,
) -> RosterMember:
    return RosterMember(
        base_species_id=species_id,
        form_id=form_id or species_id,
        current_hp=current_hp,
        max_hp=max_hp,
        deck=tuple(deck),
        position=GridPosition(row=row, column=column),
        max_hp_modifier=max_hp_modifier,
        level=level,
        exp=exp,
        passive_ids=tuple(passive_ids),
        knocked_out=knocked_out,
    )


def make_line_nodes() -> tuple[MapNode, ...]:
    """spawn -> battle -> rest, with the spawn already completed."""
    return (
        SpawnNode(id="spawn", stage=0, connects_to=("battle",), completed=True),
        BattleNode(
            id="battle",
            stage=1,
            connects_to=("rest",),
            enemies=("rattata",),
            enemy_positions=(GridPosition(row="front", column=1),),
        ),
        RestNode(id="rest", stage=2),
    )


def make_state(
    party: Sequence[RosterMember] | None = None,
    *,
    bench: Sequence[RosterMember] = (),
    graveyard: Sequence[RosterMember] = (),
    nodes: Sequence[MapNode] | None = None,
    current_node_id: str = "spawn",
    gold: int = 100,
    seed: int = 42,
    current_act: int = 1,
) -> RunState:
    return RunState(
        seed=seed,
        recruit_seed=seed + 12345,
        active_party=tuple(party if party is not None else (make_member(),)),
        current_node_id=current_node_id,
        nodes=tuple(nodes if nodes is not None else make_line_nodes()),
        bench=tuple(bench),
        graveyard=tuple(graveyard),
        visited_node_ids=(current_node_id,),
        current_act=current_act,
        gold=gold,
    )
