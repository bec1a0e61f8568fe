"""Map node variants for an act graph."""
from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Tuple, Union

from roguedex.core.types import NodeSize
from roguedex.domain.entities.position import GridPosition


@dataclass(frozen=True, slots=True, kw_only=True)
class _NodeFields:
    id: str
    stage: int
    connects_to: Tuple[str, ...] = ()
    completed: bool = False
    x: float = 0.0
    y: float = 0.0
    size: NodeSize | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class SpawnNode(_NodeFields):
    node_type: ClassVar[str] = "spawn"


@dataclass(frozen=True, slots=True, kw_only=True)
class BattleNode(_NodeFields):
    node_type: ClassVar[str] = "battle"
    enemies: Tuple[str, ...] = ()
    enemy_positions: Tuple[GridPosition, ...] = ()
    enemy_hp_multiplier: float | None = None

    @property
    def is_boss(self) -> bool:
        return self.enemy_hp_multiplier is not None and self.enemy_hp_multiplier > 1


@dataclass(frozen=True, slots=True, kw_only=True)
class RestNode(_NodeFields):
    node_type: ClassVar[str] = "rest"


@dataclass(frozen=True, slots=True, kw_only=True)
class EventNode(_NodeFields):
    """``event_id`` is None for open slots filled at act generation.

    ``resolved`` is set once a choice has been made on the node.
    """

    node_type: ClassVar[str] = "event"
    event_id: str | None = None
    resolved: bool = False


@dataclass(frozen=True, slots=True, kw_only=True)
class RecruitNode(_NodeFields):
    """``species_id`` is None for open slots filled at act generation."""

    node_type: ClassVar[str] = "recruit"
    species_id: str | None = None
    recruited: bool = False


@dataclass(frozen=True, slots=True, kw_only=True)
class CardRemovalNode(_NodeFields):
    node_type: ClassVar[str] = "card_removal"
    max_removals: int = 1


@dataclass(frozen=True, slots=True, kw_only=True)
class ActTransitionNode(_NodeFields):
    node_type: ClassVar[str] = "act_transition"
    next_act: int


MapNode = Union[
    SpawnNode,
    BattleNode,
    RestNode,
    EventNode,
    RecruitNode,
    CardRemovalNode,
    ActTransitionNode,
]

NODE_TYPES = {
    cls.node_type: cls
    for cls in (
        SpawnNode,
        BattleNode,
        RestNode,
        EventNode,
        RecruitNode,
        CardRemovalNode,
        ActTransitionNode,
    )
}


@dataclass(frozen=True, slots=True)
class ActMapDef:
    act: int
    name: str
    nodes: Tuple[MapNode, ...]

    @property
    def spawn_node_id(self) -> str:
        for node in self.nodes:
            if isinstance(node, SpawnNode):
                return node.id
        raise KeyError(f"act {self.act} has no spawn node")
