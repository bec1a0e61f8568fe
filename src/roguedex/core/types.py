"""Shared type aliases for the core and domain layers."""
from typing import Literal

Row = Literal["front", "back"]
EffectTarget = Literal["one", "all", "random"]
RemovalMode = Literal["one", "each"]
NodeType = Literal["spawn", "battle", "rest", "event", "recruit", "card_removal", "act_transition"]
NodeSize = Literal["normal", "large"]
RestChoice = Literal["heal", "train", "meditate"]
Rarity = Literal["basic", "common", "uncommon", "rare", "epic", "curse", "item"]

ROWS: tuple[Row, ...] = ("front", "back")
COLUMNS: tuple[int, ...] = (0, 1, 2)
EFFECT_TARGETS: tuple[EffectTarget, ...] = ("one", "all", "random")
RARITIES: tuple[Rarity, ...] = ("basic", "common", "uncommon", "rare", "epic", "curse", "item")

__all__ = [
    "COLUMNS",
    "EFFECT_TARGETS",
    "EffectTarget",
    "NodeSize",
    "NodeType",
    "RARITIES",
    "ROWS",
    "Rarity",
    "RemovalMode",
    "RestChoice",
    "Row",
]
