"""Card definition model."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from roguedex.core.types import Rarity


@dataclass(frozen=True, slots=True)
class CardDef:
    id: str
    name: str
    type: str
    cost: int
    rarity: Rarity
    description: str = ""
    pools: Tuple[str, ...] = ()
    single_use: bool = False
    gold_cost: int | None = None

    @property
    def is_item(self) -> bool:
        return self.rarity == "item"

    @property
    def is_epic(self) -> bool:
        return self.rarity == "epic"

    @property
    def is_draftable(self) -> bool:
        """Cards that can show up in post-battle drafts."""
        return self.rarity not in ("item", "curse")
