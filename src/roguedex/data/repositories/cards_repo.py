"""Card repository."""
from __future__ import annotations

from typing import Dict, List

from roguedex.core.types import RARITIES
from roguedex.data.errors import DataValidationError
from roguedex.data.repositories.base import RepositoryBase
from roguedex.domain.defs import CardDef


class CardsRepository(RepositoryBase[CardDef]):
    """Loads card definitions and answers the lookups the run engine needs."""

    def __init__(self, base_path=None) -> None:
        super().__init__("cards.json", base_path)

    def _build(self, raw: dict[str, object]) -> Dict[str, CardDef]:
        cards: Dict[str, CardDef] = {}
        for card_id, payload in raw.items():
            context = f"card '{card_id}'"
            data = self._require_mapping(payload, context)
            rarity = self._require_str(data.get("rarity"), f"{context} rarity")
            if rarity not in RARITIES:
                raise DataValidationError(f"{context} rarity '{rarity}' is invalid.")
            single_use = data.get("single_use", False)
            if not isinstance(single_use, bool):
                raise DataValidationError(f"{context} single_use must be a boolean.")
            gold_cost = data.get("gold_cost")
            if gold_cost is not None:
                gold_cost = self._require_int(gold_cost, f"{context} gold_cost")
                if gold_cost < 0:
                    raise DataValidationError(f"{context} gold_cost must be non-negative.")
            if rarity == "item" and gold_cost is None:
                raise DataValidationError(f"{context} is an item and needs a gold_cost.")
            cards[card_id] = CardDef(
                id=card_id,
                name=self._require_str(data.get("name"), f"{context} name"),
                type=self._require_str(data.get("type"), f"{context} type"),
                cost=self._require_int(data.get("cost"), f"{context} cost"),
                rarity=rarity,
                description=str(data.get("description", "")),
                pools=tuple(self._require_str_list(data.get("pools", []), f"{context} pools")),
                single_use=single_use,
                gold_cost=gold_cost,
            )
        return cards

    def is_single_use(self, card_id: str) -> bool:
        """Raises KeyError for unknown cards."""
        return self.get(card_id).single_use

    def epic_cards(self) -> List[CardDef]:
        return [card for card in self.all() if card.is_epic]

    def shop_items(self) -> List[CardDef]:
        return [card for card in self.all() if card.is_item]

    def draftable_cards(self) -> List[CardDef]:
        return [card for card in self.all() if card.is_draftable]
