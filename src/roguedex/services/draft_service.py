"""Seeded card draft, epic offer and shop offer generation."""
from __future__ import annotations

from typing import Dict, List, Sequence

from roguedex.config import DEFAULT_RULES, RunRules
from roguedex.core import rng
from roguedex.data.repositories import CardsRepository, SpeciesRepository
from roguedex.domain.defs import CardDef
from roguedex.domain.state import RunState

RARITY_WEIGHTS_BY_LEVEL: Dict[int, Dict[str, float]] = {
    1: {"basic": 20, "common": 50, "uncommon": 20, "rare": 9, "epic": 1},
    2: {"basic": 8, "common": 45, "uncommon": 30, "rare": 15, "epic": 2},
    3: {"basic": 5, "common": 30, "uncommon": 35, "rare": 25, "epic": 5},
    4: {"basic": 0, "common": 15, "uncommon": 25, "rare": 40, "epic": 20},
}
RARITY_FALLBACK_ORDER = ("epic", "rare", "uncommon", "common", "basic")
TYPE_POOL_CHANCE = 0.75

EPIC_OFFER_SALT = 101
SHOP_OFFER_SALT = 202
MEMBER_DRAFT_STRIDE = 1000


def rarity_weights_for_level(level: int) -> Dict[str, float]:
    return RARITY_WEIGHTS_BY_LEVEL.get(level, RARITY_WEIGHTS_BY_LEVEL[1])


def roll_rarity(seed: int, level: int) -> tuple[str, int]:
    value, seed = rng.next_random(seed)
    roll = value * 100
    cumulative = 0.0
    for rarity, weight in rarity_weights_for_level(level).items():
        cumulative += weight
        if roll < cumulative:
            return rarity, seed
    return "epic", seed


def _cards_with_fallback(pool: Sequence[CardDef], rarity: str) -> List[CardDef]:
    """Cards of ``rarity``, else the next lower rarity, else the next higher."""
    start = RARITY_FALLBACK_ORDER.index(rarity)
    order = RARITY_FALLBACK_ORDER[start:] + tuple(reversed(RARITY_FALLBACK_ORDER[:start]))
    for candidate in order:
        cards = [card for card in pool if card.rarity == candidate]
        if cards:
            return cards
    return []


class DraftService:
    """Deterministic card offers keyed by run seed and node id."""

    def __init__(
        self,
        *,
        cards_repo: CardsRepository,
        species_repo: SpeciesRepository,
        rules: RunRules | None = None,
    ) -> None:
        self._cards_repo = cards_repo
        self._species_repo = species_repo
        self._rules = rules or DEFAULT_RULES

    def type_pool(self, types: Sequence[str]) -> List[CardDef]:
        seen: set[str] = set()
        pool: List[CardDef] = []
        for card_type in types:
            for card in self._cards_repo.draftable_cards():
                if card_type in card.pools and card.id not in seen:
                    seen.add(card.id)
                    pool.append(card)
        return pool

    def sample_draft_cards(self, seed: int, types: Sequence[str], level: int, count: int) -> List[str]:
        """Rarity-weighted draft of ``count`` card ids, mostly from the type pool.

        A card repeats only when every candidate of the rolled bucket was
        already drawn.
        """
        type_pool = self.type_pool(types)
        global_pool = self._cards_repo.draftable_cards()
        result: List[str] = []
        used: set[str] = set()
        for _ in range(count):
            value, seed = rng.next_random(seed)
            use_type_pool = value < TYPE_POOL_CHANCE
            rarity, seed = roll_rarity(seed, level)
            candidates: List[CardDef] = []
            if use_type_pool and type_pool:
                candidates = _cards_with_fallback(type_pool, rarity)
            if not candidates:
                candidates = _cards_with_fallback(global_pool, rarity) or list(global_pool)
            if not candidates:
                break
            available = [card for card in candidates if card.id not in used]
            picked, seed = rng.pick(seed, available or candidates)
            result.append(picked.id)
            used.add(picked.id)
        return result

    def draft_for_member(
        self, state: RunState, member_index: int, node_id: str, count: int = 3
    ) -> List[str]:
        """Post-battle draft for one active-party member."""
        if not 0 <= member_index < len(state.active_party):
            return []
        member = state.active_party[member_index]
        species = self._species_repo.get(member.form_id)
        seed = rng.node_seed(state.seed, node_id) + MEMBER_DRAFT_STRIDE * (member_index + 1)
        return self.sample_draft_cards(seed, species.types, member.level, count)

    def epic_offer(self, seed: int, node_id: str, count: int | None = None) -> List[str]:
        size = count if count is not None else self._rules.epic_offer_size
        cards = [card.id for card in self._cards_repo.epic_cards()]
        offer, _ = rng.sample(rng.node_seed(seed, node_id) + EPIC_OFFER_SALT, cards, size)
        return offer

    def shop_offer(self, seed: int, node_id: str, count: int | None = None) -> List[str]:
        size = count if count is not None else self._rules.shop_offer_size
        items = [card.id for card in self._cards_repo.shop_items()]
        offer, _ = rng.sample(rng.node_seed(seed, node_id) + SHOP_OFFER_SALT, items, size)
        return offer


__all__ = [
    "DraftService",
    "RARITY_FALLBACK_ORDER",
    "RARITY_WEIGHTS_BY_LEVEL",
    "TYPE_POOL_CHANCE",
    "rarity_weights_for_level",
    "roll_rarity",
]
