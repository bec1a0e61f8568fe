"""Gold rewards, spending and item purchases."""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, replace

from roguedex.config import DEFAULT_RULES, RunRules
from roguedex.data.repositories import CardsRepository
from roguedex.domain.defs import BattleNode
from roguedex.domain.roster_effects import add_cards
from roguedex.domain.state import RunState

logger = logging.getLogger(__name__)

INSUFFICIENT_GOLD = "insufficient_gold"
NOT_AN_ITEM = "not_an_item"
INVALID_MEMBER = "invalid_member"
INVALID_AMOUNT = "invalid_amount"


@dataclass(frozen=True, slots=True)
class SpendResult:
    """``state`` is the input state unchanged whenever ``success`` is False."""

    state: RunState
    success: bool
    reason: str | None = None


class EconomyService:
    def __init__(self, *, cards_repo: CardsRepository, rules: RunRules | None = None) -> None:
        self._cards_repo = cards_repo
        self._rules = rules or DEFAULT_RULES

    def add_gold(self, state: RunState, amount: int) -> RunState:
        """Add (or, for negative amounts, remove) gold without going below zero."""
        return replace(state, gold=max(0, state.gold + amount))

    def spend_gold(self, state: RunState, amount: int) -> SpendResult:
        if amount < 0:
            logger.debug("Refusing to spend a negative amount: %s", amount)
            return SpendResult(state=state, success=False, reason=INVALID_AMOUNT)
        if state.gold < amount:
            logger.debug("Insufficient gold: have %s, need %s", state.gold, amount)
            return SpendResult(state=state, success=False, reason=INSUFFICIENT_GOLD)
        return SpendResult(state=replace(state, gold=state.gold - amount), success=True)

    def has_pickup(self, state: RunState) -> bool:
        passive_id = self._rules.pickup_passive_id
        return any(
            member.is_alive and passive_id in member.passive_ids for member in state.active_party
        )

    def battle_gold_reward(self, state: RunState, node: BattleNode | None = None) -> int:
        """Gold for winning ``node`` (defaults to the current node).

        Pickup scales the base reward before act and boss bonuses are added.
        """
        if node is None:
            current = state.current_node
            node = current if isinstance(current, BattleNode) else None
        base = self._rules.base_battle_gold
        if self.has_pickup(state):
            base = math.floor(base * self._rules.pickup_gold_multiplier)
        act_bonus = self._rules.act_gold_bonus * max(0, state.current_act - 1)
        boss_bonus = self._rules.boss_gold_bonus if node is not None and node.is_boss else 0
        return base + act_bonus + boss_bonus

    def award_battle_gold(self, state: RunState, node: BattleNode | None = None) -> RunState:
        return self.add_gold(state, self.battle_gold_reward(state, node))

    def buy_item(self, state: RunState, member_index: int, card_id: str) -> SpendResult:
        """Pay for a shop item and put it in one member's deck."""
        card = self._cards_repo.get(card_id)
        if not card.is_item or card.gold_cost is None:
            return SpendResult(state=state, success=False, reason=NOT_AN_ITEM)
        if not 0 <= member_index < len(state.active_party):
            return SpendResult(state=state, success=False, reason=INVALID_MEMBER)
        result = self.spend_gold(state, card.gold_cost)
        if not result.success:
            return result
        party = list(result.state.active_party)
        party[member_index] = add_cards(party[member_index], (card_id,))
        return SpendResult(state=replace(result.state, active_party=tuple(party)), success=True)


__all__ = [
    "EconomyService",
    "INSUFFICIENT_GOLD",
    "INVALID_AMOUNT",
    "INVALID_MEMBER",
    "NOT_AN_ITEM",
    "SpendResult",
]
