"""Roster HP, EXP, deck and battle-result operations."""
from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Callable, Sequence, Tuple

from roguedex.config import DEFAULT_RULES, RunRules
from roguedex.core.types import RestChoice
from roguedex.data.repositories import CardsRepository, ProgressionRepository, SpeciesRepository
from roguedex.domain import roster_effects
from roguedex.domain.defs import CardRemovalNode, ProgressionRung
from roguedex.domain.entities import GridPosition, RosterMember
from roguedex.domain.progression import apply_level_up, can_level_up
from roguedex.domain.state import RunState

logger = logging.getLogger(__name__)

MemberUpdate = Callable[[RosterMember], RosterMember]


@dataclass(frozen=True, slots=True)
class CombatantResult:
    """Final state of one party member as reported by the combat engine.

    ``slot_index`` is the member's index in the active party.
    """

    slot_index: int
    hp: int
    alive: bool
    position: GridPosition
    consumed_card_ids: Tuple[str, ...] = ()


def update_party_member(state: RunState, index: int, update: MemberUpdate) -> RunState:
    """Apply ``update`` to one active-party member; bad indices are no-ops."""
    if not 0 <= index < len(state.active_party):
        logger.debug("No party member at index %s", index)
        return state
    party = list(state.active_party)
    party[index] = update(party[index])
    return replace(state, active_party=tuple(party))


def update_living_party(state: RunState, update: MemberUpdate) -> RunState:
    return replace(
        state,
        active_party=tuple(
            update(member) if member.is_alive else member for member in state.active_party
        ),
    )


class RosterService:
    """Pure state updates for the active party's HP, EXP and decks."""

    def __init__(
        self,
        *,
        species_repo: SpeciesRepository,
        progression_repo: ProgressionRepository,
        cards_repo: CardsRepository,
        rules: RunRules | None = None,
    ) -> None:
        self._species_repo = species_repo
        self._progression_repo = progression_repo
        self._cards_repo = cards_repo
        self._rules = rules or DEFAULT_RULES

    # HP and EXP

    def heal_percent(self, state: RunState, index: int, percent: float) -> RunState:
        return update_party_member(state, index, lambda m: roster_effects.heal_percent(m, percent))

    def heal_party_percent(self, state: RunState, percent: float) -> RunState:
        return update_living_party(state, lambda m: roster_effects.heal_percent(m, percent))

    def full_heal_party(self, state: RunState) -> RunState:
        return update_living_party(state, roster_effects.full_heal)

    def boost_max_hp(self, state: RunState, index: int, amount: int) -> RunState:
        return update_party_member(state, index, lambda m: roster_effects.boost_max_hp(m, amount))

    def grant_exp(self, state: RunState, index: int, amount: int) -> RunState:
        return update_party_member(state, index, lambda m: roster_effects.grant_exp(m, amount))

    def damage(self, state: RunState, index: int, amount: int) -> RunState:
        return update_party_member(state, index, lambda m: roster_effects.apply_damage(m, amount))

    def apply_rest_choice(self, state: RunState, index: int, choice: RestChoice) -> RunState:
        """Heal, train or meditate one member at a rest site."""
        if choice == "heal":
            return self.heal_percent(state, index, self._rules.rest_heal_percent)
        if choice == "train":
            return self.boost_max_hp(state, index, self._rules.rest_train_hp_boost)
        if choice == "meditate":
            return self.grant_exp(state, index, self._rules.rest_meditate_exp)
        logger.debug("Unknown rest choice %r", choice)
        return state

    # Decks

    def add_card(self, state: RunState, index: int, card_id: str) -> RunState:
        self._cards_repo.get(card_id)
        return update_party_member(state, index, lambda m: roster_effects.add_cards(m, (card_id,)))

    def add_dazed(self, state: RunState, index: int, count: int) -> RunState:
        cards = (self._rules.dazed_card_id,) * max(0, count)
        return update_party_member(state, index, lambda m: roster_effects.add_cards(m, cards))

    def remove_cards(self, state: RunState, index: int, card_indices: Sequence[int]) -> RunState:
        return update_party_member(
            state, index, lambda m: roster_effects.remove_cards_at(m, card_indices)
        )

    def remove_cards_at_node(
        self, state: RunState, index: int, card_indices: Sequence[int]
    ) -> RunState:
        """Remove up to the current card-removal node's limit from one member."""
        node = state.current_node
        if not isinstance(node, CardRemovalNode):
            logger.debug("Card removal requested away from a card-removal node")
            return state
        if len(set(card_indices)) > node.max_removals:
            logger.debug("Requested %s removals, node allows %s", len(card_indices), node.max_removals)
            return state
        return self.remove_cards(state, index, card_indices)

    # Leveling

    def can_level_up(self, member: RosterMember) -> bool:
        return can_level_up(
            member.level,
            member.exp,
            exp_per_level=self._rules.exp_per_level,
            max_level=self._rules.max_level,
        )

    def any_can_level_up(self, state: RunState) -> bool:
        return any(self.can_level_up(member) for member in state.active_party)

    def next_rung(self, member: RosterMember) -> ProgressionRung | None:
        tree = self._progression_repo.get_tree_for_form(member.base_species_id)
        if tree is None:
            return None
        return tree.rung_for_level(member.level + 1)

    def level_up(self, state: RunState, index: int) -> RunState:
        """Player-confirmed level-up of one active-party member."""
        if not 0 <= index < len(state.active_party):
            return state
        member = state.active_party[index]
        leveled = apply_level_up(
            member,
            self._progression_repo.get_tree_for_form(member.base_species_id),
            self._species_repo.get,
            exp_per_level=self._rules.exp_per_level,
            max_level=self._rules.max_level,
        )
        if leveled is member:
            logger.debug("Member %s cannot level up", member.form_id)
            return state
        logger.debug("%s reached level %s", leveled.form_id, leveled.level)
        return update_party_member(state, index, lambda _: leveled)

    # Battle

    def sync_battle_results(self, state: RunState, results: Sequence[CombatantResult]) -> RunState:
        """Copy combat HP and positions back, knocking out fallen members.

        Knockouts are sticky. Consumed single-use cards leave the deck once
        per use.
        """
        party = list(state.active_party)
        for result in results:
            if not 0 <= result.slot_index < len(party):
                continue
            member = party[result.slot_index]
            hp = max(0, min(result.hp, member.max_hp))
            knocked_out = member.knocked_out or hp <= 0 or not result.alive
            consumed = [
                card_id for card_id in result.consumed_card_ids if self._cards_repo.is_single_use(card_id)
            ]
            member = roster_effects.remove_card_ids(member, consumed)
            party[result.slot_index] = replace(
                member, current_hp=hp, knocked_out=knocked_out, position=result.position
            )
        return replace(state, active_party=tuple(party))

    def move_knocked_out_to_graveyard(self, state: RunState) -> RunState:
        fallen = tuple(
            member for member in state.active_party + state.bench if member.knocked_out
        )
        if not fallen:
            return state
        logger.info("Moving %s knocked-out member(s) to the graveyard", len(fallen))
        return replace(
            state,
            active_party=tuple(m for m in state.active_party if not m.knocked_out),
            bench=tuple(m for m in state.bench if not m.knocked_out),
            graveyard=state.graveyard + fallen,
        )


__all__ = [
    "CombatantResult",
    "RosterService",
    "update_living_party",
    "update_party_member",
]
