"""Event outcome resolution, effect application and interaction completion."""
from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Callable, Dict, List, Sequence, Tuple

from roguedex.config import DEFAULT_RULES, RunRules
from roguedex.core import rng
from roguedex.core.types import EffectTarget
from roguedex.data.repositories import EventsRepository
from roguedex.domain import roster_effects
from roguedex.domain.defs import (
    AddDazedEffect,
    CardCloneEffect,
    CardRemovalEffect,
    ChoiceOutcome,
    DamageEffect,
    DrawModifierEffect,
    EnergyModifierEffect,
    EpicDraftEffect,
    EventChoiceDef,
    EventDef,
    EventEffect,
    EventNode,
    ExpEffect,
    FixedOutcome,
    FullHealEffect,
    GoldEffect,
    HealPercentEffect,
    InteractiveEffect,
    MaxHpBoostEffect,
    NothingEffect,
    OutcomeBranch,
    RecruitEffect,
    SetPathEffect,
    ShopDraftEffect,
    is_interactive,
)
from roguedex.domain.entities import RosterMember
from roguedex.domain.state import RunState
from roguedex.services.draft_service import DraftService
from roguedex.services.economy_service import EconomyService
from roguedex.services.party_service import PartyService

logger = logging.getLogger(__name__)

RANDOM_TARGET_SEED_OFFSET = 54321
CARD_CLONE_SEED_OFFSET = 24680
CARD_CLONE_SUCCESS_CHANCE = 0.5


@dataclass(frozen=True, slots=True)
class ResolvedOutcome:
    effects: Tuple[EventEffect, ...]
    description: str
    branch_index: int | None = None


@dataclass(frozen=True, slots=True)
class PendingInteraction:
    """An interactive effect waiting for the player's decision.

    ``member_index`` is the party member the player had selected when the
    choice was made, if any.
    """

    effect: InteractiveEffect
    node_id: str
    member_index: int | None = None


@dataclass(frozen=True, slots=True)
class EffectProcessResult:
    state: RunState
    pending: Tuple[PendingInteraction, ...] = ()


@dataclass(frozen=True, slots=True)
class EventChoiceResult:
    state: RunState
    description: str
    pending: Tuple[PendingInteraction, ...] = ()


@dataclass(frozen=True, slots=True)
class InteractionChoice:
    """The player's answer to a pending interaction.

    Card removal uses ``member_index`` + ``card_indices`` in ``one`` mode and
    ``removals`` (member index, card indices) pairs in ``each`` mode. Drafts
    use ``additions`` (member index, card id) pairs. Card clone uses
    ``member_index`` + the first of ``card_indices``. Recruit uses
    ``species_id``.
    """

    member_index: int | None = None
    card_indices: Tuple[int, ...] = ()
    removals: Tuple[Tuple[int, Tuple[int, ...]], ...] = ()
    additions: Tuple[Tuple[int, str], ...] = ()
    species_id: str | None = None


def resolve_outcome(outcome: ChoiceOutcome, seed: int, node_id: str) -> ResolvedOutcome:
    """Pick the effects of a choice outcome.

    Random outcomes roll once on the node's seed and take the first branch
    whose running weight exceeds the roll, falling back to the last branch.
    """
    if isinstance(outcome, FixedOutcome):
        return ResolvedOutcome(effects=outcome.effects, description=outcome.description)
    value, _ = rng.next_random(rng.node_seed(seed, node_id))
    return select_branch(outcome.branches, value * 100)


def select_branch(branches: Sequence[OutcomeBranch], roll: float) -> ResolvedOutcome:
    cumulative = 0.0
    for index, branch in enumerate(branches):
        cumulative += branch.weight
        if roll < cumulative:
            return ResolvedOutcome(branch.effects, branch.description, index)
    last = len(branches) - 1
    return ResolvedOutcome(branches[last].effects, branches[last].description, last)


def living_indices(party: Sequence[RosterMember]) -> List[int]:
    return [index for index, member in enumerate(party) if member.is_alive]


def resolve_targets(
    state: RunState, target: EffectTarget, member_index: int | None, seed: int
) -> List[int]:
    """Party indices an effect lands on; empty when nobody is alive."""
    alive = living_indices(state.active_party)
    if not alive:
        return []
    if target == "all":
        return alive
    if target == "random":
        picked, _ = rng.pick(seed + RANDOM_TARGET_SEED_OFFSET, alive)
        return [picked]
    if member_index is not None and member_index in alive:
        return [member_index]
    return [alive[0]]


class EventService:
    """Resolves event choices and applies their effects to a run."""

    def __init__(
        self,
        *,
        events_repo: EventsRepository,
        party_service: PartyService,
        economy_service: EconomyService,
        draft_service: DraftService,
        rules: RunRules | None = None,
    ) -> None:
        self._events_repo = events_repo
        self._party_service = party_service
        self._economy_service = economy_service
        self._draft_service = draft_service
        self._rules = rules or DEFAULT_RULES

    def event_for_node(self, state: RunState, node_id: str | None = None) -> EventDef | None:
        node = state.get_node(node_id or state.current_node_id)
        if not isinstance(node, EventNode) or node.event_id is None:
            return None
        return self._events_repo.get(node.event_id)

    def is_choice_available(self, state: RunState, choice: EventChoiceDef) -> bool:
        if choice.requires_bench_space:
            return self._party_service.bench_has_space(state)
        return True

    def choose(
        self,
        state: RunState,
        choice_id: str,
        member_index: int | None = None,
        node_id: str | None = None,
    ) -> EventChoiceResult:
        """Resolve and apply one choice of the event on the current node.

        Unknown or unavailable choices, nodes other than the current one, and
        events that were already resolved leave the state unchanged.
        """
        node_id = node_id or state.current_node_id
        node = state.get_node(node_id)
        if node_id != state.current_node_id or node_id not in state.visited_node_ids:
            logger.debug("Event at %s is not the current node", node_id)
            return EventChoiceResult(state=state, description="")
        if not isinstance(node, EventNode) or node.resolved:
            logger.debug("No open event at %s", node_id)
            return EventChoiceResult(state=state, description="")
        event = self.event_for_node(state, node_id)
        choice = event.get_choice(choice_id) if event is not None else None
        if choice is None or not self.is_choice_available(state, choice):
            logger.debug("Choice %s is not available at %s", choice_id, node_id)
            return EventChoiceResult(state=state, description="")
        resolved = resolve_outcome(choice.outcome, state.seed, node_id)
        processed = self.process_effects(state, resolved.effects, member_index, node_id)
        seen = processed.state.seen_event_ids
        if event.id not in seen:
            seen = seen + (event.id,)
        updated = replace(processed.state, seen_event_ids=seen)
        # set_path may have replaced the node, so mark the latest copy.
        current = updated.get_node(node_id)
        updated = updated.replace_node(replace(current, resolved=True))
        return EventChoiceResult(
            state=updated,
            description=resolved.description,
            pending=processed.pending,
        )

    def process_effects(
        self,
        state: RunState,
        effects: Sequence[EventEffect],
        member_index: int | None,
        node_id: str,
    ) -> EffectProcessResult:
        """Apply immediate effects in order and queue interactive ones."""
        seed = rng.node_seed(state.seed, node_id)
        pending: List[PendingInteraction] = []
        for effect in effects:
            if is_interactive(effect):
                pending.append(PendingInteraction(effect=effect, node_id=node_id, member_index=member_index))
                continue
            state = self._apply_effect(state, effect, member_index, node_id, seed)
        return EffectProcessResult(state=state, pending=tuple(pending))

    def _apply_effect(
        self, state: RunState, effect: EventEffect, member_index: int | None, node_id: str, seed: int
    ) -> RunState:
        if isinstance(effect, NothingEffect):
            return state
        if isinstance(effect, GoldEffect):
            return self._economy_service.add_gold(state, effect.amount)
        if isinstance(effect, SetPathEffect):
            node = state.get_node(node_id)
            if node is None:
                return state
            return state.replace_node(replace(node, connects_to=effect.connections))
        update = self._member_update(effect)
        if update is None:
            logger.debug("Effect %s has no immediate application", effect.effect_type)
            return state
        targets = resolve_targets(state, effect.target, member_index, seed)
        party = list(state.active_party)
        for index in targets:
            party[index] = update(party[index])
        return replace(state, active_party=tuple(party))

    def _member_update(self, effect: EventEffect) -> Callable[[RosterMember], RosterMember] | None:
        if isinstance(effect, MaxHpBoostEffect):
            return lambda m: roster_effects.boost_max_hp(m, effect.amount)
        if isinstance(effect, DamageEffect):
            return lambda m: roster_effects.apply_damage(m, effect.amount)
        if isinstance(effect, HealPercentEffect):
            return lambda m: roster_effects.heal_percent(m, effect.percent)
        if isinstance(effect, FullHealEffect):
            return roster_effects.full_heal
        if isinstance(effect, ExpEffect):
            return lambda m: roster_effects.grant_exp(m, effect.amount)
        if isinstance(effect, EnergyModifierEffect):
            return lambda m: roster_effects.add_energy_modifier(m, effect.amount)
        if isinstance(effect, DrawModifierEffect):
            return lambda m: roster_effects.add_draw_modifier(m, effect.amount)
        if isinstance(effect, AddDazedEffect):
            cards = (self._rules.dazed_card_id,) * effect.count
            return lambda m: roster_effects.add_cards(m, cards)
        return None

    # Interactions

    def epic_offer(self, state: RunState, pending: PendingInteraction) -> List[str]:
        picks = pending.effect.picks if isinstance(pending.effect, EpicDraftEffect) else 1
        size = max(self._rules.epic_offer_size, picks)
        return self._draft_service.epic_offer(state.seed, pending.node_id, size)

    def shop_offer(self, state: RunState, pending: PendingInteraction) -> List[str]:
        return self._draft_service.shop_offer(state.seed, pending.node_id)

    def complete_interaction(
        self, state: RunState, pending: PendingInteraction, choice: InteractionChoice
    ) -> RunState:
        """Apply the player's decision for a queued interactive effect.

        Choices that do not fit the effect leave the state unchanged.
        """
        effect = pending.effect
        if isinstance(effect, CardRemovalEffect):
            return self._complete_card_removal(state, effect, choice)
        if isinstance(effect, EpicDraftEffect):
            return self._complete_draft(state, choice, effect.picks, self.epic_offer(state, pending))
        if isinstance(effect, ShopDraftEffect):
            return self._complete_draft(state, choice, 1, self.shop_offer(state, pending))
        if isinstance(effect, CardCloneEffect):
            return self._complete_card_clone(state, pending, choice)
        if isinstance(effect, RecruitEffect):
            pool = self._party_service.available_recruit_pool(state)
            if choice.species_id not in pool:
                logger.debug("Species %s is not recruitable", choice.species_id)
                return state
            return self._party_service.recruit_species(state, choice.species_id)
        return state

    def _complete_card_removal(
        self, state: RunState, effect: CardRemovalEffect, choice: InteractionChoice
    ) -> RunState:
        if effect.mode == "one":
            requests = [(choice.member_index, choice.card_indices)]
        else:
            requests = list(choice.removals)
        # Indices for the same member are merged so the cap holds per member.
        merged: Dict[int | None, List[int]] = {}
        for member_index, card_indices in requests:
            merged.setdefault(member_index, []).extend(card_indices)
        alive = set(living_indices(state.active_party))
        party = list(state.active_party)
        for member_index, card_indices in merged.items():
            if member_index not in alive or len(set(card_indices)) > effect.count:
                logger.debug("Rejected card removal for member %s", member_index)
                return state
            party[member_index] = roster_effects.remove_cards_at(party[member_index], card_indices)
        return replace(state, active_party=tuple(party))

    def _complete_draft(
        self, state: RunState, choice: InteractionChoice, picks: int, offer: Sequence[str]
    ) -> RunState:
        if len(choice.additions) > picks:
            return state
        party = list(state.active_party)
        for member_index, card_id in choice.additions:
            if card_id not in offer or not 0 <= member_index < len(party):
                logger.debug("Rejected draft pick %s for member %s", card_id, member_index)
                return state
            party[member_index] = roster_effects.add_cards(party[member_index], (card_id,))
        return replace(state, active_party=tuple(party))

    def _complete_card_clone(
        self, state: RunState, pending: PendingInteraction, choice: InteractionChoice
    ) -> RunState:
        index = choice.member_index
        if index is None or index not in living_indices(state.active_party) or not choice.card_indices:
            return state
        member = state.active_party[index]
        card_index = choice.card_indices[0]
        if not 0 <= card_index < len(member.deck):
            return state
        value, _ = rng.next_random(rng.node_seed(state.seed, pending.node_id) + CARD_CLONE_SEED_OFFSET)
        if value < CARD_CLONE_SUCCESS_CHANCE:
            updated = roster_effects.add_cards(member, (member.deck[card_index],))
        else:
            updated = roster_effects.remove_cards_at(member, (card_index,))
        party = list(state.active_party)
        party[index] = updated
        return replace(state, active_party=tuple(party))


__all__ = [
    "CARD_CLONE_SEED_OFFSET",
    "EffectProcessResult",
    "EventChoiceResult",
    "EventService",
    "InteractionChoice",
    "PendingInteraction",
    "RANDOM_TARGET_SEED_OFFSET",
    "ResolvedOutcome",
    "living_indices",
    "resolve_outcome",
    "resolve_targets",
    "select_branch",
]
