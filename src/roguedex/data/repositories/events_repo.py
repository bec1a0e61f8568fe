"""Narrative event repository."""
from __future__ import annotations

from typing import Dict, List

from roguedex.core.types import EFFECT_TARGETS
from roguedex.data.errors import DataValidationError
from roguedex.data.repositories.base import RepositoryBase
from roguedex.domain.defs import (
    EFFECT_TYPES,
    AddDazedEffect,
    CardRemovalEffect,
    ChoiceOutcome,
    DamageEffect,
    DrawModifierEffect,
    EnergyModifierEffect,
    EpicDraftEffect,
    EventChoiceDef,
    EventDef,
    EventEffect,
    ExpEffect,
    FixedOutcome,
    FullHealEffect,
    GoldEffect,
    HealPercentEffect,
    MaxHpBoostEffect,
    OutcomeBranch,
    RandomOutcome,
    SetPathEffect,
)

MIN_CHOICES = 2
MAX_CHOICES = 4

_AMOUNT_EFFECTS = (MaxHpBoostEffect, DamageEffect, ExpEffect, EnergyModifierEffect, DrawModifierEffect)


class EventsRepository(RepositoryBase[EventDef]):
    """Loads event definitions with their choices and outcomes."""

    def __init__(self, base_path=None) -> None:
        super().__init__("events.json", base_path)

    def _build(self, raw: dict[str, object]) -> Dict[str, EventDef]:
        events: Dict[str, EventDef] = {}
        for event_id, payload in raw.items():
            context = f"event '{event_id}'"
            data = self._require_mapping(payload, context)
            act = self._require_int(data.get("act"), f"{context} act")
            if act < 1:
                raise DataValidationError(f"{context} act must be positive.")
            choice_entries = self._require_list(data.get("choices"), f"{context} choices")
            if not MIN_CHOICES <= len(choice_entries) <= MAX_CHOICES:
                raise DataValidationError(
                    f"{context} must have between {MIN_CHOICES} and {MAX_CHOICES} choices."
                )
            choices: List[EventChoiceDef] = []
            seen_ids: set[str] = set()
            for index, entry in enumerate(choice_entries):
                choice = self._build_choice(entry, f"{context} choice {index}")
                if choice.id in seen_ids:
                    raise DataValidationError(f"{context} has duplicate choice id '{choice.id}'.")
                seen_ids.add(choice.id)
                choices.append(choice)
            in_pool = data.get("in_pool", True)
            if not isinstance(in_pool, bool):
                raise DataValidationError(f"{context} in_pool must be a boolean.")
            events[event_id] = EventDef(
                id=event_id,
                act=act,
                title=self._require_str(data.get("title"), f"{context} title"),
                narrative=self._require_str(data.get("narrative"), f"{context} narrative"),
                choices=tuple(choices),
                in_pool=in_pool,
            )
        return events

    def _build_choice(self, payload: object, context: str) -> EventChoiceDef:
        data = self._require_mapping(payload, context)
        requires_bench_space = data.get("requires_bench_space", False)
        if not isinstance(requires_bench_space, bool):
            raise DataValidationError(f"{context} requires_bench_space must be a boolean.")
        return EventChoiceDef(
            id=self._require_str(data.get("id"), f"{context} id"),
            label=self._require_str(data.get("label"), f"{context} label"),
            outcome=self._build_outcome(data.get("outcome"), f"{context} outcome"),
            flavor_text=str(data.get("flavor_text", "")),
            requires_bench_space=requires_bench_space,
        )

    def _build_outcome(self, payload: object, context: str) -> ChoiceOutcome:
        data = self._require_mapping(payload, context)
        outcome_type = self._require_str(data.get("type"), f"{context} type")
        if outcome_type == "fixed":
            return FixedOutcome(
                effects=self._build_effects(data.get("effects"), f"{context} effects"),
                description=str(data.get("description", "")),
            )
        if outcome_type == "random":
            entries = self._require_list(data.get("branches"), f"{context} branches")
            if not entries:
                raise DataValidationError(f"{context} must have at least one branch.")
            branches: List[OutcomeBranch] = []
            for index, entry in enumerate(entries):
                branch_context = f"{context} branch {index}"
                branch = self._require_mapping(entry, branch_context)
                weight = self._require_number(branch.get("weight"), f"{branch_context} weight")
                if weight < 0:
                    raise DataValidationError(f"{branch_context} weight must be non-negative.")
                branches.append(
                    OutcomeBranch(
                        weight=weight,
                        effects=self._build_effects(branch.get("effects"), f"{branch_context} effects"),
                        description=str(branch.get("description", "")),
                    )
                )
            return RandomOutcome(branches=tuple(branches))
        raise DataValidationError(f"{context} type '{outcome_type}' is unknown.")

    def _build_effects(self, payload: object, context: str) -> tuple[EventEffect, ...]:
        entries = self._require_list(payload, context)
        return tuple(
            self._build_effect(entry, f"{context}[{index}]") for index, entry in enumerate(entries)
        )

    def _build_effect(self, payload: object, context: str) -> EventEffect:
        data = self._require_mapping(payload, context)
        effect_type = self._require_str(data.get("type"), f"{context} type")
        effect_cls = EFFECT_TYPES.get(effect_type)
        if effect_cls is None:
            raise DataValidationError(f"{context} type '{effect_type}' is unknown.")
        if effect_cls is GoldEffect:
            return GoldEffect(amount=self._require_int(data.get("amount"), f"{context} amount"))
        if effect_cls in _AMOUNT_EFFECTS:
            return effect_cls(
                target=self._require_target(data.get("target"), context),
                amount=self._require_int(data.get("amount"), f"{context} amount"),
            )
        if effect_cls is HealPercentEffect:
            percent = self._require_number(data.get("percent"), f"{context} percent")
            if not 0 < percent <= 1:
                raise DataValidationError(f"{context} percent must be in (0, 1].")
            return HealPercentEffect(target=self._require_target(data.get("target"), context), percent=percent)
        if effect_cls is FullHealEffect:
            return FullHealEffect(target=self._require_target(data.get("target"), context))
        if effect_cls is AddDazedEffect:
            return AddDazedEffect(
                target=self._require_target(data.get("target"), context),
                count=self._require_positive(data.get("count"), f"{context} count"),
            )
        if effect_cls is CardRemovalEffect:
            mode = data.get("mode")
            if mode not in ("one", "each"):
                raise DataValidationError(f"{context} mode must be 'one' or 'each'.")
            return CardRemovalEffect(
                mode=mode, count=self._require_positive(data.get("count"), f"{context} count")
            )
        if effect_cls is EpicDraftEffect:
            return EpicDraftEffect(picks=self._require_positive(data.get("picks"), f"{context} picks"))
        if effect_cls is SetPathEffect:
            connections = self._require_str_list(data.get("connections"), f"{context} connections")
            return SetPathEffect(connections=tuple(connections))
        return effect_cls()

    def _require_target(self, value: object, context: str):
        if value not in EFFECT_TARGETS:
            raise DataValidationError(f"{context} target must be one of {', '.join(EFFECT_TARGETS)}.")
        return value

    def _require_positive(self, value: object, context: str) -> int:
        number = self._require_int(value, context)
        if number < 1:
            raise DataValidationError(f"{context} must be positive.")
        return number

    def events_for_act(self, act: int) -> List[EventDef]:
        """Pool events for ``act``; fixed authored events are excluded."""
        return [event for event in self.all() if event.act == act and event.in_pool]
