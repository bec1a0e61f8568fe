"""Narrative event definitions: effects, outcomes, choices."""
from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Tuple, Union

from roguedex.core.types import EffectTarget, RemovalMode


@dataclass(frozen=True, slots=True)
class GoldEffect:
    effect_type: ClassVar[str] = "gold"
    amount: int


@dataclass(frozen=True, slots=True)
class MaxHpBoostEffect:
    effect_type: ClassVar[str] = "max_hp_boost"
    target: EffectTarget
    amount: int


@dataclass(frozen=True, slots=True)
class DamageEffect:
    effect_type: ClassVar[str] = "damage"
    target: EffectTarget
    amount: int


@dataclass(frozen=True, slots=True)
class HealPercentEffect:
    effect_type: ClassVar[str] = "heal_percent"
    target: EffectTarget
    percent: float


@dataclass(frozen=True, slots=True)
class FullHealEffect:
    effect_type: ClassVar[str] = "full_heal"
    target: EffectTarget


@dataclass(frozen=True, slots=True)
class ExpEffect:
    effect_type: ClassVar[str] = "exp"
    target: EffectTarget
    amount: int


@dataclass(frozen=True, slots=True)
class EnergyModifierEffect:
    effect_type: ClassVar[str] = "energy_modifier"
    target: EffectTarget
    amount: int


@dataclass(frozen=True, slots=True)
class DrawModifierEffect:
    effect_type: ClassVar[str] = "draw_modifier"
    target: EffectTarget
    amount: int


@dataclass(frozen=True, slots=True)
class AddDazedEffect:
    effect_type: ClassVar[str] = "add_dazed"
    target: EffectTarget
    count: int


@dataclass(frozen=True, slots=True)
class CardRemovalEffect:
    effect_type: ClassVar[str] = "card_removal"
    mode: RemovalMode
    count: int


@dataclass(frozen=True, slots=True)
class EpicDraftEffect:
    effect_type: ClassVar[str] = "epic_draft"
    picks: int


@dataclass(frozen=True, slots=True)
class ShopDraftEffect:
    effect_type: ClassVar[str] = "shop_draft"


@dataclass(frozen=True, slots=True)
class CardCloneEffect:
    effect_type: ClassVar[str] = "card_clone"


@dataclass(frozen=True, slots=True)
class RecruitEffect:
    effect_type: ClassVar[str] = "recruit"


@dataclass(frozen=True, slots=True)
class SetPathEffect:
    """Replaces the outgoing edges of the node the event sits on."""

    effect_type: ClassVar[str] = "set_path"
    connections: Tuple[str, ...]


@dataclass(frozen=True, slots=True)
class NothingEffect:
    effect_type: ClassVar[str] = "nothing"


EventEffect = Union[
    GoldEffect,
    MaxHpBoostEffect,
    DamageEffect,
    HealPercentEffect,
    FullHealEffect,
    ExpEffect,
    EnergyModifierEffect,
    DrawModifierEffect,
    AddDazedEffect,
    CardRemovalEffect,
    EpicDraftEffect,
    ShopDraftEffect,
    CardCloneEffect,
    RecruitEffect,
    SetPathEffect,
    NothingEffect,
]

TargetedEffect = Union[
    MaxHpBoostEffect,
    DamageEffect,
    HealPercentEffect,
    FullHealEffect,
    ExpEffect,
    EnergyModifierEffect,
    DrawModifierEffect,
    AddDazedEffect,
]

InteractiveEffect = Union[
    CardRemovalEffect,
    EpicDraftEffect,
    ShopDraftEffect,
    CardCloneEffect,
    RecruitEffect,
]

EFFECT_TYPES = {
    cls.effect_type: cls
    for cls in (
        GoldEffect,
        MaxHpBoostEffect,
        DamageEffect,
        HealPercentEffect,
        FullHealEffect,
        ExpEffect,
        EnergyModifierEffect,
        DrawModifierEffect,
        AddDazedEffect,
        CardRemovalEffect,
        EpicDraftEffect,
        ShopDraftEffect,
        CardCloneEffect,
        RecruitEffect,
        SetPathEffect,
        NothingEffect,
    )
}

INTERACTIVE_EFFECT_TYPES = frozenset(
    {"card_removal", "epic_draft", "shop_draft", "card_clone", "recruit"}
)


def is_interactive(effect: EventEffect) -> bool:
    """Effects that need a follow-up player decision before they apply."""
    return effect.effect_type in INTERACTIVE_EFFECT_TYPES


@dataclass(frozen=True, slots=True)
class FixedOutcome:
    outcome_type: ClassVar[str] = "fixed"
    effects: Tuple[EventEffect, ...]
    description: str


@dataclass(frozen=True, slots=True)
class OutcomeBranch:
    weight: float
    effects: Tuple[EventEffect, ...]
    description: str


@dataclass(frozen=True, slots=True)
class RandomOutcome:
    """Weighted branches; weights need not sum to 100."""

    outcome_type: ClassVar[str] = "random"
    branches: Tuple[OutcomeBranch, ...]


ChoiceOutcome = Union[FixedOutcome, RandomOutcome]


@dataclass(frozen=True, slots=True)
class EventChoiceDef:
    id: str
    label: str
    outcome: ChoiceOutcome
    flavor_text: str = ""
    requires_bench_space: bool = False


@dataclass(frozen=True, slots=True)
class EventDef:
    """A narrative event with two to four choices."""

    id: str
    act: int
    title: str
    narrative: str
    choices: Tuple[EventChoiceDef, ...]
    in_pool: bool = True

    def get_choice(self, choice_id: str) -> EventChoiceDef | None:
        for choice in self.choices:
            if choice.id == choice_id:
                return choice
        return None
