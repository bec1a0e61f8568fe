"""Domain definition exports."""

from .card_def import CardDef
from .event_def import (
    EFFECT_TYPES,
    INTERACTIVE_EFFECT_TYPES,
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
    ExpEffect,
    FixedOutcome,
    FullHealEffect,
    GoldEffect,
    HealPercentEffect,
    InteractiveEffect,
    MaxHpBoostEffect,
    NothingEffect,
    OutcomeBranch,
    RandomOutcome,
    RecruitEffect,
    SetPathEffect,
    ShopDraftEffect,
    TargetedEffect,
    is_interactive,
)
from .map_def import (
    NODE_TYPES,
    ActMapDef,
    ActTransitionNode,
    BattleNode,
    CardRemovalNode,
    EventNode,
    MapNode,
    RecruitNode,
    RestNode,
    SpawnNode,
)
from .passive_def import PassiveDef
from .progression_def import ProgressionRung, ProgressionTree
from .species_def import SpeciesDef

__all__ = [
    "EFFECT_TYPES",
    "INTERACTIVE_EFFECT_TYPES",
    "NODE_TYPES",
    "ActMapDef",
    "ActTransitionNode",
    "AddDazedEffect",
    "BattleNode",
    "CardCloneEffect",
    "CardDef",
    "CardRemovalEffect",
    "CardRemovalNode",
    "ChoiceOutcome",
    "DamageEffect",
    "DrawModifierEffect",
    "EnergyModifierEffect",
    "EpicDraftEffect",
    "EventChoiceDef",
    "EventDef",
    "EventEffect",
    "EventNode",
    "ExpEffect",
    "FixedOutcome",
    "FullHealEffect",
    "GoldEffect",
    "HealPercentEffect",
    "InteractiveEffect",
    "MapNode",
    "MaxHpBoostEffect",
    "NothingEffect",
    "OutcomeBranch",
    "PassiveDef",
    "ProgressionRung",
    "ProgressionTree",
    "RandomOutcome",
    "RecruitEffect",
    "RecruitNode",
    "RestNode",
    "SetPathEffect",
    "ShopDraftEffect",
    "SpawnNode",
    "SpeciesDef",
    "TargetedEffect",
    "is_interactive",
]
