"""Run rule constants and the tolerant rules.json loader."""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Dict, Tuple

from roguedex.data import paths

logger = logging.getLogger(__name__)

EXP_PER_LEVEL = 4
MAX_LEVEL = 4
MAX_PARTY_SIZE = 4
MAX_BENCH_SIZE = 4
RULES_FILENAME = "rules.json"

_DEFAULT_RECRUIT_POOL: Tuple[str, ...] = (
    "charmander",
    "squirtle",
    "bulbasaur",
    "pikachu",
    "pidgey",
    "rattata",
    "ekans",
    "tauros",
    "snorlax",
    "kangaskhan",
    "growlithe",
    "drowzee",
    "meowth",
    "gastly",
    "machop",
    "voltorb",
    "zubat",
)


@dataclass(frozen=True, slots=True)
class RunRules:
    """Every tunable number the run engine consults."""

    exp_per_level: int = EXP_PER_LEVEL
    max_level: int = MAX_LEVEL
    max_party_size: int = MAX_PARTY_SIZE
    max_bench_size: int = MAX_BENCH_SIZE
    starting_gold: int = 100
    base_battle_gold: int = 50
    act_gold_bonus: int = 15
    boss_gold_bonus: int = 25
    pickup_passive_id: str = "pickup"
    pickup_gold_multiplier: float = 1.25
    revive_hp_fraction: float = 0.5
    dazed_card_id: str = "dazed"
    revival_marker_card_id: str = "haunted"
    rest_heal_percent: float = 0.3
    rest_train_hp_boost: int = 5
    rest_meditate_exp: int = 1
    recruit_seed_offset: int = 12345
    final_act: int = 3
    epic_offer_size: int = 3
    shop_offer_size: int = 3
    recruit_pool: Tuple[str, ...] = _DEFAULT_RECRUIT_POOL


DEFAULT_RULES = RunRules()


def get_default_rules_path() -> Path:
    """Return the bundled rules.json path."""
    return paths.get_definition_file(RULES_FILENAME)


def _normalize_positive_int(value: object, default: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        return default
    return value


def _normalize_non_negative_int(value: object, default: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        return default
    return value


def _normalize_fraction(value: object, default: float) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return default
    if value <= 0 or value > 1:
        return default
    return float(value)


def _normalize_multiplier(value: object, default: float) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        return default
    return float(value)


def _normalize_str(value: object, default: str) -> str:
    if not isinstance(value, str) or not value:
        return default
    return value


def _normalize_pool(value: object, default: Tuple[str, ...]) -> Tuple[str, ...]:
    if not isinstance(value, list) or not value:
        return default
    if not all(isinstance(entry, str) and entry for entry in value):
        return default
    return tuple(dict.fromkeys(value))


_POSITIVE_INT_FIELDS = (
    "exp_per_level",
    "max_level",
    "max_party_size",
    "max_bench_size",
    "final_act",
    "epic_offer_size",
    "shop_offer_size",
)
_NON_NEGATIVE_INT_FIELDS = (
    "starting_gold",
    "base_battle_gold",
    "act_gold_bonus",
    "boss_gold_bonus",
    "rest_train_hp_boost",
    "rest_meditate_exp",
    "recruit_seed_offset",
)
_FRACTION_FIELDS = ("revive_hp_fraction", "rest_heal_percent")
_STR_FIELDS = ("pickup_passive_id", "dazed_card_id", "revival_marker_card_id")


def rules_from_mapping(raw: Dict[str, object]) -> RunRules:
    """Build rules from a raw mapping, falling back per field on bad values."""
    defaults = DEFAULT_RULES
    overrides: Dict[str, object] = {}
    for name in _POSITIVE_INT_FIELDS:
        overrides[name] = _normalize_positive_int(raw.get(name), getattr(defaults, name))
    for name in _NON_NEGATIVE_INT_FIELDS:
        overrides[name] = _normalize_non_negative_int(raw.get(name), getattr(defaults, name))
    for name in _FRACTION_FIELDS:
        overrides[name] = _normalize_fraction(raw.get(name), getattr(defaults, name))
    for name in _STR_FIELDS:
        overrides[name] = _normalize_str(raw.get(name), getattr(defaults, name))
    overrides["pickup_gold_multiplier"] = _normalize_multiplier(
        raw.get("pickup_gold_multiplier"), defaults.pickup_gold_multiplier
    )
    overrides["recruit_pool"] = _normalize_pool(raw.get("recruit_pool"), defaults.recruit_pool)
    known = {field.name for field in fields(RunRules)}
    unknown = sorted(key for key in raw if key not in known)
    if unknown:
        logger.debug("Ignoring unknown rules keys: %s", ", ".join(unknown))
    return replace(defaults, **overrides)


def load_rules(path: Path | None = None) -> RunRules:
    """Load rules from disk or return defaults."""
    rules_path = path or get_default_rules_path()
    try:
        raw = json.loads(rules_path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        logger.debug("Rules file %s not found; using defaults.", rules_path)
        return DEFAULT_RULES
    except (OSError, ValueError):
        logger.warning("Rules file %s is unreadable; using defaults.", rules_path)
        return DEFAULT_RULES
    if not isinstance(raw, dict):
        return DEFAULT_RULES
    return rules_from_mapping(raw)


__all__ = [
    "DEFAULT_RULES",
    "EXP_PER_LEVEL",
    "MAX_BENCH_SIZE",
    "MAX_LEVEL",
    "MAX_PARTY_SIZE",
    "RunRules",
    "get_default_rules_path",
    "load_rules",
    "rules_from_mapping",
]
