from pathlib import Path

from roguedex.config import DEFAULT_RULES, load_rules, rules_from_mapping


def test_load_rules_reads_shipped_file() -> None:
    rules = load_rules()

    assert rules.exp_per_level == 4
    assert rules.starting_gold == 100
    assert "meowth" in rules.recruit_pool


def test_missing_rules_file_returns_defaults(tmp_path: Path) -> None:
    assert load_rules(tmp_path / "rules.json") == DEFAULT_RULES


def test_malformed_rules_file_returns_defaults(tmp_path: Path) -> None:
    path = tmp_path / "rules.json"
    path.write_text("{not json", encoding="utf-8")

    assert load_rules(path) == DEFAULT_RULES


def test_invalid_fields_fall_back_individually() -> None:
    rules = rules_from_mapping(
        {
            "starting_gold": 250,
            "exp_per_level": "four",
            "revive_hp_fraction": 3.0,
            "recruit_pool": ["pikachu", "pikachu", "zubat"],
            "unknown_key": True,
        }
    )

    assert rules.starting_gold == 250
    assert rules.exp_per_level == DEFAULT_RULES.exp_per_level
    assert rules.revive_hp_fraction == DEFAULT_RULES.revive_hp_fraction
    assert rules.recruit_pool == ("pikachu", "zubat")


def test_boolean_is_not_accepted_as_integer() -> None:
    rules = rules_from_mapping({"max_bench_size": True})

    assert rules.max_bench_size == DEFAULT_RULES.max_bench_size
