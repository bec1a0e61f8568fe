from dataclasses import replace

from roguedex.domain.progression import apply_level_up, auto_level, build_member, can_level_up
from tests.helpers.run_builders import make_member, shipped_engine


def _charmander_tree():
    return shipped_engine().progression_repo.get_tree_for_form("charmander")


def _species_lookup(form_id: str):
    return shipped_engine().species_repo.get(form_id)


def test_can_level_up_requires_exp_and_room_to_grow() -> None:
    assert can_level_up(1, 4) is True
    assert can_level_up(1, 3) is False
    assert can_level_up(4, 40) is False


def test_level_up_evolves_and_adds_rewards() -> None:
    member = make_member(
        "charmander",
        current_hp=42,
        max_hp=42,
        deck=("scratch", "scratch", "ember", "ember", "growl"),
        exp=4,
        passive_ids=("kindling",),
    )

    leveled = apply_level_up(member, _charmander_tree(), _species_lookup)

    assert leveled.form_id == "charmeleon"
    assert leveled.base_species_id == "charmander"
    assert (leveled.current_hp, leveled.max_hp) == (52, 52)
    assert leveled.deck[-1] == "flamethrower"
    assert leveled.passive_ids == ("kindling", "spreading_flames")
    assert (leveled.level, leveled.exp) == (2, 0)


def test_level_up_carries_damage_taken() -> None:
    member = make_member("charmander", current_hp=30, max_hp=42, exp=5)

    leveled = apply_level_up(member, _charmander_tree(), _species_lookup)

    assert (leveled.current_hp, leveled.max_hp) == (40, 52)
    assert leveled.exp == 1


def test_level_up_keeps_knockout_flag() -> None:
    member = make_member("charmander", current_hp=0, max_hp=42, exp=4, knocked_out=True)

    leveled = apply_level_up(member, _charmander_tree(), _species_lookup)

    assert leveled.current_hp == 10
    assert leveled.knocked_out is True


def test_ineligible_member_is_returned_unchanged() -> None:
    member = make_member("charmander", current_hp=42, max_hp=42, exp=3)

    assert apply_level_up(member, _charmander_tree(), _species_lookup) is member
    assert apply_level_up(member, None, _species_lookup) is member


def test_max_level_member_does_not_level() -> None:
    member = make_member("charizard", current_hp=62, max_hp=62, level=4, exp=12)
    member = replace(member, base_species_id="charmander")

    assert apply_level_up(member, _charmander_tree(), _species_lookup) is member


def test_hp_boost_accumulates_in_modifier() -> None:
    engine = shipped_engine()
    tree = engine.progression_repo.get_tree_for_form("snorlax")
    member = make_member(
        "snorlax",
        current_hp=80,
        max_hp=80,
        deck=("tackle", "tackle", "headbutt", "harden", "harden"),
        exp=10,
    )

    leveled = auto_level(member, tree, _species_lookup)

    assert (leveled.level, leveled.exp) == (3, 2)
    assert leveled.max_hp_modifier == 20
    assert (leveled.current_hp, leveled.max_hp) == (100, 100)
    assert leveled.deck[-1] == "body-slam"
    assert leveled.passive_ids == ("thick_fat", "leftovers")


def test_evolution_at_final_rung_with_null_passive() -> None:
    engine = shipped_engine()
    tree = engine.progression_repo.get_tree_for_form("pikachu")
    member = make_member("pikachu", current_hp=38, max_hp=38, level=3, exp=4, passive_ids=("numbing_strike",))

    leveled = apply_level_up(member, tree, _species_lookup)

    assert leveled.form_id == "raichu"
    assert leveled.max_hp == 50
    assert leveled.deck[-3:] == ("body-slam", "mega-punch", "thunder")
    assert leveled.passive_ids == ("numbing_strike",)


def test_build_member_applies_rungs_up_to_level() -> None:
    engine = shipped_engine()
    species = engine.species_repo.get("charmander")

    member = build_member(species, _charmander_tree(), _species_lookup, level=3)

    assert member.form_id == "charizard"
    assert member.current_hp == member.max_hp == 62
    assert member.deck[-2:] == ("flamethrower", "fire-blast")
    assert member.passive_ids == ("kindling", "spreading_flames", "blaze_strike")
    assert member.level == 3


def test_build_member_level_one_gets_first_passive() -> None:
    engine = shipped_engine()
    species = engine.species_repo.get("meowth")
    tree = engine.progression_repo.get_tree_for_form("meowth")

    member = build_member(species, tree, _species_lookup)

    assert member.passive_ids == ("pickup",)
    assert member.current_hp == member.max_hp == 38
