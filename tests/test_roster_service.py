import pytest

from roguedex.domain import roster_effects
from roguedex.domain.defs import CardRemovalNode, SpawnNode
from roguedex.domain.entities import GridPosition
from roguedex.services.roster_service import CombatantResult
from tests.helpers.run_builders import make_member, make_state, shipped_engine


def _roster():
    return shipped_engine().roster


def test_heal_percent_floors_and_caps() -> None:
    member = make_member(current_hp=10, max_hp=45)

    healed = roster_effects.heal_percent(member, 0.3)
    capped = roster_effects.heal_percent(make_member(current_hp=40, max_hp=45), 0.5)

    assert healed.current_hp == 23
    assert capped.current_hp == 45


def test_heals_skip_knocked_out_members() -> None:
    fallen = make_member(current_hp=0, knocked_out=True)

    assert roster_effects.heal_percent(fallen, 1.0) is fallen
    assert roster_effects.full_heal(fallen) is fallen


def test_damage_never_kills() -> None:
    member = make_member(current_hp=10)

    assert roster_effects.apply_damage(member, 25).current_hp == 1
    assert roster_effects.apply_damage(member, 4).current_hp == 6


def test_boost_max_hp_tracks_modifier() -> None:
    boosted = roster_effects.boost_max_hp(make_member(current_hp=50, max_hp=50), 5)

    assert (boosted.current_hp, boosted.max_hp, boosted.max_hp_modifier) == (55, 55, 5)


def test_grant_exp_never_goes_negative() -> None:
    assert roster_effects.grant_exp(make_member(exp=1), -3).exp == 0


def test_remove_cards_at_uses_original_indices() -> None:
    member = make_member(deck=("a", "b", "c", "d", "e"))

    assert roster_effects.remove_cards_at(member, [3, 1]).deck == ("a", "c", "e")
    assert roster_effects.remove_cards_at(member, [1, 3]).deck == ("a", "c", "e")
    assert roster_effects.remove_cards_at(member, [1, 1, 9]).deck == ("a", "c", "d", "e")


def test_remove_card_ids_removes_one_copy_each() -> None:
    member = make_member(deck=("potion", "tackle", "potion"))

    assert roster_effects.remove_card_ids(member, ["potion"]).deck == ("tackle", "potion")


def test_rest_choices() -> None:
    state = make_state([make_member(current_hp=10, max_hp=40)])
    roster = _roster()

    healed = roster.apply_rest_choice(state, 0, "heal")
    trained = roster.apply_rest_choice(state, 0, "train")
    meditated = roster.apply_rest_choice(state, 0, "meditate")

    assert healed.active_party[0].current_hp == 22
    assert (trained.active_party[0].current_hp, trained.active_party[0].max_hp) == (15, 45)
    assert meditated.active_party[0].exp == 1


def test_party_heals_only_touch_living_members() -> None:
    fallen = make_member(current_hp=0, knocked_out=True)
    hurt = make_member("squirtle", current_hp=5, max_hp=46, column=1)
    state = make_state([fallen, hurt])

    healed = _roster().full_heal_party(state)

    assert healed.active_party[0] is fallen
    assert healed.active_party[1].current_hp == 46


def test_bad_member_index_is_a_no_op() -> None:
    state = make_state()

    assert _roster().boost_max_hp(state, 5, 10) is state


def test_add_card_rejects_unknown_card() -> None:
    with pytest.raises(KeyError):
        _roster().add_card(make_state(), 0, "not-a-card")


def test_add_dazed_appends_curses() -> None:
    state = _roster().add_dazed(make_state(), 0, 2)

    assert state.active_party[0].deck[-2:] == ("dazed", "dazed")


def test_remove_cards_at_node_respects_limit() -> None:
    nodes = (
        SpawnNode(id="spawn", stage=0, connects_to=("parlor",), completed=True),
        CardRemovalNode(id="parlor", stage=1, max_removals=1),
    )
    state = make_state(nodes=nodes, current_node_id="parlor")
    roster = _roster()

    assert roster.remove_cards_at_node(state, 0, [0, 1]) is state
    trimmed = roster.remove_cards_at_node(state, 0, [0])
    assert trimmed.active_party[0].deck == ("tackle", "ember", "growl", "scratch")

    away = make_state()
    assert roster.remove_cards_at_node(away, 0, [0]) is away


def test_level_up_requires_enough_exp() -> None:
    member = make_member(
        current_hp=42, max_hp=42, deck=("scratch", "scratch", "ember", "ember", "growl"), exp=4
    )
    state = make_state([member])
    roster = _roster()

    assert roster.any_can_level_up(state) is True
    rung = roster.next_rung(member)
    assert rung is not None and rung.evolves_to == "charmeleon"

    leveled = roster.level_up(state, 0)

    assert leveled.active_party[0].form_id == "charmeleon"
    assert leveled.active_party[0].level == 2
    assert roster.level_up(leveled, 0) is leveled


def test_sync_battle_results_clamps_and_knocks_out() -> None:
    first = make_member(current_hp=40, max_hp=40, deck=("tackle", "potion", "potion"))
    second = make_member("squirtle", current_hp=46, max_hp=46, column=1)
    state = make_state([first, second])
    back = GridPosition(row="back", column=0)
    results = [
        CombatantResult(slot_index=0, hp=55, alive=True, position=back, consumed_card_ids=("potion", "tackle")),
        CombatantResult(slot_index=1, hp=-4, alive=False, position=second.position),
        CombatantResult(slot_index=7, hp=1, alive=True, position=back),
    ]

    synced = _roster().sync_battle_results(state, results)

    assert synced.active_party[0].current_hp == 40
    assert synced.active_party[0].position == back
    assert synced.active_party[0].deck == ("tackle", "potion")
    assert synced.active_party[1].current_hp == 0
    assert synced.active_party[1].knocked_out is True


def test_knockout_is_sticky_across_sync() -> None:
    fallen = make_member(current_hp=0, knocked_out=True)
    state = make_state([fallen])

    synced = _roster().sync_battle_results(
        state, [CombatantResult(slot_index=0, hp=20, alive=True, position=fallen.position)]
    )

    assert synced.active_party[0].knocked_out is True


def test_knocked_out_members_move_to_graveyard() -> None:
    fallen = make_member(current_hp=0, knocked_out=True)
    standing = make_member("squirtle", column=1)
    benched_fallen = make_member("pikachu", current_hp=0, knocked_out=True)
    state = make_state([fallen, standing], bench=[benched_fallen])

    moved = _roster().move_knocked_out_to_graveyard(state)

    assert moved.active_party == (standing,)
    assert moved.bench == ()
    assert moved.graveyard == (fallen, benched_fallen)
    assert _roster().move_knocked_out_to_graveyard(moved) is moved
