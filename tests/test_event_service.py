from dataclasses import replace

from roguedex.domain.defs import (
    CardCloneEffect,
    CardRemovalEffect,
    EpicDraftEffect,
    EventNode,
    GoldEffect,
    OutcomeBranch,
    RecruitEffect,
    ShopDraftEffect,
    SpawnNode,
)
from roguedex.services.event_service import (
    InteractionChoice,
    PendingInteraction,
    resolve_outcome,
    resolve_targets,
    select_branch,
)
from tests.helpers.run_builders import make_member, make_state, shipped_engine


def _events():
    return shipped_engine().events


def _event_state(event_id: str, party=None, **kwargs):
    nodes = (
        SpawnNode(id="spawn", stage=0, connects_to=("evt",), completed=True),
        EventNode(id="evt", stage=1, connects_to=("next",), event_id=event_id, completed=True),
        EventNode(id="next", stage=2, event_id="training_camp"),
    )
    return make_state(party, nodes=nodes, current_node_id="evt", **kwargs)


def _duo():
    return [make_member(current_hp=30, max_hp=40), make_member("squirtle", current_hp=46, max_hp=46, column=1)]


def _branches(*weights: float):
    return tuple(
        OutcomeBranch(weight=weight, effects=(GoldEffect(amount=index),), description=str(index))
        for index, weight in enumerate(weights)
    )


def test_select_branch_uses_strict_running_total() -> None:
    branches = _branches(50, 50)

    assert select_branch(branches, 49.99).branch_index == 0
    assert select_branch(branches, 50).branch_index == 1


def test_select_branch_falls_back_to_last_branch() -> None:
    assert select_branch(_branches(10, 20), 95).branch_index == 1
    assert select_branch(_branches(0, 0), 0).branch_index == 1


def test_random_outcome_is_deterministic_per_node() -> None:
    event = shipped_engine().events_repo.get("trapped_hallway")
    rush = event.get_choice("rush")
    assert rush is not None

    first = resolve_outcome(rush.outcome, 1234, "s3-event-upper")
    second = resolve_outcome(rush.outcome, 1234, "s3-event-upper")

    assert first == second
    assert first.branch_index in (0, 1)


def test_train_hard_boosts_chosen_member() -> None:
    state = _event_state("training_camp", _duo())

    result = _events().choose(state, "train", member_index=1)

    boosted = result.state.active_party[1]
    assert (boosted.current_hp, boosted.max_hp, boosted.max_hp_modifier) == (51, 51, 5)
    assert result.state.active_party[0] == state.active_party[0]
    assert result.description == "The training pays off! Max HP increased."
    assert result.pending == ()
    assert "training_camp" in result.state.seen_event_ids


def test_event_can_only_be_resolved_once() -> None:
    events = _events()
    state = _event_state("training_camp", _duo())

    first = events.choose(state, "train", member_index=1)
    again = events.choose(first.state, "train", member_index=1)

    node = first.state.get_node("evt")
    assert isinstance(node, EventNode) and node.resolved is True
    assert again.state is first.state
    assert again.state.active_party[1].max_hp_modifier == 5


def test_choice_on_a_node_other_than_the_current_one_is_ignored() -> None:
    state = _event_state("training_camp", _duo())

    result = _events().choose(state, "train", member_index=0, node_id="next")

    assert result.state is state
    assert result.description == ""


def test_choice_on_an_unvisited_current_node_is_ignored() -> None:
    state = replace(_event_state("training_camp", _duo()), visited_node_ids=("spawn",))

    assert _events().choose(state, "train", member_index=0).state is state


def test_single_target_defaults_to_first_living_member() -> None:
    party = [make_member(current_hp=0, knocked_out=True), make_member("squirtle", column=1)]
    state = _event_state("training_camp", party)

    result = _events().choose(state, "train")

    assert result.state.active_party[0] == party[0]
    assert result.state.active_party[1].max_hp == 45


def test_damage_all_skips_fallen_and_never_kills() -> None:
    party = [
        make_member(current_hp=4, max_hp=40),
        make_member("squirtle", current_hp=0, max_hp=46, knocked_out=True, column=1),
        make_member("pikachu", current_hp=38, max_hp=38, column=2),
    ]
    state = _event_state("trapped_hallway", party)

    result = _events().choose(state, "careful")

    assert [member.current_hp for member in result.state.active_party] == [1, 0, 32]


def test_gold_effect_adds_gold() -> None:
    state = _event_state("wandering_merchant", gold=10)

    assert _events().choose(state, "haggle").state.gold == 40


def test_unknown_choice_leaves_state_unchanged() -> None:
    state = _event_state("training_camp")

    result = _events().choose(state, "dance")

    assert result.state is state
    assert result.description == ""


def test_interactive_effects_are_queued_after_immediate_ones() -> None:
    state = _event_state("locked_vault", _duo())

    result = _events().choose(state, "force")

    assert [type(pending.effect) for pending in result.pending] == [EpicDraftEffect, ShopDraftEffect]
    assert [member.current_hp for member in result.state.active_party] == [22, 38]
    assert all(pending.node_id == "evt" for pending in result.pending)


def test_epic_draft_only_accepts_offered_cards() -> None:
    events = _events()
    state = _event_state("fallen_trainer", _duo())
    pending = PendingInteraction(effect=EpicDraftEffect(picks=1), node_id="evt")
    offer = events.epic_offer(state, pending)

    drafted = events.complete_interaction(
        state, pending, InteractionChoice(additions=((1, offer[0]),))
    )
    not_offered = next(
        card.id for card in shipped_engine().cards_repo.epic_cards() if card.id not in offer
    )
    rejected = events.complete_interaction(
        state, pending, InteractionChoice(additions=((1, not_offered),))
    )
    too_many = events.complete_interaction(
        state, pending, InteractionChoice(additions=((0, offer[0]), (1, offer[1])))
    )

    assert drafted.active_party[1].deck[-1] == offer[0]
    assert rejected is state
    assert too_many is state


def test_shop_draft_adds_one_item() -> None:
    events = _events()
    state = _event_state("wandering_merchant", _duo(), gold=0)
    pending = PendingInteraction(effect=ShopDraftEffect(), node_id="evt")
    offer = events.shop_offer(state, pending)

    result = events.complete_interaction(state, pending, InteractionChoice(additions=((0, offer[0]),)))

    assert result.active_party[0].deck[-1] == offer[0]
    assert result.gold == 0


def test_card_removal_each_mode() -> None:
    events = _events()
    state = _event_state("move_tutor", _duo())
    pending = PendingInteraction(effect=CardRemovalEffect(mode="each", count=1), node_id="evt")

    result = events.complete_interaction(
        state, pending, InteractionChoice(removals=((0, (0,)), (1, (4,))))
    )
    rejected = events.complete_interaction(
        state, pending, InteractionChoice(removals=((0, (0, 1)),))
    )

    assert result.active_party[0].deck == state.active_party[0].deck[1:]
    assert result.active_party[1].deck == state.active_party[1].deck[:4]
    assert rejected is state


def test_card_removal_each_mode_caps_removals_per_member() -> None:
    events = _events()
    state = _event_state("move_tutor", _duo())
    pending = PendingInteraction(effect=CardRemovalEffect(mode="each", count=1), node_id="evt")

    repeated = events.complete_interaction(
        state, pending, InteractionChoice(removals=((0, (0,)), (0, (0,)), (0, (0,))))
    )
    split = events.complete_interaction(
        state, pending, InteractionChoice(removals=((0, (0,)), (0, (1,))))
    )

    assert repeated.active_party[0].deck == state.active_party[0].deck[1:]
    assert split is state


def test_card_removal_one_mode_targets_selected_member() -> None:
    events = _events()
    state = _event_state("move_tutor", _duo())
    pending = PendingInteraction(effect=CardRemovalEffect(mode="one", count=2), node_id="evt")

    result = events.complete_interaction(
        state, pending, InteractionChoice(member_index=1, card_indices=(0, 1))
    )

    assert result.active_party[0] == state.active_party[0]
    assert result.active_party[1].deck == state.active_party[1].deck[2:]


def test_card_clone_copies_or_destroys_deterministically() -> None:
    events = _events()
    state = _event_state("card_printer", _duo())
    pending = PendingInteraction(effect=CardCloneEffect(), node_id="evt")
    choice = InteractionChoice(member_index=0, card_indices=(2,))

    first = events.complete_interaction(state, pending, choice)
    second = events.complete_interaction(state, pending, choice)

    assert first == second
    before = state.active_party[0].deck
    after = first.active_party[0].deck
    assert after in (before + (before[2],), before[:2] + before[3:])


def test_card_clone_rejects_bad_card_index() -> None:
    state = _event_state("card_printer", _duo())
    pending = PendingInteraction(effect=CardCloneEffect(), node_id="evt")

    assert _events().complete_interaction(state, pending, InteractionChoice(member_index=0, card_indices=(99,))) is state


def test_recruit_choice_requires_bench_space() -> None:
    events = _events()
    bench = [make_member(species) for species in ("pikachu", "meowth", "gastly", "snorlax")]
    full = _event_state("volunteer_recruit", bench=bench)

    assert events.choose(full, "recruit").state is full


def test_recruit_interaction_adds_chosen_species() -> None:
    events = _events()
    state = _event_state("volunteer_recruit")
    pending = PendingInteraction(effect=RecruitEffect(), node_id="evt")

    recruited = events.complete_interaction(state, pending, InteractionChoice(species_id="zubat"))
    owned = events.complete_interaction(state, pending, InteractionChoice(species_id="charmander"))

    assert recruited.bench[-1].base_species_id == "zubat"
    assert owned is state


def test_set_path_rewrites_current_node_edges() -> None:
    state = _event_state("the_chasm")

    result = _events().choose(state, "brave_chasm")

    node = result.state.get_node("evt")
    assert node is not None and node.connects_to == ("a2-chasm-ghosts",)
    assert isinstance(node, EventNode) and node.resolved is True
    assert "the_chasm" in result.state.seen_event_ids


def test_random_target_lands_on_a_living_member() -> None:
    party = [make_member(current_hp=0, knocked_out=True), make_member("squirtle", column=1), make_member("pikachu", column=2)]
    state = make_state(party)

    targets = resolve_targets(state, "random", None, 9876)

    assert targets == resolve_targets(state, "random", None, 9876)
    assert len(targets) == 1 and targets[0] in (1, 2)


def test_targets_are_empty_when_party_is_down() -> None:
    state = make_state([make_member(current_hp=0, knocked_out=True)])

    assert resolve_targets(state, "all", None, 1) == []
