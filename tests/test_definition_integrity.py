from roguedex.domain.defs import BattleNode, EventNode, RecruitNode
from roguedex.services.map_graph_validator import format_issue, validate_all_maps
from tests.helpers.run_builders import shipped_engine


def test_every_species_deck_references_known_cards() -> None:
    engine = shipped_engine()

    for species in engine.species_repo.all():
        for card_id in species.deck:
            assert engine.cards_repo.has(card_id), f"{species.id} deck references {card_id}"


def test_every_recruit_pool_species_has_a_progression_tree() -> None:
    engine = shipped_engine()

    for species_id in engine.rules.recruit_pool:
        assert engine.progression_repo.get_tree_for_form(species_id) is not None, species_id


def test_every_progression_tree_has_four_ordered_rungs() -> None:
    engine = shipped_engine()

    for tree in engine.progression_repo.all():
        assert [rung.level for rung in tree.rungs] == [1, 2, 3, 4]


def test_rules_reference_shipped_cards_and_passives() -> None:
    engine = shipped_engine()

    assert engine.cards_repo.get(engine.rules.dazed_card_id).rarity == "curse"
    assert engine.cards_repo.get(engine.rules.revival_marker_card_id).rarity == "curse"
    assert engine.passives_repo.has(engine.rules.pickup_passive_id)


def test_every_item_has_a_gold_cost() -> None:
    engine = shipped_engine()

    items = engine.cards_repo.shop_items()
    assert len(items) == 9
    assert all(item.gold_cost is not None and item.gold_cost > 0 for item in items)


def test_event_pools_cover_open_event_slots_in_each_act() -> None:
    engine = shipped_engine()

    for act in engine.maps_repo.acts():
        open_slots = [
            node
            for node in engine.maps_repo.nodes_for_act(act)
            if isinstance(node, EventNode) and node.event_id is None
        ]
        assert len(engine.events_repo.events_for_act(act)) >= len(open_slots), act


def test_map_nodes_reference_known_content() -> None:
    engine = shipped_engine()

    for act in engine.maps_repo.acts():
        for node in engine.maps_repo.nodes_for_act(act):
            if isinstance(node, BattleNode):
                assert all(engine.species_repo.has(enemy) for enemy in node.enemies), node.id
            elif isinstance(node, RecruitNode) and node.species_id is not None:
                assert engine.species_repo.has(node.species_id), node.id
            elif isinstance(node, EventNode) and node.event_id is not None:
                assert engine.events_repo.has(node.event_id), node.id


def test_shipped_maps_have_no_validation_errors() -> None:
    engine = shipped_engine()

    issues = validate_all_maps(
        engine.maps_repo.all(),
        species_repo=engine.species_repo,
        events_repo=engine.events_repo,
    )

    errors = [format_issue(issue) for issue in issues if issue.severity == "ERROR"]
    assert errors == []
