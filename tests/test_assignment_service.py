from roguedex.domain.defs import EventNode, RecruitNode, SpawnNode
from roguedex.services.assignment_service import (
    ACT_SEED_STRIDE,
    EVENT_SEED_OFFSET,
    AssignmentService,
    event_stream_seed,
    recruit_stream_seed,
)
from tests.helpers.run_builders import shipped_engine


def _engine_assignment():
    engine = shipped_engine()
    return engine, AssignmentService(events_repo=engine.events_repo, rules=engine.rules)


def _open_nodes(recruits: int = 0, events: int = 0):
    nodes = [SpawnNode(id="spawn", stage=0, completed=True)]
    nodes.extend(RecruitNode(id=f"recruit-{index}", stage=1) for index in range(recruits))
    nodes.extend(EventNode(id=f"event-{index}", stage=2) for index in range(events))
    return tuple(nodes)


def test_stream_seeds_are_offset_per_act() -> None:
    assert recruit_stream_seed(1000, 1) == 1000
    assert recruit_stream_seed(1000, 3) == 1000 + 2 * ACT_SEED_STRIDE
    assert event_stream_seed(1000, 2) == 1000 + EVENT_SEED_OFFSET + ACT_SEED_STRIDE


def test_recruits_skip_owned_species_and_never_repeat() -> None:
    _, service = _engine_assignment()

    nodes = service.assign_recruits(_open_nodes(recruits=4), 555, ["pikachu", "meowth"])

    offered = [node.species_id for node in nodes if isinstance(node, RecruitNode)]
    assert None not in offered
    assert len(set(offered)) == 4
    assert not {"pikachu", "meowth"} & set(offered)


def test_recruit_slots_stay_open_when_pool_is_exhausted() -> None:
    engine, service = _engine_assignment()
    owned = list(engine.rules.recruit_pool)[:-1]

    nodes = service.assign_recruits(_open_nodes(recruits=2), 1, owned)

    offered = [node.species_id for node in nodes if isinstance(node, RecruitNode)]
    assert offered == [engine.rules.recruit_pool[-1], None]


def test_authored_recruit_is_kept() -> None:
    _, service = _engine_assignment()
    nodes = (RecruitNode(id="fixed", stage=1, species_id="gastly"),)

    assert service.assign_recruits(nodes, 1, ["gastly"]) == nodes


def test_events_are_unique_and_recorded_as_seen() -> None:
    _, service = _engine_assignment()

    assignment = service.assign_events(_open_nodes(events=4), 321, 1, ())

    assigned = [node.event_id for node in assignment.nodes if isinstance(node, EventNode)]
    assert len(set(assigned)) == 4
    assert list(assignment.seen_event_ids) == assigned


def test_events_skip_previously_seen() -> None:
    engine, service = _engine_assignment()
    pool = [event.id for event in engine.events_repo.events_for_act(1)]
    seen = pool[:-1]

    assignment = service.assign_events(_open_nodes(events=2), 321, 1, seen)

    assigned = [node.event_id for node in assignment.nodes if isinstance(node, EventNode)]
    assert assigned == [pool[-1], None]
    assert assignment.seen_event_ids == tuple(seen) + (pool[-1],)


def test_no_event_repeats_across_a_whole_run() -> None:
    engine = shipped_engine()
    for seed in (1, 77, 2024):
        state = engine.runs.start_run(["charmander"], seed=seed)
        state = engine.runs.transition_to_act(state, act=2)
        state = engine.runs.transition_to_act(state, act=3)
        assert len(state.seen_event_ids) == len(set(state.seen_event_ids))
        assert len(state.seen_event_ids) == 4 + 3 + 3


def test_prepare_act_is_deterministic() -> None:
    engine, service = _engine_assignment()
    nodes = engine.maps_repo.nodes_for_act(2)

    first = service.prepare_act(nodes, act=2, recruit_seed=10, owned_species_ids=["charmander"], seen_event_ids=())
    second = service.prepare_act(nodes, act=2, recruit_seed=10, owned_species_ids=["charmander"], seen_event_ids=())

    assert first == second
