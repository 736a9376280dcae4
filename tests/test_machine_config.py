import pytest

from simulator.errors import StateNotFoundError, TransitionNotFoundError
from simulator.machine_config import Acceptance, Action, Configuration, State, Transition


def make_configuration():
    configuration = Configuration([State(0), State(1, Acceptance.ACCEPT)])
    configuration.add_transition(0, 0, Action.MOVE_RIGHT, "1", "1")
    configuration.add_transition(0, 1, Action.NONE, "1", "_")
    return configuration


def test_get_transition_finds_the_transition_reading_the_symbol():
    configuration = make_configuration()
    transition = configuration.get_transition(0, "_")
    assert transition.target_id == 1
    assert transition.output_symbol == "1"
    assert transition.action == Action.NONE


def test_same_target_transitions_accumulate_input_symbols():
    configuration = make_configuration()
    configuration.add_transition(0, 0, Action.MOVE_LEFT, "0", ["0", "1"])

    state = configuration.get_state(0)
    assert len(state.transitions) == 2
    merged = state.transitions[0]
    assert merged.input_symbols == ("1", "0")
    # the first record keeps its output and action
    assert merged.output_symbol == "1"
    assert merged.action == Action.MOVE_RIGHT


def test_first_transition_in_insertion_order_wins_on_overlap():
    configuration = Configuration([State(0), State(1), State(2)])
    configuration.add_transition(0, 2, Action.NONE, "b", "x")
    configuration.add_transition(0, 1, Action.NONE, "a", "x")
    assert configuration.get_transition(0, "x").target_id == 2


def test_missing_state_and_transition_raise_lookup_errors():
    configuration = make_configuration()
    with pytest.raises(StateNotFoundError):
        configuration.get_state(9)
    with pytest.raises(StateNotFoundError):
        configuration.add_transition(9, 0, Action.NONE, "1", "1")
    with pytest.raises(TransitionNotFoundError):
        configuration.get_transition(0, "0")
    with pytest.raises(LookupError):
        configuration.get_transition(9, "1")


def test_state_filed_under_another_key_is_rejected():
    configuration = Configuration()
    with pytest.raises(ValueError):
        configuration[3] = State(4)


def test_transition_filed_under_another_target_is_rejected():
    with pytest.raises(ValueError):
        State(0, transitions={1: Transition(2, Action.NONE, "a", "a")})


def test_transition_needs_input_symbols():
    with pytest.raises(ValueError):
        Transition(0, Action.NONE, "a", [])


def test_records_are_immutable():
    state = State(0, transitions=[Transition(1, Action.NONE, "a", "b")])
    with pytest.raises(AttributeError):
        state.acceptance = Acceptance.ACCEPT
    with pytest.raises(TypeError):
        state.transitions[2] = Transition(2, Action.NONE, "a", "b")


def test_with_transition_returns_a_new_state():
    state = State(0)
    updated = state.with_transition(Transition(1, Action.MOVE_LEFT, 1, 0))
    assert state.transitions == {}
    assert updated.find_transition(0).target_id == 1
    assert updated.find_transition(1) is None


def test_remove_state_and_transitions():
    configuration = make_configuration()
    removed = configuration.remove_transition(0, 1)
    assert removed.target_id == 1
    assert configuration.get_state(0).find_transition("_") is None

    configuration.clear_transitions()
    assert all(not s.transitions for s in configuration.states)

    assert configuration.remove_state(1).acceptance == Acceptance.ACCEPT
    assert 1 not in configuration
    assert len(configuration) == 1


def test_start_state_is_not_validated():
    configuration = Configuration()
    configuration.start_state_id = 42
    assert configuration.start_state_id == 42


def test_integer_symbols_are_single_symbols():
    configuration = Configuration([State(0)])
    configuration.add_transition(0, 0, Action.MOVE_RIGHT, 1, 0)
    assert configuration.get_transition(0, 0).input_symbols == (0,)


def test_clear_drops_every_state():
    configuration = make_configuration()
    configuration.start_state_id = 1
    configuration.clear()
    assert len(configuration) == 0
    assert configuration.state_ids == ()
    assert configuration.start_state_id == 1
