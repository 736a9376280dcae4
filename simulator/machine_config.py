from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from enum import IntEnum
from types import MappingProxyType
from typing import Any

from simulator.errors import StateNotFoundError, TransitionNotFoundError


class Acceptance(IntEnum):
    NONE = 0
    ACCEPT = 1
    REJECT = 2


class Action(IntEnum):
    NONE = 0
    MOVE_LEFT = 1
    MOVE_RIGHT = 2

    @property
    def offset(self):
        return {Action.NONE: 0, Action.MOVE_LEFT: -1, Action.MOVE_RIGHT: 1}[self]


class Status(IntEnum):
    ACTIVE = 0
    HALTED_ACCEPT = 1
    HALTED_REJECT = 2


def as_symbol_tuple(symbols) -> tuple:
    """
    Normalize input symbols to a tuple of unique symbols in first-seen order.
    A string counts as a sequence of one-character symbols; any other
    non-iterable value is a single symbol.
    """
    if isinstance(symbols, Iterable):
        items = symbols
    else:
        items = (symbols,)
    return tuple(dict.fromkeys(items))


def _check_id(value, what):
    if not isinstance(value, int) or isinstance(value, bool) or value < 0:
        raise ValueError(f"{what} must be an unsigned integer, got {value!r}.")


# === Records ===
@dataclass(frozen=True)
class Transition:
    target_id: int
    action: Action
    output_symbol: Any
    input_symbols: tuple = ()

    def __post_init__(self):
        _check_id(self.target_id, "Transition target id")
        object.__setattr__(self, "action", Action(self.action))
        symbols = as_symbol_tuple(self.input_symbols)
        if not symbols:
            raise ValueError("A transition needs at least one input symbol.")
        object.__setattr__(self, "input_symbols", symbols)

    def matches(self, symbol):
        return symbol in self.input_symbols

    def merged_with(self, symbols) -> Transition:
        """Same transition, additionally triggered by `symbols`."""
        return replace(self, input_symbols=self.input_symbols + as_symbol_tuple(symbols))

    def __str__(self):
        inputs = "', '".join(str(s) for s in self.input_symbols)
        return f"'{inputs}'  -->  ({self.action.name}, '{self.output_symbol}', {self.target_id})"


@dataclass(frozen=True)
class State:
    """
    A state and its outgoing transitions, keyed by target state id.

    `transitions` accepts either a mapping target id -> Transition (every key
    must equal its transition's target id) or an iterable of transitions, in
    which case transitions sharing a target are merged.
    """

    id: int
    acceptance: Acceptance = Acceptance.NONE
    transitions: Mapping[int, Transition] = field(default_factory=dict, hash=False)

    def __post_init__(self):
        _check_id(self.id, "State id")
        object.__setattr__(self, "acceptance", Acceptance(self.acceptance))

        filed = {}
        if isinstance(self.transitions, Mapping):
            for key, transition in self.transitions.items():
                if key != transition.target_id:
                    raise ValueError(
                        f"Transition filed under {key} must target {key}, not {transition.target_id}."
                    )
                filed[key] = transition
        else:
            for transition in self.transitions:
                existing = filed.get(transition.target_id)
                filed[transition.target_id] = (
                    transition if existing is None else existing.merged_with(transition.input_symbols)
                )
        object.__setattr__(self, "transitions", MappingProxyType(filed))

    @property
    def is_accepting(self):
        return self.acceptance == Acceptance.ACCEPT

    @property
    def is_rejecting(self):
        return self.acceptance == Acceptance.REJECT

    def find_transition(self, symbol):
        """First transition, in insertion order, that reads `symbol`; None if there is none."""
        for transition in self.transitions.values():
            if transition.matches(symbol):
                return transition
        return None

    def with_transition(self, transition: Transition) -> State:
        filed = dict(self.transitions)
        existing = filed.get(transition.target_id)
        if existing is None:
            filed[transition.target_id] = transition
        else:
            filed[transition.target_id] = existing.merged_with(transition.input_symbols)
        return replace(self, transitions=filed)

    def without_transition(self, target_id) -> State:
        if target_id not in self.transitions:
            raise KeyError(f"State {self.id} has no transition to {target_id}.")
        filed = dict(self.transitions)
        del filed[target_id]
        return replace(self, transitions=filed)

    def __str__(self):
        tag = {Acceptance.ACCEPT: "[ACC.] ", Acceptance.REJECT: "[REJ.] "}.get(self.acceptance, "")
        return f"{tag}{self.id} ({len(self.transitions)} Transition[s])"


# === Configuration ===
class Configuration:
    """State graph of a machine: state id -> State, plus the start state id."""

    def __init__(self, states=(), start_state_id=0):
        self._states = {}
        self.start_state_id = start_state_id
        self.add_states(*states)

    def __getitem__(self, state_id):
        return self.get_state(state_id)

    def __setitem__(self, state_id, state):
        if state.id != state_id:
            raise ValueError(f"State id {state.id} must be equal to the key {state_id}.")
        self._states[state_id] = state

    def __contains__(self, state_id):
        return state_id in self._states

    def __len__(self):
        return len(self._states)

    def __iter__(self):
        return iter(self._states.values())

    def __eq__(self, other):
        if not isinstance(other, Configuration):
            return NotImplemented
        return self.start_state_id == other.start_state_id and self._states == other._states

    def __repr__(self):
        return f"Configuration(states={len(self._states)}, start_state_id={self.start_state_id})"

    @property
    def states(self):
        return tuple(self._states.values())

    @property
    def state_ids(self):
        return tuple(self._states)

    def get_state(self, state_id) -> State:
        try:
            return self._states[state_id]
        except KeyError:
            raise StateNotFoundError(state_id) from None

    def add_state(self, state: State):
        self[state.id] = state

    def add_states(self, *states):
        for state in states:
            self.add_state(state)

    def remove_state(self, state_id) -> State:
        state = self.get_state(state_id)
        del self._states[state_id]
        return state

    def add_transition(self, from_id, to_id, action, output_symbol, input_symbols):
        state = self.get_state(from_id)
        self._states[from_id] = state.with_transition(Transition(to_id, action, output_symbol, input_symbols))

    def get_transition(self, from_id, symbol) -> Transition:
        transition = self.get_state(from_id).find_transition(symbol)
        if transition is None:
            raise TransitionNotFoundError(from_id, symbol)
        return transition

    def remove_transition(self, from_id, to_id) -> Transition:
        state = self.get_state(from_id)
        transition = state.transitions.get(to_id)
        self._states[from_id] = state.without_transition(to_id)
        return transition

    def clear_transitions(self, from_id=None):
        ids = self.state_ids if from_id is None else (from_id,)
        for state_id in ids:
            self._states[state_id] = replace(self.get_state(state_id), transitions={})

    def clear(self):
        self._states.clear()
