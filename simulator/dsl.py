"""
Line-oriented text format for machine definitions.

    ; comments start with ';', '//' or '--'
    %charset 0 1 _
    %blank _
    %memory 111
    > 0
    1 A
    0 1 -> 1 r 0
    0 _ -> 1 - 1

Directives and acceptance tags are case-insensitive. Symbols must be declared
with %charset before %blank, %memory or a transition references them. Lines
are handled strictly in order and the first bad line aborts parsing.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Optional, Union

from simulator.errors import DefinitionParseError
from simulator.machine_config import Acceptance, Action, Configuration, State
from simulator.turing_machine import create_machine

COMMENT_RE = re.compile(r"^(;|//|--)")
CHARSET_RE = re.compile(r"^%charset\s+(?P<symbols>.+)$", re.IGNORECASE)
BLANK_RE = re.compile(r"^%blank\s+(?P<blank>\S)$", re.IGNORECASE)
MEMORY_RE = re.compile(r"^%memory\s+(?P<memory>.+)$", re.IGNORECASE)
STATE_RE = re.compile(r"^(?P<start>>\s*)?(?P<id>[0-9]+)\s*(?P<acceptance>[AR])?$", re.IGNORECASE)
TRANSITION_RE = re.compile(
    r"^(?P<from>[0-9]+)\s+(?P<inputs>\S+)\s*->\s*(?P<output>\S)\s+(?P<action>[LR-])\s+(?P<to>[0-9]+)$",
    re.IGNORECASE,
)

ACCEPTANCE_CODES = {"a": Acceptance.ACCEPT, "r": Acceptance.REJECT}
ACTION_CODES = {"l": Action.MOVE_LEFT, "r": Action.MOVE_RIGHT, "-": Action.NONE}
ACTION_LETTERS = {action: letter for letter, action in ACTION_CODES.items()}
ACCEPTANCE_LETTERS = {Acceptance.ACCEPT: " A", Acceptance.REJECT: " R", Acceptance.NONE: ""}


@dataclass
class MachineDefinition:
    """A configuration over a character alphabet, with its blank symbol and initial tape."""

    configuration: Configuration = field(default_factory=Configuration)
    charset: list = field(default_factory=list)
    blank: Optional[str] = None
    initial_memory: Optional[str] = None

    def create_machine(self, allow_undefined=False, hooks=None):
        """Build a machine; it is initialized with initial_memory when there is one."""
        if self.blank is None:
            raise ValueError("The definition declares no blank symbol (%blank).")
        machine = create_machine(self.configuration, self.blank, allow_undefined=allow_undefined, hooks=hooks)
        if self.initial_memory is not None:
            machine.initialize(self.initial_memory)
        return machine

    def to_text(self) -> str:
        """
        Render the definition as DSL text that parses back to an equal definition.

        The start marker rides on a state line, so a start id naming no
        declared state is not preserved; the reparsed start id falls back to 0.
        """
        lines = [f"%charset {' '.join(self.charset)}"] if self.charset else []
        if self.initial_memory:
            lines.append(f"%memory {self.initial_memory}")
        if self.blank is not None:
            lines.append(f"%blank {self.blank}")

        configuration = self.configuration
        for state in configuration.states:
            start = "> " if state.id == configuration.start_state_id else ""
            lines.append(f"{start}{state.id}{ACCEPTANCE_LETTERS[state.acceptance]}")

        for state in configuration.states:
            for t in state.transitions.values():
                inputs = "".join(t.input_symbols)
                lines.append(f"{state.id} {inputs} -> {t.output_symbol} {ACTION_LETTERS[t.action]} {t.target_id}")

        return "\n".join(lines) + "\n"


def _split_lines(source):
    if isinstance(source, str):
        source = source.split("\n")
    for raw in source:
        yield raw.replace("\r", " ").strip()


def _unknown(symbols, charset):
    return [s for s in dict.fromkeys(symbols) if s not in charset]


def _not_in_charset(unknown):
    quoted = "', '".join(unknown)
    return f"The character(s) '{quoted}' must be in the charset before being added"


def _declare_state(configuration, state_id, acceptance):
    # Transitions filed under a forward-referenced id survive its declaration.
    transitions = configuration[state_id].transitions if state_id in configuration else {}
    configuration.add_state(State(state_id, acceptance, transitions))


def parse_definition(source: Union[str, Iterable[str]]) -> MachineDefinition:
    definition = MachineDefinition()
    configuration = definition.configuration
    charset = definition.charset

    for line_number, line in enumerate(_split_lines(source), start=1):
        if not line or COMMENT_RE.match(line):
            continue

        m = CHARSET_RE.match(line)
        if m:
            for token in m.group("symbols").split():
                if token[0] not in charset:
                    charset.append(token[0])
            continue

        m = BLANK_RE.match(line)
        if m:
            blank = m.group("blank")
            if blank not in charset:
                raise DefinitionParseError(
                    line_number, line,
                    f"The character '{blank}' must be in the charset before being set as blank symbol",
                )
            definition.blank = blank
            continue

        m = MEMORY_RE.match(line)
        if m:
            memory = m.group("memory")
            unknown = _unknown(memory, charset)
            if unknown:
                raise DefinitionParseError(line_number, line, _not_in_charset(unknown))
            definition.initial_memory = memory
            continue

        m = STATE_RE.match(line)
        if m:
            state_id = int(m.group("id"))
            acceptance = ACCEPTANCE_CODES.get((m.group("acceptance") or "").lower(), Acceptance.NONE)
            _declare_state(configuration, state_id, acceptance)
            if m.group("start"):
                configuration.start_state_id = state_id
            continue

        m = TRANSITION_RE.match(line)
        if m:
            from_id = int(m.group("from"))
            inputs = m.group("inputs")
            output = m.group("output")
            unknown = _unknown(inputs + output, charset)
            if unknown:
                raise DefinitionParseError(line_number, line, _not_in_charset(unknown))
            if from_id not in configuration:
                _declare_state(configuration, from_id, Acceptance.NONE)
            configuration.add_transition(
                from_id, int(m.group("to")), ACTION_CODES[m.group("action").lower()], output, inputs
            )
            continue

        raise DefinitionParseError(line_number, line)

    return definition


def load_definition(path) -> MachineDefinition:
    return parse_definition(Path(path).read_text(encoding="utf-8"))
