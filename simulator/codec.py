"""
Binary persistence of configurations and machine definitions.

All integers are little-endian. Configuration layout:

    int32   state_count
    per state:
        uint64  state_id
        uint8   acceptance        (0=None, 1=Accept, 2=Reject)
        int32   transition_count
        per transition:
            uint8   action        (0=None, 1=Left, 2=Right)
            int32   input_symbol_count
            symbol  input symbols (fixed width, see SymbolCodec)
            symbol  output_symbol
            uint64  target_id

A MachineDefinition wraps it as:

    int32   configuration length, followed by the configuration bytes
    text    blank symbol
    text    initial memory
    text    charset
    uint64  start_state_id

where text is an int32 UTF-8 byte length (-1 when absent) followed by the bytes.
"""

from __future__ import annotations

import base64
import binascii
import struct
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable

from simulator.dsl import MachineDefinition
from simulator.errors import DecodeError
from simulator.machine_config import Acceptance, Action, Configuration, State, Transition

INT32 = struct.Struct("<i")
UINT64 = struct.Struct("<Q")
UINT8 = struct.Struct("<B")


@dataclass(frozen=True)
class SymbolCodec:
    """Fixed-width encoding of one kind of tape symbol."""

    name: str
    layout: struct.Struct
    to_raw: Callable[[Any], int]
    from_raw: Callable[[int], Any]

    @property
    def width(self):
        return self.layout.size

    def encode(self, symbol) -> bytes:
        try:
            return self.layout.pack(self.to_raw(symbol))
        except (TypeError, struct.error) as exc:
            raise ValueError(f"Symbol {symbol!r} cannot be encoded with the {self.name} codec.") from exc

    def decode(self, raw: bytes):
        try:
            return self.from_raw(self.layout.unpack(raw)[0])
        except (ValueError, OverflowError) as exc:
            raise DecodeError(f"Invalid {self.name} symbol bytes {raw.hex()}.") from exc


CHAR_CODEC = SymbolCodec("char", struct.Struct("<I"), ord, chr)
INT_CODEC = SymbolCodec("int32", struct.Struct("<i"), int, int)


class _Reader:
    def __init__(self, data):
        self._data = bytes(data)
        self._offset = 0

    @property
    def remaining(self):
        return len(self._data) - self._offset

    def take(self, size, what):
        if size < 0 or size > self.remaining:
            raise DecodeError(
                f"Truncated input reading {what}: need {size} bytes at offset {self._offset}, "
                f"{self.remaining} left."
            )
        chunk = self._data[self._offset:self._offset + size]
        self._offset += size
        return chunk

    def unpack(self, layout, what):
        return layout.unpack(self.take(layout.size, what))[0]

    def count(self, what, item_size):
        """Read an int32 count and check the items can still fit in the buffer."""
        n = self.unpack(INT32, what)
        if n < 0 or n * item_size > self.remaining:
            raise DecodeError(f"Invalid {what} {n} with {self.remaining} bytes left.")
        return n

    def text(self, what):
        n = self.unpack(INT32, f"{what} length")
        if n == -1:
            return None
        try:
            return self.take(n, what).decode("utf-8")
        except UnicodeDecodeError as exc:
            raise DecodeError(f"{what} is not valid UTF-8.") from exc

    def finish(self):
        if self.remaining:
            raise DecodeError(f"{self.remaining} unexpected trailing bytes.")


def _enum(enum_type, value, what):
    try:
        return enum_type(value)
    except ValueError:
        raise DecodeError(f"Unknown {what} tag {value}.") from None


# === Configuration ===
def encode_configuration(configuration: Configuration, symbol_codec: SymbolCodec = CHAR_CODEC) -> bytes:
    out = bytearray(INT32.pack(len(configuration)))
    for state in configuration.states:
        out += UINT64.pack(state.id)
        out += UINT8.pack(state.acceptance)
        out += INT32.pack(len(state.transitions))
        for transition in state.transitions.values():
            out += UINT8.pack(transition.action)
            out += INT32.pack(len(transition.input_symbols))
            for symbol in transition.input_symbols:
                out += symbol_codec.encode(symbol)
            out += symbol_codec.encode(transition.output_symbol)
            out += UINT64.pack(transition.target_id)
    return bytes(out)


def _read_configuration(reader, symbol_codec):
    width = symbol_codec.width
    configuration = Configuration()

    for _ in range(reader.count("state count", UINT64.size + UINT8.size + INT32.size)):
        state_id = reader.unpack(UINT64, "state id")
        if state_id in configuration:
            raise DecodeError(f"State {state_id} is encoded twice.")
        acceptance = _enum(Acceptance, reader.unpack(UINT8, "acceptance"), "acceptance")

        transitions = []
        transition_size = UINT8.size + INT32.size + 2 * width + UINT64.size
        for _ in range(reader.count(f"transition count of state {state_id}", transition_size)):
            action = _enum(Action, reader.unpack(UINT8, "action"), "action")
            n_inputs = reader.count("input symbol count", width)
            if n_inputs == 0:
                raise DecodeError(f"A transition of state {state_id} has no input symbols.")
            inputs = [symbol_codec.decode(reader.take(width, "input symbol")) for _ in range(n_inputs)]
            output = symbol_codec.decode(reader.take(width, "output symbol"))
            target_id = reader.unpack(UINT64, "target id")
            transitions.append(Transition(target_id, action, output, inputs))

        configuration.add_state(State(state_id, acceptance, transitions))

    return configuration


def decode_configuration(data: bytes, symbol_codec: SymbolCodec = CHAR_CODEC) -> Configuration:
    reader = _Reader(data)
    configuration = _read_configuration(reader, symbol_codec)
    reader.finish()
    return configuration


# === MachineDefinition ===
def _pack_text(value):
    if value is None:
        return INT32.pack(-1)
    raw = value.encode("utf-8")
    return INT32.pack(len(raw)) + raw


def encode_definition(definition: MachineDefinition) -> bytes:
    inner = encode_configuration(definition.configuration, CHAR_CODEC)
    return b"".join([
        INT32.pack(len(inner)),
        inner,
        _pack_text(definition.blank),
        _pack_text(definition.initial_memory),
        _pack_text("".join(definition.charset)),
        UINT64.pack(definition.configuration.start_state_id),
    ])


def _check_alphabet(definition):
    charset = set(definition.charset)
    used = set(definition.initial_memory or "")
    if definition.blank is not None:
        used.add(definition.blank)
    for state in definition.configuration.states:
        for transition in state.transitions.values():
            used.update(transition.input_symbols)
            used.add(transition.output_symbol)
    unknown = sorted(used - charset)
    if unknown:
        raise DecodeError(f"Symbols {unknown} are used but not part of the charset.")


def decode_definition(data: bytes) -> MachineDefinition:
    reader = _Reader(data)
    inner = reader.take(reader.count("configuration length", 1), "configuration")
    configuration = decode_configuration(inner, CHAR_CODEC)

    blank = reader.text("blank symbol")
    if blank is not None and len(blank) != 1:
        raise DecodeError(f"Blank symbol must be a single character, got {blank!r}.")
    initial_memory = reader.text("initial memory")
    charset = reader.text("charset")
    if charset is None:
        raise DecodeError("Charset is missing.")
    configuration.start_state_id = reader.unpack(UINT64, "start state id")
    reader.finish()

    definition = MachineDefinition(
        configuration=configuration,
        charset=list(dict.fromkeys(charset)),
        blank=blank,
        initial_memory=initial_memory,
    )
    _check_alphabet(definition)
    return definition


def to_base64(definition: MachineDefinition) -> str:
    return base64.b64encode(encode_definition(definition)).decode("ascii")


def definition_from_base64(text: str) -> MachineDefinition:
    try:
        data = base64.b64decode(text.strip(), validate=True)
    except binascii.Error as exc:
        raise DecodeError(f"Invalid base64 payload: {exc}") from exc
    return decode_definition(data)


def write_definition(path, definition: MachineDefinition):
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(encode_definition(definition))
    return str(path)


def read_definition(path) -> MachineDefinition:
    return decode_definition(Path(path).read_bytes())
