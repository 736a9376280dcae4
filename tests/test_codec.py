import struct

import pytest

from simulator.codec import (
    CHAR_CODEC,
    INT_CODEC,
    decode_configuration,
    decode_definition,
    definition_from_base64,
    encode_configuration,
    encode_definition,
    read_definition,
    to_base64,
    write_definition,
)
from simulator.errors import DecodeError
from simulator.machine_config import Acceptance, Action, Configuration, State


def _shape(configuration):
    """Order-independent view of a configuration."""
    return {
        state.id: (
            state.acceptance,
            {
                t.target_id: (frozenset(t.input_symbols), t.output_symbol, t.action)
                for t in state.transitions.values()
            },
        )
        for state in configuration.states
    }


def test_configuration_round_trip(parity_definition):
    configuration = parity_definition.configuration
    decoded = decode_configuration(encode_configuration(configuration))
    assert _shape(decoded) == _shape(configuration)
    assert encode_configuration(decoded) == encode_configuration(configuration)


def test_integer_symbols_round_trip():
    configuration = Configuration([State(10, Acceptance.REJECT), State(2**40)])
    configuration.add_transition(2**40, 10, Action.MOVE_LEFT, -1, [0, 1, 7])
    data = encode_configuration(configuration, INT_CODEC)
    assert _shape(decode_configuration(data, INT_CODEC)) == _shape(configuration)


def test_byte_layout_is_little_endian_and_canonical():
    configuration = Configuration([State(1, Acceptance.ACCEPT)])
    configuration.add_transition(1, 1, Action.MOVE_RIGHT, "b", "a")

    expected = b"".join([
        struct.pack("<i", 1),
        struct.pack("<Q", 1),
        struct.pack("<B", 1),
        struct.pack("<i", 1),
        struct.pack("<B", 2),
        struct.pack("<i", 1),
        struct.pack("<I", ord("a")),
        struct.pack("<I", ord("b")),
        struct.pack("<Q", 1),
    ])
    assert encode_configuration(configuration, CHAR_CODEC) == expected


def test_definition_round_trip(unary_definition):
    decoded = decode_definition(encode_definition(unary_definition))
    assert decoded == unary_definition
    assert decoded.configuration.start_state_id == 0


def test_definition_keeps_start_state_and_absent_memory(parity_definition):
    parity_definition.configuration.start_state_id = 1
    decoded = decode_definition(encode_definition(parity_definition))
    assert decoded.configuration.start_state_id == 1
    assert decoded.initial_memory is None


def test_base64_and_file_round_trip(tmp_path, unary_definition):
    assert definition_from_base64(to_base64(unary_definition)) == unary_definition

    path = tmp_path / "out" / "unary.tmb"
    write_definition(path, unary_definition)
    assert read_definition(path) == unary_definition


def test_truncated_input_fails_at_every_cut(unary_definition):
    data = encode_definition(unary_definition)
    for cut in range(len(data)):
        with pytest.raises(DecodeError):
            decode_definition(data[:cut])


def test_trailing_bytes_are_rejected(parity_definition):
    data = encode_configuration(parity_definition.configuration)
    with pytest.raises(DecodeError):
        decode_configuration(data + b"\x00")


def test_oversized_count_is_rejected_before_reading():
    with pytest.raises(DecodeError):
        decode_configuration(struct.pack("<i", 1_000_000))
    with pytest.raises(DecodeError):
        decode_configuration(struct.pack("<i", -1))


def test_unknown_tags_are_rejected():
    data = struct.pack("<i", 1) + struct.pack("<Q", 0) + struct.pack("<B", 7) + struct.pack("<i", 0)
    with pytest.raises(DecodeError):
        decode_configuration(data)


def test_empty_input_set_is_rejected():
    data = b"".join([
        struct.pack("<i", 1), struct.pack("<Q", 0), struct.pack("<B", 0), struct.pack("<i", 1),
        struct.pack("<B", 0), struct.pack("<i", 0),
        struct.pack("<I", ord("a")), struct.pack("<Q", 0),
        struct.pack("<I", 0),
    ])
    with pytest.raises(DecodeError):
        decode_configuration(data)


def test_symbols_outside_the_charset_are_rejected(unary_definition):
    unary_definition.charset = ["1"]
    with pytest.raises(DecodeError):
        decode_definition(encode_definition(unary_definition))


def test_invalid_base64_is_a_decode_error():
    with pytest.raises(DecodeError):
        definition_from_base64("not base64!")
