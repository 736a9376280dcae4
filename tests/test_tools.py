from rich.console import Console

from simulator.codec import to_base64, write_definition
from simulator.dsl import parse_definition
from simulator.events import EventType
from simulator.machine_config import Status
from tools.definition_inspect import hex_dump, load_any_definition, transition_table
from tools.trace_machine import render_frame, render_report, trace


def _render(renderable):
    console = Console(width=200, record=True, color_system=None)
    console.print(renderable)
    return console.export_text()


def test_hex_dump_rows():
    rows = hex_dump(bytes(range(40)), width=32)
    assert len(rows) == 2
    assert rows[0].startswith("00 01 02")
    assert rows[1] == "20 21 22 23 24 25 26 27"


def test_transition_table_uses_compact_notation(unary_definition):
    rows = transition_table(unary_definition)
    assert [state.id for state, _ in rows] == [0, 1]
    assert rows[0][1] == ["---", "1R0", "1-1"]
    assert rows[1][1] == ["---", "---", "---"]


def test_load_any_definition_by_suffix(tmp_path, unary_text, unary_definition):
    text_path = tmp_path / "m.tm"
    text_path.write_text(unary_text, encoding="utf-8")
    binary_path = tmp_path / "m.tmb"
    write_definition(binary_path, unary_definition)
    b64_path = tmp_path / "m.b64"
    b64_path.write_text(to_base64(unary_definition), encoding="utf-8")

    for path in (text_path, binary_path, b64_path):
        assert load_any_definition(path) == unary_definition


def test_trace_records_history_and_events(unary_definition):
    machine, history, sink = trace(unary_definition, radius=3, live=False)

    assert machine.status == Status.HALTED_ACCEPT
    # one frame before every step plus the final one
    assert len(history) == 5
    assert history[0] == ("___111_", 0, 0)
    assert history[-1] == ("1111___", 3, 1)
    assert len(sink.of_type(EventType.TRANSITION)) == 4


def test_trace_respects_the_step_bound():
    looping = parse_definition("%charset 1 _\n%blank _\n> 0\n0 1_ -> 1 r 0\n")
    machine, history, _ = trace(looping, max_steps=12, radius=2, history_limit=5, live=False)
    assert machine.status == Status.ACTIVE
    assert machine.steps == 12
    assert len(history) == 5


def test_rendered_frame_and_report(unary_definition):
    machine, history, _ = trace(unary_definition, radius=3, live=False)

    frame = _render(render_frame(machine, radius=3))
    assert "| 1 | 1 | 1 | 1 |" in frame
    assert "[ACC.] 1" in frame

    report = _render(render_report(unary_definition, machine, history, radius=3))
    assert "ACCEPTED" in report
    assert "%memory 111" in report
    assert "[00000000]   0:   .....___1" in report
