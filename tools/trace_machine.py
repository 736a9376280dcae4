"""Step-by-step tracer for a machine definition, rendered with rich."""

import argparse
import time
from collections import deque
from datetime import datetime, timezone

from rich.console import Console, Group
from rich.live import Live
from rich.text import Text

from config.config_loader import load_config_or_default
from logger.logger import JSONLogger
from simulator.codec import encode_definition
from simulator.errors import DecodeError, DefinitionParseError
from simulator.events import EventType, InMemoryEventSink
from simulator.machine_config import Status
from tools.definition_inspect import hex_dump, load_any_definition

console = Console()


def tape_line(machine, radius):
    cells = machine.tape_window(radius)
    text = Text("- - - -  | ")
    for offset, symbol in enumerate(cells):
        style = "bold cyan" if offset == radius else None
        text.append(str(symbol), style=style)
        text.append(" | ")
    text.append(" - - - -")
    return text


def render_frame(machine, radius=20, transition_limit=10):
    """Tape window around the head, the current state and its transitions."""
    lines = [tape_line(machine, radius)]
    caret_column = len("- - - -  | ") + radius * 4
    lines.append(Text(" " * caret_column + "^", style="cyan"))
    lines.append(Text(" " * caret_column + str(machine.current_state)))
    for transition in machine.available_transitions()[:transition_limit]:
        lines.append(Text(" " * caret_column + f"[{machine.current_state_id}] {transition}"))
    return Group(*lines)


def capture_frame(machine, radius):
    return "".join(str(s) for s in machine.tape_window(radius)), machine.current_address, machine.current_state_id


def render_report(definition, machine, history, radius=20):
    lines = []

    verdict = Text("\nThe turing machine ")
    if machine.status == Status.HALTED_ACCEPT:
        verdict.append("halted and ")
        verdict.append("ACCEPTED", style="bold green")
    elif machine.status == Status.HALTED_REJECT:
        verdict.append("halted and ")
        verdict.append("REJECTED", style="bold red")
    else:
        verdict.append("DID NOT HALT on", style="bold yellow")
    verdict.append(f" the input '{definition.initial_memory or ''}' after {machine.steps} step(s).")
    lines.append(verdict)

    lines.append(Text("-" * 44 + " DEBUG DATA " + "-" * 44))
    lines.append(Text("Configuration (bytes):"))
    lines.extend(Text(f"    {row}") for row in hex_dump(encode_definition(definition)))

    lines.append(Text("\nConfiguration (readable):"))
    lines.extend(Text(f"    {row}", style="yellow") for row in definition.to_text().splitlines())

    lines.append(Text("History:\n"))
    for index, (window, _address, state_id) in enumerate(history):
        row = Text(f"[{index:08x}] {state_id:>3}:   .....{window[:radius]}")
        row.append(window[radius], style="red")
        row.append(f"{window[radius + 1:]}.....")
        lines.append(row)

    lines.append(Text("-" * 100))
    return Group(*lines)


def trace(definition, allow_undefined=False, max_steps=100_000, radius=20, transition_limit=10,
          history_limit=10_000, delay=0.0, live=True, interactive=False):
    """
    Run `definition` one step at a time, optionally drawing every frame.
    Returns the machine, the recorded history frames and the event sink.
    """
    sink = InMemoryEventSink(record_reads=False)
    machine = definition.create_machine(allow_undefined=allow_undefined, hooks=sink.hooks())
    if not machine.is_initialized:
        machine.initialize("")

    history = deque(maxlen=history_limit)

    def advance(on_frame):
        while machine.status == Status.ACTIVE and machine.steps < max_steps:
            history.append(capture_frame(machine, radius))
            on_frame()
            if interactive:
                console.input("")
            elif delay:
                time.sleep(delay)
            machine.step()
        history.append(capture_frame(machine, radius))
        on_frame()

    if live:
        with Live(render_frame(machine, radius, transition_limit), console=console, auto_refresh=False) as view:
            advance(lambda: view.update(render_frame(machine, radius, transition_limit), refresh=True))
    else:
        advance(lambda: None)

    return machine, list(history), sink


def main():
    config = load_config_or_default()

    parser = argparse.ArgumentParser(description="Trace a Turing machine definition step by step")
    parser.add_argument("path", help="Definition file (.tm text, .tmb binary or .b64 base64)")
    parser.add_argument("--allow_undefined", action="store_true", default=config["allow_undefined"],
                        help="Keep running on undefined transitions instead of rejecting")
    parser.add_argument("--max_steps", type=int, default=config["max_steps"], help="Step bound")
    parser.add_argument("--window", type=int, default=config["tape_window"], help="Cells shown each side of the head")
    parser.add_argument("--delay", type=float, default=config["step_delay"], help="Seconds between frames")
    parser.add_argument("--interactive", action="store_true", help="Wait for Enter before every step")
    parser.add_argument("--quiet", action="store_true", help="Only print the final report")
    args = parser.parse_args()

    try:
        definition = load_any_definition(args.path)
        console.print(f"Config loaded from '{args.path}'.")
        machine, history, sink = trace(
            definition,
            allow_undefined=args.allow_undefined,
            max_steps=args.max_steps,
            radius=args.window,
            transition_limit=config["transition_display_limit"],
            history_limit=config["history_limit"],
            delay=args.delay,
            live=not args.quiet,
            interactive=args.interactive,
        )
    except (DefinitionParseError, DecodeError, OSError, ValueError, LookupError) as e:
        console.print(f"[red]An error occurred: {e}[/red]")
        raise SystemExit(1)

    console.print(render_report(definition, machine, history, radius=args.window))

    JSONLogger.from_config(config).log({
        "definition": args.path,
        "status": machine.status.name,
        "steps_taken": machine.steps,
        "transitions": len(sink.of_type(EventType.TRANSITION)),
        "head": machine.current_address,
        "final_state": machine.current_state_id,
        "tape": "".join(machine.memory.to_dense_array()),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    })


if __name__ == "__main__":
    main()
