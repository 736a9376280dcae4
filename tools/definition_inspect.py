import argparse
from pathlib import Path

from rich.console import Console
from rich.table import Table

from simulator.codec import definition_from_base64, encode_definition, read_definition, to_base64, write_definition
from simulator.dsl import ACTION_LETTERS, load_definition
from simulator.errors import DecodeError, DefinitionParseError

console = Console()

BINARY_SUFFIX = ".tmb"
BASE64_SUFFIX = ".b64"


def load_any_definition(path):
    """Load a definition from DSL text, binary (.tmb) or base64 (.b64) by file suffix."""
    path = Path(path)
    if path.suffix == BINARY_SUFFIX:
        return read_definition(path)
    if path.suffix == BASE64_SUFFIX:
        return definition_from_base64(path.read_text(encoding="utf-8"))
    return load_definition(path)


def hex_dump(data, width=32):
    """Rows of space-separated hex bytes, `width` bytes per row."""
    return [" ".join(f"{b:02x}" for b in data[i:i + width]) for i in range(0, len(data), width)]


def transition_table(definition):
    """
    State x symbol table in compact notation: written symbol, move (L/R/-) and
    target state, e.g. "1R0". Undefined cells are "---".
    """
    configuration = definition.configuration
    rows = []
    for state in configuration.states:
        row = []
        for symbol in definition.charset:
            transition = state.find_transition(symbol)
            if transition is None:
                row.append("---")
            else:
                move = ACTION_LETTERS[transition.action].upper()
                row.append(f"{transition.output_symbol}{move}{transition.target_id}")
        rows.append((state, row))
    return rows


def pretty_print_definition(definition):
    configuration = definition.configuration

    table = Table(title="Transition Table", show_header=True, header_style="bold magenta")
    table.add_column("State", justify="left")
    for symbol in definition.charset:
        table.add_column(repr(symbol), justify="center")

    for state, row in transition_table(definition):
        label = f"{'> ' if state.id == configuration.start_state_id else ''}{state.id}"
        if state.is_accepting:
            label = f"[green]{label} A[/green]"
        elif state.is_rejecting:
            label = f"[red]{label} R[/red]"
        table.add_row(label, *row)

    console.print(f"  Charset: {' '.join(definition.charset)}")
    console.print(f"  Blank: {definition.blank!r}")
    console.print(f"  Initial memory: {definition.initial_memory!r}")
    console.print(f"  States: {len(configuration)}  Start: {configuration.start_state_id}")
    console.print(table)


def main():
    parser = argparse.ArgumentParser(description="Turing Machine Definition Inspector")
    parser.add_argument("path", help="Definition file (.tm text, .tmb binary or .b64 base64)")
    parser.add_argument("--bytes", action="store_true", help="Print a hex dump of the binary encoding")
    parser.add_argument("--to-binary", dest="to_binary", help="Write the binary encoding to this path")
    parser.add_argument("--to-text", dest="to_text", help="Write the readable text form to this path")
    parser.add_argument("--to-base64", dest="to_base64", action="store_true", help="Print the base64 encoding")
    args = parser.parse_args()

    try:
        definition = load_any_definition(args.path)
    except (DefinitionParseError, DecodeError, OSError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise SystemExit(1)

    console.print(f"[INFO] Definition {args.path}")
    pretty_print_definition(definition)

    if args.bytes:
        console.print("\n=== Configuration (bytes) ===")
        for row in hex_dump(encode_definition(definition)):
            console.print(f"    {row}")
    if args.to_base64:
        console.print(to_base64(definition))
    if args.to_binary:
        console.print(f"[green]Wrote {write_definition(args.to_binary, definition)}[/green]")
    if args.to_text:
        Path(args.to_text).write_text(definition.to_text(), encoding="utf-8")
        console.print(f"[green]Wrote {args.to_text}[/green]")


if __name__ == "__main__":
    main()
