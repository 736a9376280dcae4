# app.py

import argparse
from pathlib import Path

from rich.console import Console
from rich.prompt import Prompt, IntPrompt, Confirm
from rich.table import Table

from config.config_loader import DEFAULT_CONFIG_PATH, load_config_or_default, save_config
from logger.logger import JSONLogger
from simulator.codec import to_base64, write_definition
from simulator.errors import DecodeError, DefinitionParseError
from tools.definition_inspect import load_any_definition, pretty_print_definition
from tools.simulate_pool import simulate_pool
from tools.trace_machine import render_report, trace

console = Console()

DEFINITIONS_DIR = Path("machines")
POOLS_DIR = Path("pools")


# === Utilities ===
def detect_files(folder, patterns):
    folder.mkdir(parents=True, exist_ok=True)
    found = []
    for pattern in patterns:
        found.extend(sorted(folder.glob(pattern)))
    return found


def choose_file(title, folder, patterns):
    files = detect_files(folder, patterns)
    if not files:
        console.print(f"[red]No files found in {folder}/.[/red]")
        return None

    table = Table(title=title, show_header=True, header_style="bold magenta")
    table.add_column("Index", justify="center")
    table.add_column("File", justify="left")
    for idx, path in enumerate(files):
        table.add_row(str(idx), path.name)
    console.print(table)

    idx_choice = IntPrompt.ask("\nChoose a file by Index")
    if idx_choice < 0 or idx_choice >= len(files):
        console.print("[red]Invalid choice.[/red]")
        return None
    return files[idx_choice]


def show_main_menu():
    console.print("\n[bold cyan]Turing Machine Simulator[/bold cyan]")
    console.print("[1] Trace a Machine")
    console.print("[2] Run Input Pool")
    console.print("[3] Inspect/Convert Definition")
    console.print("[4] Edit Config")
    console.print("[5] Exit")


def handle_trace(config):
    console.print("\n[bold]Trace a Machine[/bold]")
    path = choose_file("Available Definitions", DEFINITIONS_DIR, ["*.tm", "*.tmb", "*.b64"])
    if path is None:
        return

    allow_undefined = Confirm.ask("Allow undefined transitions?", default=config["allow_undefined"])
    max_steps = IntPrompt.ask("Max Steps", default=config["max_steps"])

    definition = load_any_definition(path)
    machine, history, _ = trace(
        definition,
        allow_undefined=allow_undefined,
        max_steps=max_steps,
        radius=config["tape_window"],
        transition_limit=config["transition_display_limit"],
        history_limit=config["history_limit"],
        delay=config["step_delay"],
    )
    console.print(render_report(definition, machine, history, radius=config["tape_window"]))


def handle_pool(config):
    console.print("\n[bold]Run Input Pool[/bold]")
    definition_path = choose_file("Available Definitions", DEFINITIONS_DIR, ["*.tm"])
    if definition_path is None:
        return
    pool_path = choose_file("Available Pools", POOLS_DIR, ["*.txt"])
    if pool_path is None:
        return

    batch_size = IntPrompt.ask("Batch Size", default=config["batch_size"])
    max_steps = IntPrompt.ask("Max Steps", default=config["max_steps"])
    threads = IntPrompt.ask("Worker Threads", default=config["worker_threads"])

    summary = simulate_pool(
        definition_path,
        pool_path,
        "results",
        batch_size=batch_size,
        max_steps=max_steps,
        allow_undefined=config["allow_undefined"],
        worker_threads=threads,
        results_directory=config["results_directory"],
        logger=JSONLogger.from_config(config),
    )

    table = Table(title="Pool Summary")
    table.add_column("Metric")
    table.add_column("Value", justify="right")
    for key, value in summary.items():
        table.add_row(key, f"{value:,}" if isinstance(value, int) else f"{value:.2f}")
    console.print(table)


def handle_inspect():
    console.print("\n[bold]Inspect/Convert Definition[/bold]")
    path = choose_file("Available Definitions", DEFINITIONS_DIR, ["*.tm", "*.tmb", "*.b64"])
    if path is None:
        return

    definition = load_any_definition(path)
    pretty_print_definition(definition)

    action = Prompt.ask("Convert to", choices=["binary", "base64", "text", "none"], default="none")
    if action == "binary":
        console.print(f"[green]Wrote {write_definition(path.with_suffix('.tmb'), definition)}[/green]")
    elif action == "base64":
        target = path.with_suffix(".b64")
        target.write_text(to_base64(definition), encoding="utf-8")
        console.print(f"[green]Wrote {target}[/green]")
    elif action == "text":
        target = path.with_suffix(".tm")
        target.write_text(definition.to_text(), encoding="utf-8")
        console.print(f"[green]Wrote {target}[/green]")


def handle_edit_config(config):
    console.print("\n[bold]Edit Config[/bold]")

    config.update({
        "max_steps": IntPrompt.ask("Max Steps", default=config["max_steps"]),
        "allow_undefined": Confirm.ask("Allow undefined transitions?", default=config["allow_undefined"]),
        "tape_window": IntPrompt.ask("Tape Window (cells each side)", default=config["tape_window"]),
        "worker_threads": IntPrompt.ask("Worker Threads", default=config["worker_threads"]),
        "batch_size": IntPrompt.ask("Batch Size", default=config["batch_size"]),
    })

    save_config(config, DEFAULT_CONFIG_PATH)
    console.print("[green]Configuration updated successfully.[/green]")


def interactive_main():
    config = load_config_or_default()

    while True:
        show_main_menu()
        choice = Prompt.ask("\nChoose an option", choices=["1", "2", "3", "4", "5"], default="5")

        try:
            if choice == "1":
                handle_trace(config)
            elif choice == "2":
                handle_pool(config)
            elif choice == "3":
                handle_inspect()
            elif choice == "4":
                handle_edit_config(config)
                config = load_config_or_default()
            elif choice == "5":
                console.print("[bold green]Goodbye![/bold green]")
                break
        except (DefinitionParseError, DecodeError, OSError, ValueError, LookupError) as e:
            console.print(f"[red]Error: {e}[/red]")


# === CLI Mode for Automation ===
def cli_main(args):
    config = load_config_or_default()

    if args.trace:
        definition = load_any_definition(args.trace)
        machine, history, _ = trace(
            definition,
            allow_undefined=config["allow_undefined"],
            max_steps=config["max_steps"],
            radius=config["tape_window"],
            transition_limit=config["transition_display_limit"],
            history_limit=config["history_limit"],
            live=False,
        )
        console.print(render_report(definition, machine, history, radius=config["tape_window"]))
    if args.pool:
        if not args.definition:
            console.print("[red]--pool needs --definition.[/red]")
            raise SystemExit(2)
        simulate_pool(
            args.definition,
            args.pool,
            "results",
            batch_size=config["batch_size"],
            max_steps=config["max_steps"],
            allow_undefined=config["allow_undefined"],
            worker_threads=config["worker_threads"],
            results_directory=config["results_directory"],
            logger=JSONLogger.from_config(config),
        )


def main():
    parser = argparse.ArgumentParser(description="Turing Machine Simulator Application")
    parser.add_argument("--trace", help="Trace a definition file immediately")
    parser.add_argument("--pool", help="Run an input pool file immediately (needs --definition)")
    parser.add_argument("--definition", help="Definition file used with --pool")
    args = parser.parse_args()

    if args.trace or args.pool:
        cli_main(args)
    else:
        interactive_main()


if __name__ == "__main__":
    main()
