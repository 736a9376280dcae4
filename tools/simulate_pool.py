# tools/simulate_pool.py

import argparse
import json
from functools import partial
from multiprocessing.pool import ThreadPool
from pathlib import Path

import numpy as np
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, BarColumn, TextColumn, TimeElapsedColumn

from config.config_loader import load_config_or_default
from logger.logger import JSONLogger
from simulator.dsl import load_definition
from simulator.machine_config import Status
from simulator.turing_machine import create_machine

console = Console()


# === Single Run ===
def run_input(definition, tape, max_steps=100_000, allow_undefined=False):
    """Run one input tape to completion (or the step bound) and describe the outcome."""
    if definition.blank is None:
        raise ValueError("The definition declares no blank symbol (%blank).")
    unknown = sorted(set(tape) - set(definition.charset))
    if unknown:
        raise ValueError(f"Input {tape!r} uses symbols outside the charset: {unknown}")

    machine = create_machine(definition.configuration, definition.blank, allow_undefined=allow_undefined)
    machine.initialize(tape)
    steps = machine.run(max_steps)

    return {
        "input": tape,
        "status": machine.status.name,
        "accepted": machine.status == Status.HALTED_ACCEPT,
        "steps_taken": steps,
        "head": machine.current_address,
        "final_state": machine.current_state_id,
        "tape": "".join(machine.memory.to_dense_array()),
    }


def _run_or_report(definition, tape, max_steps, allow_undefined):
    try:
        return run_input(definition, tape, max_steps=max_steps, allow_undefined=allow_undefined)
    except (ValueError, LookupError) as e:
        console.print(f"[yellow][WARNING] Failed to simulate {tape!r}: {e}[/yellow]")
        return {"input": tape, "status": "FAILED", "error": str(e)}


# === Utility Loaders ===
def load_input_pool(pool_file):
    with open(pool_file, "r", encoding="utf-8") as f:
        tapes = [line.strip() for line in f if line.strip()]
    return tapes


def load_checkpoint(checkpoint_path):
    if checkpoint_path.exists():
        with open(checkpoint_path, "r", encoding="utf-8") as f:
            checkpoint = json.load(f)
        return checkpoint.get("completed", [])
    return []


def save_checkpoint(completed, checkpoint_path):
    with open(checkpoint_path, "w", encoding="utf-8") as f:
        json.dump({"completed": completed}, f, indent=4)


def summarize(results):
    """Outcome counts and step statistics over a list of run entries."""
    finished = [r for r in results if r["status"] != "FAILED"]
    steps = np.array([r["steps_taken"] for r in finished], dtype=np.int64)
    statuses = [r["status"] for r in results]
    return {
        "runs": len(results),
        "accepted": statuses.count(Status.HALTED_ACCEPT.name),
        "rejected": statuses.count(Status.HALTED_REJECT.name),
        "unhalted": statuses.count(Status.ACTIVE.name),
        "failed": statuses.count("FAILED"),
        "mean_steps": float(steps.mean()) if steps.size else 0.0,
        "median_steps": float(np.median(steps)) if steps.size else 0.0,
        "max_steps": int(steps.max()) if steps.size else 0,
    }


# === Main Simulation Runner ===
def simulate_pool(definition_path, pool_file, output_name="results", batch_size=256, max_steps=100_000,
                  allow_undefined=False, worker_threads=4, results_directory="results", logger=None):
    definition = load_definition(definition_path)

    pool_name = Path(pool_file).stem
    results_folder = Path(results_directory) / pool_name
    results_folder.mkdir(parents=True, exist_ok=True)
    results_file = results_folder / f"{output_name}.jsonl"
    checkpoint_file = results_folder / f"{output_name}_checkpoint.json"

    all_tapes = load_input_pool(pool_file)
    completed = load_checkpoint(checkpoint_file)
    done = set(completed)

    pending_tapes = [t for t in all_tapes if t not in done]
    console.print(f"Loaded {len(all_tapes):,} inputs. {len(pending_tapes):,} pending.")

    run = partial(_run_or_report, definition, max_steps=max_steps, allow_undefined=allow_undefined)
    all_results = []

    with open(results_file, "a", encoding="utf-8") as results_fh:
        for batch_start in range(0, len(pending_tapes), batch_size):
            batch = pending_tapes[batch_start:batch_start + batch_size]
            console.print(f"Processing batch {batch_start // batch_size + 1} with {len(batch):,} inputs...")

            with Progress(
                    SpinnerColumn(),
                    BarColumn(),
                    "[progress.percentage]{task.percentage:>3.0f}%",
                    TextColumn("{task.completed}/{task.total} Inputs"),
                    TimeElapsedColumn(),
                    console=console,
            ) as progress:
                task = progress.add_task("[cyan]Simulating...", total=len(batch))
                batch_results = []

                # Threads share the definition's configuration read-only; each run owns its machine.
                with ThreadPool(processes=worker_threads) as pool:
                    for entry in pool.imap(run, batch):
                        batch_results.append(entry)
                        progress.update(task, advance=1)

            # === BULK WRITE once per batch ===
            for entry in batch_results:
                results_fh.write(json.dumps(entry) + "\n")
            results_fh.flush()

            completed.extend(entry["input"] for entry in batch_results if entry["status"] != "FAILED")
            save_checkpoint(completed, checkpoint_file)
            if logger is not None:
                logger.rotate()
                logger.log_by_outcome([e for e in batch_results if e["status"] != "FAILED"])
            all_results.extend(batch_results)

    summary = summarize(all_results)
    console.print(f"[green][SUCCESS] {summary['runs']:,} inputs simulated. Results saved to {results_file}[/green]")
    return summary


# === CLI ===
def main():
    config = load_config_or_default()

    parser = argparse.ArgumentParser(description="Run a machine definition against a pool of input tapes.")
    parser.add_argument("--definition", required=True, help="Path to the machine definition (.tm text)")
    parser.add_argument("--pool", required=True, help="Path to the input pool file (one tape per line)")
    parser.add_argument("--output", default="results", help="Output result file name (default: results)")
    parser.add_argument("--batch_size", type=int, default=config["batch_size"], help="Inputs per checkpoint")
    parser.add_argument("--max_steps", type=int, default=config["max_steps"], help="Step bound per input")
    parser.add_argument("--threads", type=int, default=config["worker_threads"], help="Worker threads")
    parser.add_argument("--allow_undefined", action="store_true", default=config["allow_undefined"],
                        help="Keep running on undefined transitions instead of rejecting")
    args = parser.parse_args()

    summary = simulate_pool(
        args.definition,
        args.pool,
        args.output,
        batch_size=args.batch_size,
        max_steps=args.max_steps,
        allow_undefined=args.allow_undefined,
        worker_threads=args.threads,
        results_directory=config["results_directory"],
        logger=JSONLogger.from_config(config),
    )
    console.print(summary)


if __name__ == "__main__":
    main()
