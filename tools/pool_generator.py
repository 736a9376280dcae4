import argparse
from itertools import product
from pathlib import Path

from simulator.dsl import load_definition


def input_alphabet(definition):
    """Charset symbols other than the blank, in declaration order."""
    return [s for s in definition.charset if s != definition.blank]


def generate_inputs(symbols, max_length, min_length=1):
    """All words over `symbols` from min_length to max_length, shortest first."""
    for length in range(min_length, max_length + 1):
        for word in product(symbols, repeat=length):
            yield "".join(word)


def save_pool(pool_file, tapes):
    pool_file = Path(pool_file)
    pool_file.parent.mkdir(parents=True, exist_ok=True)
    count = 0
    with open(pool_file, "w", encoding="utf-8") as f:
        for tape in tapes:
            f.write(tape + "\n")
            count += 1
    return count


def generate_pool(definition_path, max_length, pool_file=None, min_length=1):
    definition = load_definition(definition_path)
    symbols = input_alphabet(definition)
    if not symbols:
        raise ValueError("The definition has no input symbols besides the blank.")

    if pool_file is None:
        pool_file = Path("pools") / f"{Path(definition_path).stem}_len{max_length}.txt"

    total = sum(len(symbols) ** n for n in range(min_length, max_length + 1))
    print(f"[INFO] Preparing to generate {total:,} inputs over {' '.join(symbols)}...")
    count = save_pool(pool_file, generate_inputs(symbols, max_length, min_length))
    print(f"[INFO] Wrote {count:,} inputs to {pool_file}.")
    return pool_file


# === CLI WRAPPER ===
if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Input Pool Generator (all words up to a length)")

    parser.add_argument("--definition", required=True, help="Machine definition (.tm) providing the charset")
    parser.add_argument("--max_length", type=int, default=4, help="Longest input word (default=4)")
    parser.add_argument("--min_length", type=int, default=1, help="Shortest input word (default=1)")
    parser.add_argument("--output", help="Pool file to write (default: pools/<name>_len<N>.txt)")

    args = parser.parse_args()

    generate_pool(args.definition, args.max_length, args.output, args.min_length)
