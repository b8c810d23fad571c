"""
main.py — Command file runner and entry point.

Run this file with a command file to process it through a fresh engine:

    python main.py input.txt

Status lines are written to ``input_output_file.txt`` beside the input.

This file does NOT contain allocation logic. See seat_allocation/main.py for
session wiring and seat_allocation/services/ for the engine.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Optional, Sequence

from seat_allocation.main import run_file


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Allocate seats and manage a priority waitlist from a command file.",
    )
    parser.add_argument(
        "input_file",
        type=Path,
        help="the command file to process, one command per line",
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    input_path: Path = args.input_file
    if not input_path.is_file():
        print(f"Error processing the file: {input_path} does not exist", file=sys.stderr)
        return 1

    try:
        output_path = run_file(input_path)
    except OSError as exc:
        print(f"Error processing the file: {exc}", file=sys.stderr)
        return 1

    print(f"  Output written → {output_path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
