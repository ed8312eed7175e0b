"""
Command-line driver: load grammar files, print every normalization step and
the resulting CNF grammar.
"""

from __future__ import annotations
import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .analysis import classify, enumerate_strings
from .cnf import to_cnf
from .config import NormalizerConfig, NormalizerConfigError
from .errors import GrammarError
from .grammar import EPS, Grammar
from .logger import setup_logger
from .parser import from_file

logger = logging.getLogger("cnf_normalizer.cli")


# ---------- Printing ----------

def print_step(title: str, g: Grammar) -> None:
    print("=" * 80)
    print(title)
    print("-" * 80)
    print(g)
    print()


def print_strings(g: Grammar, max_length: int) -> None:
    words = sorted(enumerate_strings(g, max_length), key=lambda w: (len(w), w))
    sep = "" if all(len(s) == 1 for s in g.terminals) else " "
    print(f"Strings of length <= {max_length} ({len(words)}):")
    for w in words:
        print("  " + (sep.join(w) if w else EPS))
    print()


# ---------- CLI ----------

def non_negative_int(value: str) -> int:
    try:
        n = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid int value: {value!r}")
    if n < 0:
        raise argparse.ArgumentTypeError(f"must be >= 0, got {n}")
    return n


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="cnf-normalizer",
        description="Convert context-free grammars to Chomsky Normal Form (ε, unit, useless, CNF)",
    )
    ap.add_argument("files", nargs="+", help="Grammar file(s) (txt)")
    ap.add_argument("--no-steps", action="store_true", help="Only print the final CNF grammar")
    ap.add_argument("--keep-start-epsilon", action="store_true",
                    help="Keep start -> ε when the start symbol is nullable")
    ap.add_argument("--start", help="Start symbol (default: first left side or %%start)")
    ap.add_argument("--classify", action="store_true", help="Print the Chomsky type of the input grammar")
    ap.add_argument("--sample", type=non_negative_int, metavar="N",
                    help="Print the strings of length <= N of the input and of the CNF grammar")
    ap.add_argument("--config", help="JSON config file")
    ap.add_argument("--log-level", help="DEBUG, INFO, WARNING, ERROR")
    ap.add_argument("--no-color", action="store_true", help="Plain log output")
    return ap


def load_config(args: argparse.Namespace) -> NormalizerConfig:
    config = NormalizerConfig.load(args.config) if args.config else NormalizerConfig()
    if args.no_steps:
        config.verbose = False
    if args.keep_start_epsilon:
        config.keep_start_epsilon = True
    if args.log_level:
        config.log_level = args.log_level
    return config


def run_file(path: Path, config: NormalizerConfig, args: argparse.Namespace) -> Grammar:
    g = from_file(path, start=args.start)
    if config.verbose:
        print_step(f"Original grammar ({path.name}, start: {g.start})", g)
    if args.classify:
        print(f"Classification: {classify(g).label}\n")

    cnf = to_cnf(g, config, on_step=print_step if config.verbose else None)
    print_step("Grammar in CNF", cnf)

    if args.sample is not None:
        print("Original grammar")
        print_strings(g, args.sample)
        print("CNF grammar")
        print_strings(cnf, args.sample)
    return cnf


def main(argv: Optional[List[str]] = None) -> int:
    ap = build_parser()
    args = ap.parse_args(argv)

    try:
        config = load_config(args)
    except NormalizerConfigError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 2
    setup_logger(config.log_level, use_color=not args.no_color)

    status = 0
    for file_path in args.files:
        path = Path(file_path)
        try:
            run_file(path, config, args)
        except (OSError, UnicodeDecodeError) as e:
            logger.error(f"Cannot read {path}: {e}")
            print(f"ERROR: {path}: {e}", file=sys.stderr)
            status = 1
        except GrammarError as e:
            logger.error(f"{path}: {type(e).__name__}: {e}")
            print(f"ERROR: {path}: {e}", file=sys.stderr)
            status = 1
    return status


if __name__ == "__main__":
    sys.exit(main())
