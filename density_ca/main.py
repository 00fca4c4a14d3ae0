#!/usr/bin/env python3
"""CLI for the sequential density classification automaton."""

import argparse
import sys
from pathlib import Path

import numpy as np

from .automaton import Configuration, ConfigurationError
from .metrics import convergence_profile
from .search import DEFAULT_MAX_SIZE, DEFAULT_MIN_SIZE, ExhaustiveSearch, search_all
from .visualize import print_trace, save_trace_image


def cmd_verify(args):
    """Check every configuration of every size in the range."""
    try:
        search = ExhaustiveSearch(
            workers=args.workers,
            chunk_size=args.chunk_size,
            symmetric=not args.full_range,
            verbose=not args.quiet,
        )
        print(f"Verifying sizes {args.min_size} to {args.max_size} on {search.workers} workers")
        results = search_all(args.min_size, args.max_size, search=search)
    except ValueError as e:
        print(f"Error: {e}")
        sys.exit(1)

    failed = [r.size for r in results if not r.clean]
    if failed:
        print(f"\nSizes not verified clean: {', '.join(map(str, failed))}")
        sys.exit(2)


def _run_and_show(config: Configuration, args):
    majority = config.majority()
    history = config.trace()
    print_trace(history)

    print()
    print(f"Sweeps: {config.generation}")
    if majority is None:
        print("Tie: any outcome is accepted")
    elif not config.has_converged():
        print(f"Did not converge within {config.sweep_budget} sweeps")
    else:
        verdict = "correct" if config.value & 1 == majority else "INCORRECT"
        print(f"Majority {majority}, converged to {config.value & 1}: {verdict}")

    if args.image:
        output = Path(args.image)
        output.parent.mkdir(parents=True, exist_ok=True)
        save_trace_image(history, str(output), cell_size=args.cell_size)
        print(f"Saved space-time diagram to: {output}")


def cmd_show(args):
    """Print the execution of a random configuration."""
    try:
        config = Configuration.random(args.size, np.random.default_rng(args.seed))
    except ConfigurationError as e:
        print(f"Error: {e}")
        sys.exit(1)

    _run_and_show(config, args)


def cmd_check(args):
    """Print the execution of a given configuration."""
    try:
        value = int(args.value, 0)
    except ValueError as e:
        print(f"Error parsing value '{args.value}': {e}")
        sys.exit(1)

    try:
        config = Configuration(value, args.size)
    except ConfigurationError as e:
        print(f"Error: {e}")
        sys.exit(1)

    _run_and_show(config, args)


def cmd_profile(args):
    """Show convergence statistics for one size."""
    try:
        stats = convergence_profile(args.size, symmetric=not args.full_range)
    except ConfigurationError as e:
        print(f"Error: {e}")
        sys.exit(1)

    print(f"Convergence profile for size {stats.size}:")
    print(f"  Configurations:  {stats.checked}")
    print(f"  Ties:            {stats.ties}")
    print(f"  Mean sweeps:     {stats.mean_sweeps:.2f}")
    print(f"  Max sweeps:      {stats.max_sweeps}")
    print(f"  Failures:        {len(stats.failures)}")
    print()
    print(f"{'Sweeps':<8}{'Count':<10}")
    print("-" * 18)
    for sweeps, count in enumerate(stats.sweep_histogram):
        if count:
            print(f"{sweeps:<8}{count:<10}")


def main():
    parser = argparse.ArgumentParser(
        description="Sequential cellular automaton for density classification"
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Verify command
    verify_parser = subparsers.add_parser("verify", help="Exhaustively check all configurations")
    verify_parser.add_argument("--min-size", type=int, default=DEFAULT_MIN_SIZE, help="Smallest ring size")
    verify_parser.add_argument("--max-size", type=int, default=DEFAULT_MAX_SIZE, help="Largest ring size")
    verify_parser.add_argument("-w", "--workers", type=int, default=None, help="Worker processes (default: all CPUs)")
    verify_parser.add_argument("--chunk-size", type=int, default=None, help="Candidates per work unit")
    verify_parser.add_argument("--full-range", action="store_true", help="Do not skip complemented configurations")
    verify_parser.add_argument("-q", "--quiet", action="store_true", help="No progress output")
    verify_parser.set_defaults(func=cmd_verify)

    # Show command
    show_parser = subparsers.add_parser("show", help="Show the execution of a random configuration")
    show_parser.add_argument("size", type=int, nargs="?", default=13, help="Ring size")
    show_parser.add_argument("--seed", type=int, default=None, help="Random seed")
    show_parser.add_argument("--image", type=str, default=None, help="Save a space-time diagram PNG")
    show_parser.add_argument("--cell-size", type=int, default=8, help="Cell size in pixels")
    show_parser.set_defaults(func=cmd_show)

    # Check command
    check_parser = subparsers.add_parser("check", help="Show the execution of a given configuration")
    check_parser.add_argument("value", type=str, help="Initial value, cell 0 is the lowest bit; decimal, or binary with a 0b prefix (e.g. 0b011)")
    check_parser.add_argument("size", type=int, help="Ring size")
    check_parser.add_argument("--image", type=str, default=None, help="Save a space-time diagram PNG")
    check_parser.add_argument("--cell-size", type=int, default=8, help="Cell size in pixels")
    check_parser.set_defaults(func=cmd_check)

    # Profile command
    profile_parser = subparsers.add_parser("profile", help="Convergence statistics for one size")
    profile_parser.add_argument("size", type=int, help="Ring size")
    profile_parser.add_argument("--full-range", action="store_true", help="Do not skip complemented configurations")
    profile_parser.set_defaults(func=cmd_profile)

    args = parser.parse_args()

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    args.func(args)


if __name__ == "__main__":
    main()
