"""
Command-line entry point: run one distributed multiplication and report.

Usage:
    pipemat --size 10 --workers 4

Exit Status:
    0: Distributed result matches the reference
    1: Transport failure or result mismatch
    2: Setup failure or invalid configuration
"""

import argparse
import sys

from .config import MATRIX_SIZE, WORKER_COUNT, RunConfig
from .engine import run_and_verify
from .errors import SetupFailure
from .matrix import format_matrix
from .observability import RunProfiler, configure_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pipemat",
        description="Distributed integer matrix multiplication over per-worker pipes"
    )
    parser.add_argument(
        "--size", "-n",
        type=int,
        default=MATRIX_SIZE,
        help=f"Matrix dimension N (default: {MATRIX_SIZE})"
    )
    parser.add_argument(
        "--workers", "-p",
        type=int,
        default=WORKER_COUNT,
        help=f"Number of worker tasks P (default: {WORKER_COUNT})"
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Console logging level"
    )
    parser.add_argument(
        "--log-file",
        type=str,
        default=None,
        help="Also write a detailed DEBUG log to this file"
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Do not print the matrices"
    )
    parser.add_argument(
        "--profile",
        action="store_true",
        help="Print how long each phase took"
    )
    parser.add_argument(
        "--profile-json",
        type=str,
        default=None,
        help="Save phase timings to a JSON file"
    )
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(level=args.log_level, log_file=args.log_file)

    try:
        config = RunConfig(size=args.size, workers=args.workers)
    except ValueError as exc:
        print(f"Invalid configuration: {exc}", file=sys.stderr)
        return 2

    profiler = RunProfiler(enabled=args.profile or args.profile_json is not None)

    print(f"Distributed Matrix Multiplication ({config.size}x{config.size}) with {config.workers} workers")
    try:
        report = run_and_verify(config, profiler=profiler)
    except SetupFailure as exc:
        print(f"Setup failed: {exc}", file=sys.stderr)
        return 2

    if not args.quiet:
        print("\nResult matrix C (distributed):")
        print(format_matrix(report.result))
        print("\nReference matrix C_ref (single-threaded):")
        print(format_matrix(report.reference))

    for failure in report.failures:
        print(f"\nTransport failure: {failure}")

    if report.passed:
        print("\nSUCCESS: distributed result matches reference.")
    else:
        error = report.verification.to_error()
        if error is not None:
            print(f"\nERROR: distributed result differs from reference: {error}")
        else:
            print("\nERROR: distributed run had transport failures.")

    if args.profile:
        print()
        print(profiler.format_summary())
    if args.profile_json:
        profiler.save_json(args.profile_json)

    return 0 if report.passed else 1


if __name__ == "__main__":
    sys.exit(main())
