"""
Times distributed runs over a grid of matrix sizes and worker counts.

Usage:
    python benchmarks/worker_scaling.py --sizes 64 256 512 --workers 1 2 4 8
"""

import argparse
import os
import sys

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from benchmarks.utils import Benchmark
from pipemat.config import RunConfig
from pipemat.engine import run_and_verify


def run_grid(sizes, worker_counts, repeats=3):
    """Returns one row per (size, workers) with the best wall time of `repeats` runs."""
    rows = []
    for size in sizes:
        for workers in worker_counts:
            best = None
            for _ in range(repeats):
                with Benchmark(f"N={size} P={workers}") as bench:
                    report = run_and_verify(RunConfig(size=size, workers=workers))
                if not report.passed:
                    raise RuntimeError(f"Run N={size} P={workers} failed verification")
                if best is None or bench.elapsed < best.elapsed:
                    best = bench
            rows.append({
                'size': size,
                'workers': workers,
                'seconds': best.elapsed,
                'peak_mem_mb': best.peak_mem,
                'avg_cpu': best.avg_cpu,
            })
    return rows


def main():
    parser = argparse.ArgumentParser(description="pipemat worker scaling benchmark")
    parser.add_argument("--sizes", type=int, nargs="+", default=[64, 256, 512])
    parser.add_argument("--workers", type=int, nargs="+", default=[1, 2, 4, 8])
    parser.add_argument("--repeats", type=int, default=3)
    args = parser.parse_args()

    print(f"{'N':>6} {'P':>4} {'Time (s)':>12} {'Peak MB':>10} {'CPU %':>8}")
    print("-" * 44)
    for row in run_grid(args.sizes, args.workers, args.repeats):
        print(f"{row['size']:>6} {row['workers']:>4} {row['seconds']:>12.4f} "
              f"{row['peak_mem_mb']:>10.1f} {row['avg_cpu']:>8.1f}")


if __name__ == "__main__":
    main()
