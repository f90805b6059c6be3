#!/usr/bin/env python3
"""
mdexpand Benchmark Runner

Runs all benchmarks and produces a report.

Usage:
    python -m benchmarks.run           # Run all benchmarks
    python -m benchmarks.run --json    # JSON output
"""

import argparse
import json
import sys
import tempfile
from datetime import datetime
from pathlib import Path
from typing import NamedTuple

from . import bench_expansion, bench_parsing


class BenchmarkResult(NamedTuple):
    """Benchmark result tagged with its suite."""

    category: str
    name: str
    iterations: int
    mean_ms: float
    std_ms: float
    min_ms: float
    max_ms: float


def run_all_benchmarks() -> list[BenchmarkResult]:
    """Run all benchmark suites."""
    results: list[BenchmarkResult] = []

    with tempfile.TemporaryDirectory() as tmp:
        tmp_path = Path(tmp)

        print("Running parsing benchmarks...", file=sys.stderr)
        for r in bench_parsing.run_all(tmp_path):
            results.append(BenchmarkResult("parsing", *r))

        print("Running expansion benchmarks...", file=sys.stderr)
        expansion_dir = tmp_path / "expansion"
        expansion_dir.mkdir()
        for r in bench_expansion.run_all(expansion_dir):
            results.append(BenchmarkResult("expansion", *r))

    return results


def format_table(results: list[BenchmarkResult]) -> str:
    """Format results as a markdown table."""
    lines = [
        "| Category | Benchmark | Mean (ms) | Std (ms) | Min | Max | Iterations |",
        "|----------|-----------|-----------|----------|-----|-----|------------|",
    ]

    for r in results:
        lines.append(
            f"| {r.category} | {r.name} | {r.mean_ms:.3f} | {r.std_ms:.3f} | "
            f"{r.min_ms:.3f} | {r.max_ms:.3f} | {r.iterations} |"
        )

    return "\n".join(lines)


def main():
    parser = argparse.ArgumentParser(description="mdexpand benchmark runner")
    parser.add_argument("--json", action="store_true", help="JSON output")
    parser.add_argument("--output", "-o", type=Path, help="Output file")
    args = parser.parse_args()

    results = run_all_benchmarks()

    if args.json:
        output = {
            "timestamp": datetime.now().isoformat(),
            "results": [r._asdict() for r in results],
        }
        text = json.dumps(output, indent=2)
    else:
        text = "\n".join([
            "# mdexpand Performance Benchmarks",
            "",
            f"**Generated**: {datetime.now().isoformat()}",
            "",
            format_table(results),
            "",
        ])

    if args.output:
        args.output.write_text(text)
        print(f"Results written to {args.output}", file=sys.stderr)
    else:
        print(text)


if __name__ == "__main__":
    main()
