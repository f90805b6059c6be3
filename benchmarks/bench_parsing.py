"""
Benchmarks for directive parsing.

Measures:
- Code span scanning on prose-heavy and code-heavy documents
- Full directive parsing for various document sizes
- has_directives pre-screen vs full parse
"""

import statistics
import time
from pathlib import Path
from typing import NamedTuple

from mdexpand.core.parser import has_directives, parse_directives
from mdexpand.core.scanner import find_safe_ranges


class BenchmarkResult(NamedTuple):
    """Result of a single benchmark."""

    name: str
    iterations: int
    mean_ms: float
    std_ms: float
    min_ms: float
    max_ms: float


def _time_ms(func, iterations: int = 100, name: str | None = None) -> BenchmarkResult:
    """Time a function over multiple iterations."""
    times = []
    for _ in range(iterations):
        start = time.perf_counter()
        func()
        elapsed = (time.perf_counter() - start) * 1000
        times.append(elapsed)

    return BenchmarkResult(
        name=name or (func.__name__ if hasattr(func, "__name__") else "anonymous"),
        iterations=iterations,
        mean_ms=statistics.mean(times),
        std_ms=statistics.stdev(times) if len(times) > 1 else 0,
        min_ms=min(times),
        max_ms=max(times),
    )


# Fixture: no directives at all
PLAIN_DOC = """\
# Release notes

Nothing to import here, just prose and an address: team@example.com.
"""

# Fixture: typical prompt with a handful of imports
SMALL_DOC = """\
# Review

Follow @./rules/style.md and @./rules/security.md.

Current state:
!`git status --short`

Relevant code: @./src/api.ts#Client and @./src/api.ts:10-40
"""


def _generate_large_doc(sections: int = 200) -> str:
    """Generate a document mixing prose, code blocks and directives."""
    parts = []
    for i in range(sections):
        parts.append(f"## Section {i}\n")
        parts.append(f"See @./docs/part_{i:03d}.md and `@./not/a/directive.md`.\n")
        if i % 3 == 0:
            parts.append("```ts\nconst example = '@./inside/fence.md';\n```\n")
        if i % 10 == 0:
            parts.append(f"Log: !`git log -1 --format=%h -- file_{i}`\n")
    return "\n".join(parts)


LARGE_DOC = _generate_large_doc()


def bench_safe_ranges_large() -> BenchmarkResult:
    """Benchmark code span scanning on a large document."""
    def scan():
        find_safe_ranges(LARGE_DOC)

    return _time_ms(scan, iterations=50, name="safe_ranges_large")


def bench_parse_small() -> BenchmarkResult:
    """Benchmark parsing a typical prompt."""
    def parse():
        parse_directives(SMALL_DOC)

    return _time_ms(parse, iterations=1000, name="parse_small")


def bench_parse_large() -> BenchmarkResult:
    """Benchmark parsing a large mixed document."""
    def parse():
        parse_directives(LARGE_DOC)

    return _time_ms(parse, iterations=50, name="parse_large")


def bench_has_directives_plain() -> BenchmarkResult:
    """Benchmark the pre-screen on a document with nothing to expand."""
    def check():
        has_directives(PLAIN_DOC)

    return _time_ms(check, iterations=5000, name="has_directives_plain")


def bench_parse_from_file(tmp_path: Path) -> BenchmarkResult:
    """Benchmark reading and parsing from the filesystem."""
    doc = tmp_path / "benchmark.md"
    doc.write_text(LARGE_DOC)

    def parse():
        parse_directives(doc.read_text())

    return _time_ms(parse, iterations=50, name="parse_from_file")


def run_all(tmp_path: Path | None = None) -> list[BenchmarkResult]:
    """Run all parsing benchmarks."""
    results = [
        bench_safe_ranges_large(),
        bench_parse_small(),
        bench_parse_large(),
        bench_has_directives_plain(),
    ]

    if tmp_path:
        results.append(bench_parse_from_file(tmp_path))

    return results


if __name__ == "__main__":
    import tempfile

    with tempfile.TemporaryDirectory() as tmp:
        results = run_all(Path(tmp))
        print("\n=== Parsing Benchmarks ===\n")
        for r in results:
            print(f"{r.name}:")
            print(f"  mean: {r.mean_ms:.3f}ms (±{r.std_ms:.3f}ms)")
            print(f"  range: [{r.min_ms:.3f}ms, {r.max_ms:.3f}ms]")
            print(f"  iterations: {r.iterations}")
            print()
