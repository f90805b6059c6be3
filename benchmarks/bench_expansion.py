"""
Benchmarks for import expansion.

Measures:
- Flat documents with many sibling imports
- Deep import chains (cycle detection cost per level)
- Glob collection with .gitignore filtering

Commands are run in dry-run mode so no subprocesses are spawned.
"""

from pathlib import Path

from mdexpand.core.config import Config
from mdexpand.core.expander import ImportExpander

from .bench_parsing import BenchmarkResult, _time_ms


def _expander() -> ImportExpander:
    return ImportExpander(config=Config(), dry_run=True)


def _build_flat_tree(root: Path, count: int = 100) -> str:
    parts = root / "parts"
    parts.mkdir(parents=True, exist_ok=True)
    for i in range(count):
        (parts / f"part_{i:03d}.md").write_text(f"Part {i}: lorem ipsum dolor sit amet.\n")
    return "\n".join(f"@./parts/part_{i:03d}.md" for i in range(count))


def _build_chain(root: Path, depth: int = 30) -> str:
    chain = root / "chain"
    chain.mkdir(parents=True, exist_ok=True)
    for i in range(depth):
        body = f"Level {i}\n"
        if i + 1 < depth:
            body += f"@./level_{i + 1:02d}.md\n"
        (chain / f"level_{i:02d}.md").write_text(body)
    return "@./chain/level_00.md"


def _build_glob_tree(root: Path, count: int = 200) -> str:
    src = root / "src"
    (src / "generated").mkdir(parents=True, exist_ok=True)
    (root / ".gitignore").write_text("generated/\n")
    for i in range(count):
        (src / f"module_{i:03d}.ts").write_text(f"export const value{i} = {i};\n")
        (src / "generated" / f"gen_{i:03d}.ts").write_text("// generated\n")
    return "@./src/**/*.ts"


def bench_expand_flat(tmp_path: Path) -> BenchmarkResult:
    """Benchmark 100 sibling file imports."""
    doc = _build_flat_tree(tmp_path)
    expander = _expander()

    def expand():
        expander.expand(doc, tmp_path)

    return _time_ms(expand, iterations=20, name="expand_flat_100")


def bench_expand_chain(tmp_path: Path) -> BenchmarkResult:
    """Benchmark a 30-level import chain."""
    doc = _build_chain(tmp_path)
    expander = _expander()

    def expand():
        expander.expand(doc, tmp_path)

    return _time_ms(expand, iterations=20, name="expand_chain_30")


def bench_expand_glob(tmp_path: Path) -> BenchmarkResult:
    """Benchmark a recursive glob over 400 files, half ignored."""
    doc = _build_glob_tree(tmp_path)
    expander = _expander()

    def expand():
        expander.expand(doc, tmp_path)

    return _time_ms(expand, iterations=10, name="expand_glob_200")


def run_all(tmp_path: Path) -> list[BenchmarkResult]:
    """Run all expansion benchmarks."""
    (tmp_path / ".git").mkdir(exist_ok=True)
    return [
        bench_expand_flat(tmp_path),
        bench_expand_chain(tmp_path),
        bench_expand_glob(tmp_path),
    ]
