"""
mdexpand Performance Benchmarks

Benchmarking suite covering:
- Directive parsing (code span scanning, pattern matching)
- Import expansion (flat, deep and glob imports)

Run with: python -m benchmarks.run
"""
