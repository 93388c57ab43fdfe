"""Benchmark run orchestration."""

from proxybench.jobs.runner import BenchmarkConfig, DEFAULT_LIVENESS_URL, run_all

__all__ = ["BenchmarkConfig", "DEFAULT_LIVENESS_URL", "run_all"]
