"""Measurement core: timed fetches and per-proxy chunk scheduling."""

from proxybench.bench.fetch import build_liveness_url, fetch_through_proxy
from proxybench.bench.models import FetchOutcome, Result
from proxybench.bench.scheduler import ChunkAccumulator, run_chunks

__all__ = [
    "ChunkAccumulator",
    "FetchOutcome",
    "Result",
    "build_liveness_url",
    "fetch_through_proxy",
    "run_chunks",
]
