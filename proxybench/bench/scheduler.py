"""Chunk scheduler: parallel downloads through one proxy, folded into a Result.

The per-proxy download is split into ``concurrency`` equal chunks (integer
division; the remainder is not fetched). Each chunk runs in its own worker
thread and records its outcome into a shared ``ChunkAccumulator``.

Aggregation rules:
- bytes and TTFB are summed over successful chunks only;
- the TTFB average divides by the configured concurrency, not by the number
  of successes, so partial failure skews the reported TTFB downwards;
- bandwidth is total bytes over the wall-clock time from scheduler start to
  the last worker finishing;
- when no chunk succeeds both metrics are unavailable.
"""

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Tuple

from proxybench.bench.fetch import fetch_through_proxy
from proxybench.bench.models import FetchOutcome, Result
from proxybench.network.dialers import Dialer

LOGGER = logging.getLogger(__name__)

MIN_ELAPSED_SECONDS = 1e-9

Fetcher = Callable[[Dialer, int, float, str], FetchOutcome]


class ChunkAccumulator:
    """Thread-safe, order-independent fold over ``FetchOutcome`` values."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._bytes = 0
        self._ttfb_total = 0.0
        self._successes = 0
        self._failures = 0

    def add(self, outcome: FetchOutcome) -> None:
        with self._lock:
            if not outcome.success:
                self._failures += 1
                return
            self._bytes += outcome.bytes_transferred
            self._ttfb_total += outcome.ttfb or 0.0
            self._successes += 1

    def totals(self) -> Tuple[int, float, int, int]:
        """Return ``(bytes, ttfb_total, successes, failures)``."""
        with self._lock:
            return self._bytes, self._ttfb_total, self._successes, self._failures


def run_chunks(
    name: str,
    dialer: Dialer,
    total_size: int,
    timeout: float,
    concurrency: int,
    url_template: str,
    *,
    fetcher: Fetcher = fetch_through_proxy,
    clock: Callable[[], float] = time.perf_counter,
) -> Result:
    """Benchmark one proxy with ``concurrency`` parallel chunk downloads."""
    concurrency = max(1, int(concurrency))
    chunk_size = total_size // concurrency
    accumulator = ChunkAccumulator()

    def worker() -> None:
        try:
            outcome = fetcher(dialer, chunk_size, timeout, url_template)
        except Exception as exc:  # noqa: BLE001 - a crashing fetcher is a failed chunk
            LOGGER.warning("Chunk fetch for %s raised: %s", name, exc)
            outcome = FetchOutcome.failed(str(exc))
        accumulator.add(outcome)

    start = clock()
    with ThreadPoolExecutor(max_workers=concurrency, thread_name_prefix="chunk") as executor:
        for _ in range(concurrency):
            executor.submit(worker)
    elapsed = clock() - start

    downloaded, ttfb_total, successes, failures = accumulator.totals()
    LOGGER.debug(
        "Proxy %s chunks: ok=%d failed=%d bytes=%d elapsed=%.3fs",
        name,
        successes,
        failures,
        downloaded,
        elapsed,
    )
    if successes == 0 or downloaded == 0:
        return Result.unavailable(name)

    return Result(
        name=name,
        bandwidth=downloaded / max(elapsed, MIN_ELAPSED_SECONDS),
        ttfb=ttfb_total / concurrency,
    )


__all__ = ["ChunkAccumulator", "run_chunks"]
