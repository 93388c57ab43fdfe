"""Benchmark driver: test each selected proxy in turn and collect Results."""

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

from proxybench.bench import Result, run_chunks
from proxybench.directory import ProxyDirectory, ProxyKind
from proxybench.errors import ConfigurationError, UnsupportedProxyTypeError
from proxybench.logging_utils import perf, perf_span
from proxybench.ranking import SORT_BANDWIDTH

LOGGER = logging.getLogger(__name__)

DEFAULT_LIVENESS_URL = "https://speed.cloudflare.com/__down?bytes=%d"
DEFAULT_DOWNLOAD_SIZE = 100 * 1024 * 1024


@dataclass(frozen=True)
class BenchmarkConfig:
    liveness_url: str = DEFAULT_LIVENESS_URL
    download_size: int = DEFAULT_DOWNLOAD_SIZE
    timeout_seconds: float = 5.0
    concurrency: int = 4
    filter_pattern: str = ".*"
    sort_field: str = SORT_BANDWIDTH

    def __post_init__(self) -> None:
        if self.download_size <= 0:
            raise ConfigurationError("download size must be positive")
        if self.timeout_seconds <= 0:
            raise ConfigurationError("timeout must be positive")
        if not self.liveness_url:
            raise ConfigurationError("liveness URL must be provided")


@perf("jobs.run_all", tags={"component": "jobs"})
def run_all(
    names: Sequence[str],
    directory: ProxyDirectory,
    config: BenchmarkConfig,
    *,
    progress: Optional[Callable[[Result], None]] = None,
    scheduler: Callable[..., Result] = run_chunks,
) -> List[Result]:
    """Benchmark ``names`` one proxy at a time, in the given order.

    Routing proxies (groups, direct, reject) are skipped silently. Names the
    directory does not know and leaf proxies without a dialer are skipped with
    a warning.

    Raises:
        UnsupportedProxyTypeError: When a proxy has an unrecognized type.
    """
    results: List[Result] = []
    skipped = 0

    for name in names:
        kind = directory.type_of(name)
        if kind is None:
            LOGGER.warning("Proxy %s not found in directory, skipped", name)
            skipped += 1
            continue
        if kind is ProxyKind.ROUTING:
            LOGGER.debug("Proxy %s is a routing proxy, skipped", name)
            continue
        if kind is ProxyKind.UNKNOWN:
            entry = directory.entry(name)
            raise UnsupportedProxyTypeError(name, entry.proxy_type if entry else "?")

        dialer = directory.resolve(name)
        if dialer is None:
            LOGGER.warning("No dialer available for proxy %s, skipped", name)
            skipped += 1
            continue

        with perf_span("jobs.proxy", tags={"proxy": name}, logger=LOGGER):
            result = scheduler(
                name,
                dialer,
                config.download_size,
                config.timeout_seconds,
                config.concurrency,
                config.liveness_url,
            )
        results.append(result)
        if progress is not None:
            progress(result)

    LOGGER.info(
        "Run summary: tested=%d unavailable=%d skipped=%d",
        len(results),
        sum(1 for r in results if not r.available),
        skipped,
    )
    return results


__all__ = ["BenchmarkConfig", "DEFAULT_LIVENESS_URL", "run_all"]
