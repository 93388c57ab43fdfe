"""Value types produced by the benchmark engine."""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class FetchOutcome:
    """Result of one timed fetch through a proxy.

    Attributes:
        bytes_transferred: Body bytes read; 0 whenever ``success`` is False.
        ttfb: Seconds from request start to response headers, None when unmeasured.
        success: Whether the fetch counts towards the proxy's aggregate.
        download_seconds: Body read time after the first byte.
        error: Optional failure description for logs.
    """

    bytes_transferred: int
    ttfb: Optional[float]
    success: bool
    download_seconds: float = 0.0
    error: Optional[str] = None

    @classmethod
    def failed(cls, error: Optional[str] = None) -> "FetchOutcome":
        return cls(bytes_transferred=0, ttfb=None, success=False, error=error)


@dataclass(frozen=True)
class Result:
    """Per-proxy aggregate.

    ``bandwidth`` is bytes per second and ``ttfb`` is seconds. ``None`` marks a
    metric as unavailable; both metrics are either available or unavailable
    together.
    """

    name: str
    bandwidth: Optional[float]
    ttfb: Optional[float]

    def __post_init__(self) -> None:
        if (self.bandwidth is None) != (self.ttfb is None):
            raise ValueError("bandwidth and ttfb must both be set or both be unavailable")

    @property
    def available(self) -> bool:
        return self.bandwidth is not None

    @classmethod
    def unavailable(cls, name: str) -> "Result":
        return cls(name=name, bandwidth=None, ttfb=None)


__all__ = ["FetchOutcome", "Result"]
