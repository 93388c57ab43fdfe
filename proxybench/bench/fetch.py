"""Timed fetch unit: one bounded HTTP GET through a proxy dialer.

``fetch_through_proxy`` never raises. Dial errors, timeouts, non-success
statuses and empty bodies all become a failed ``FetchOutcome`` so that callers
can fold outcomes without exception handling.
"""

import logging
import threading
import time
from typing import Callable

import requests

from proxybench.bench.models import FetchOutcome
from proxybench.network.dialers import AbortableDialer, Dialer
from proxybench.network.transport import build_session

LOGGER = logging.getLogger(__name__)

DOWNLOAD_CHUNK_BYTES = 64 * 1024
SIZE_PLACEHOLDER = "%d"


def build_liveness_url(template: str, size_bytes: int) -> str:
    """Substitute ``size_bytes`` into the template's ``%d`` placeholder.

    A template without a placeholder is a fixed payload URL and is returned
    unchanged.
    """
    if SIZE_PLACEHOLDER not in template:
        return template
    return template.replace(SIZE_PLACEHOLDER, str(int(size_bytes)), 1)


def fetch_through_proxy(
    dialer: Dialer,
    size_bytes: int,
    timeout: float,
    url_template: str,
    *,
    session_factory: Callable[[Dialer], requests.Session] = build_session,
    clock: Callable[[], float] = time.perf_counter,
) -> FetchOutcome:
    """Download one payload through ``dialer`` and time it.

    Args:
        dialer: Proxy dialing capability.
        size_bytes: Requested payload size, substituted into ``url_template``.
        timeout: Overall deadline in seconds for connect plus full body read.
        url_template: Liveness object URL with a single ``%d`` placeholder.
        session_factory: Builds the HTTP session bound to ``dialer``.
        clock: Monotonic clock in seconds.

    Returns:
        A ``FetchOutcome``; ``success`` is True only for a 2xx-ish response
        with a non-empty body read within the deadline.
    """
    url = build_liveness_url(url_template, size_bytes)
    guarded = AbortableDialer(dialer)
    # Hard wall-clock limit: socket reads only time out between bytes
    watchdog = threading.Timer(timeout, guarded.abort)
    watchdog.daemon = True
    deadline_error = f"deadline of {timeout:.2f}s exceeded"

    start = clock()
    deadline = start + timeout
    watchdog.start()
    try:
        with session_factory(guarded) as session:
            with session.get(url, stream=True, timeout=timeout) as response:
                ttfb = clock() - start
                if response.status_code - 200 > 100:
                    return FetchOutcome.failed(f"HTTP {response.status_code}")

                written = 0
                for chunk in response.iter_content(chunk_size=DOWNLOAD_CHUNK_BYTES):
                    written += len(chunk)
                    if clock() > deadline:
                        return FetchOutcome.failed(deadline_error)
                download_seconds = clock() - start - ttfb
    except Exception as exc:  # noqa: BLE001 - every transport failure is a failed chunk
        if guarded.aborted:
            return FetchOutcome.failed(deadline_error)
        LOGGER.debug("Fetch of %s failed: %s", url, exc)
        return FetchOutcome.failed(str(exc))
    finally:
        watchdog.cancel()

    if guarded.aborted:
        # A body without Content-Length ends quietly when its socket is cut
        return FetchOutcome.failed(deadline_error)
    if written == 0:
        return FetchOutcome.failed("empty response body")

    return FetchOutcome(
        bytes_transferred=written,
        ttfb=ttfb,
        success=True,
        download_seconds=download_seconds,
    )


__all__ = ["DOWNLOAD_CHUNK_BYTES", "build_liveness_url", "fetch_through_proxy"]
