"""Console table for benchmark results.

Rows are color-coded by bandwidth: red below 1 MiB/s (including unavailable
results), green above 10 MiB/s.
"""

import sys
from typing import Iterable, Optional, Sequence, TextIO

from proxybench.bench.models import Result
from proxybench.formatting import format_bandwidth, format_name, format_ttfb

RED = "\033[31m"
GREEN = "\033[32m"
RESET = "\033[0m"

SLOW_BANDWIDTH = 1024 * 1024
FAST_BANDWIDTH = 10 * 1024 * 1024

HEADER = ("Proxy", "Bandwidth", "TTFB")


def _row(color: str, name: str, bandwidth: str, ttfb: str) -> str:
    line = f"{name:<42}\t{bandwidth:<12}\t{ttfb:<12}"
    return f"{color}{line}{RESET}" if color else line


def color_for(result: Result) -> str:
    if result.bandwidth is None or result.bandwidth < SLOW_BANDWIDTH:
        return RED
    if result.bandwidth > FAST_BANDWIDTH:
        return GREEN
    return ""


def print_header(stream: Optional[TextIO] = None) -> None:
    print(_row("", *HEADER), file=stream or sys.stdout)


def print_result(result: Result, stream: Optional[TextIO] = None) -> None:
    print(
        _row(
            color_for(result),
            format_name(result.name),
            format_bandwidth(result.bandwidth),
            format_ttfb(result.ttfb),
        ),
        file=stream or sys.stdout,
        flush=True,
    )


def print_table(results: Iterable[Result], title: Optional[str] = None, stream: Optional[TextIO] = None) -> None:
    out = stream or sys.stdout
    if title:
        print(f"\n\n=== {title} ===", file=out)
    print_header(out)
    for result in results:
        print_result(result, out)


def print_skipped(names: Sequence[str], stream: Optional[TextIO] = None) -> None:
    """Tell the operator how many selected proxies could not be tested."""
    if not names:
        return
    print(
        f"\nSkipped {len(names)} selected proxies with no dialer (only plain socks5 and http proxies are testable)",
        file=stream or sys.stdout,
    )


__all__ = ["color_for", "print_header", "print_result", "print_skipped", "print_table"]
