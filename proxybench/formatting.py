"""Human-readable rendering of benchmark metrics and proxy names."""

import re
from typing import Optional

NOT_AVAILABLE = "N/A"

_BANDWIDTH_UNITS = ("B/s", "KB/s", "MB/s", "GB/s", "TB/s")

_EMOJI_RE = re.compile(
    "["
    "\U0001F600-\U0001F64F"  # emoticons
    "\U0001F300-\U0001F5FF"  # symbols & pictographs
    "\U0001F680-\U0001F6FF"  # transport & map
    "\U0001F900-\U0001F9FF"  # supplemental symbols
    "\U0001F1E0-\U0001F1FF"  # regional indicators (flags)
    "\u2600-\u26FF"  # misc symbols
    "\u2700-\u27BF"  # dingbats
    "\uFE0F"  # emoji presentation selector
    "]"
)
_SPACE_RUN_RE = re.compile(r"\s{2,}")


def format_bandwidth(value: Optional[float]) -> str:
    """Format bytes/second with 1024-based units and two decimals."""
    if value is None or value <= 0:
        return NOT_AVAILABLE
    for unit in _BANDWIDTH_UNITS[:-1]:
        if value < 1024:
            return f"{value:.2f}{unit}"
        value /= 1024
    return f"{value:.2f}{_BANDWIDTH_UNITS[-1]}"


def format_ttfb(seconds: Optional[float]) -> str:
    """Format a TTFB in seconds as milliseconds with two decimals."""
    if seconds is None or seconds <= 0:
        return NOT_AVAILABLE
    return f"{seconds * 1000:.2f}ms"


def format_name(name: str) -> str:
    """Strip emoji, collapse whitespace runs and trim, for display only."""
    without_emoji = _EMOJI_RE.sub("", name)
    return _SPACE_RUN_RE.sub(" ", without_emoji).strip()


__all__ = ["NOT_AVAILABLE", "format_bandwidth", "format_name", "format_ttfb"]
