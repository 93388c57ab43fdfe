"""Name selection and result ranking.

Functions:
    compile_filter(pattern): Compile a name filter, raising ConfigurationError.
    select_names(all_names, pattern): Matching names, sorted ascending.
    normalize_sort_field(field): Resolve ``b``/``t`` aliases.
    rank(results, field): Stable sort by bandwidth (desc) or TTFB (asc).
"""

import logging
import math
import re
from typing import Callable, Dict, Iterable, List, Pattern

from proxybench.bench.models import Result
from proxybench.errors import ConfigurationError

LOGGER = logging.getLogger(__name__)

SORT_BANDWIDTH = "bandwidth"
SORT_TTFB = "ttfb"

_SORT_ALIASES = {
    "b": SORT_BANDWIDTH,
    SORT_BANDWIDTH: SORT_BANDWIDTH,
    "t": SORT_TTFB,
    SORT_TTFB: SORT_TTFB,
}


def _bandwidth_key(result: Result) -> float:
    # Negated for a descending order; unavailable results go last.
    return -result.bandwidth if result.bandwidth is not None else math.inf


def _ttfb_key(result: Result) -> float:
    return result.ttfb if result.ttfb is not None else math.inf


_SORT_KEYS: Dict[str, Callable[[Result], float]] = {
    SORT_BANDWIDTH: _bandwidth_key,
    SORT_TTFB: _ttfb_key,
}


def compile_filter(pattern: str) -> Pattern[str]:
    """Compile a name filter regex.

    Raises:
        ConfigurationError: If ``pattern`` is not a valid regular expression.
    """
    try:
        return re.compile(pattern)
    except re.error as exc:
        raise ConfigurationError(f"Invalid filter pattern {pattern!r}: {exc}") from exc


def select_names(all_names: Iterable[str], pattern: str) -> List[str]:
    """Return the names matching ``pattern`` (search semantics), sorted."""
    name_filter = compile_filter(pattern)
    selected = sorted(name for name in all_names if name_filter.search(name))
    LOGGER.info("Filter %r selected %d proxies", pattern, len(selected))
    return selected


def normalize_sort_field(field: str) -> str:
    """Return the canonical sort field for ``field``.

    Raises:
        ConfigurationError: For anything other than bandwidth/b or ttfb/t.
    """
    canonical = _SORT_ALIASES.get((field or "").strip().lower())
    if canonical is None:
        raise ConfigurationError(f"Unsupported sort field: {field!r}")
    return canonical


def rank(results: Iterable[Result], field: str) -> List[Result]:
    """Return ``results`` sorted by ``field``; ties keep their input order."""
    key = _SORT_KEYS[normalize_sort_field(field)]
    return sorted(results, key=key)


__all__ = [
    "SORT_BANDWIDTH",
    "SORT_TTFB",
    "compile_filter",
    "normalize_sort_field",
    "rank",
    "select_names",
]
