"""Write ranked results to disk.

Two encodings are supported:

- YAML: the raw configuration of every proxy that produced a usable result
  above the bandwidth threshold, in ranked order, named as in the directory
  (provider proxies keep their `[provider] ` prefix). The output is a plain
  list of proxy entries and can be fed back as a config source.
- CSV: one row per tested proxy (no threshold), preceded by a UTF-8 BOM so
  spreadsheet tools pick the right encoding.
"""

import csv
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Union

import yaml

from proxybench.bench.models import Result
from proxybench.directory import ProxyDirectory
from proxybench.formatting import NOT_AVAILABLE

LOGGER = logging.getLogger(__name__)

UTF8_BOM = "\ufeff"
CSV_HEADER = ("name", "bandwidth (MB/s)", "ttfb (ms)")
BYTES_PER_MB = 1024 * 1024

PathLike = Union[str, Path]


def select_configs(
    results: Iterable[Result],
    directory: ProxyDirectory,
    threshold: float,
) -> List[Dict[str, Any]]:
    """Raw configs to re-emit, in result order.

    Unavailable results and results with ``bandwidth <= threshold`` (bytes/s)
    are omitted, as are names the directory has no configuration for.
    """
    selected: List[Dict[str, Any]] = []
    for result in results:
        if not result.available or result.bandwidth <= threshold:
            continue
        config = directory.raw_config(result.name)
        if config is None:
            continue
        # Provider entries are ranked as "[provider] name"; keep that on reload
        config["name"] = result.name
        selected.append(config)
    return selected


def write_yaml(
    path: PathLike,
    results: Iterable[Result],
    directory: ProxyDirectory,
    threshold: float,
) -> Path:
    target = Path(path)
    configs = select_configs(results, directory, threshold)
    with target.open("w", encoding="utf-8") as fp:
        yaml.safe_dump(configs, fp, allow_unicode=True, sort_keys=False)
    LOGGER.info("Wrote %d proxy configs to %s", len(configs), target)
    return target


def _csv_row(result: Result) -> List[str]:
    if not result.available:
        return [result.name, NOT_AVAILABLE, NOT_AVAILABLE]
    return [
        result.name,
        f"{result.bandwidth / BYTES_PER_MB:.2f}",
        str(int(result.ttfb * 1000)),
    ]


def write_csv(path: PathLike, results: Iterable[Result]) -> Path:
    target = Path(path)
    rows = [_csv_row(result) for result in results]
    with target.open("w", encoding="utf-8", newline="") as fp:
        fp.write(UTF8_BOM)
        writer = csv.writer(fp)
        writer.writerow(CSV_HEADER)
        writer.writerows(rows)
    LOGGER.info("Wrote %d result rows to %s", len(rows), target)
    return target


__all__ = ["CSV_HEADER", "UTF8_BOM", "select_configs", "write_csv", "write_yaml"]
