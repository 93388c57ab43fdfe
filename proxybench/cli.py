"""Command-line interface for benchmarking a proxy list."""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional, Sequence

from proxybench.bench import Result
from proxybench.config import load_config
from proxybench.directory import ProxyDirectory
from proxybench.errors import ConfigurationError
from proxybench.export import write_csv, write_yaml
from proxybench.jobs import DEFAULT_LIVENESS_URL, BenchmarkConfig, run_all
from proxybench.logging_utils import configure_logging, perf_span
from proxybench.ranking import compile_filter, normalize_sort_field, rank, select_names
from proxybench.report import print_header, print_result, print_skipped, print_table

LOGGER = logging.getLogger(__name__)

OUTPUT_FORMATS = ("csv", "yaml")


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Measure TTFB and download bandwidth through every proxy of a Clash-style config.",
    )
    parser.add_argument(
        "-l",
        "--liveness-url",
        default=DEFAULT_LIVENESS_URL,
        help="Liveness object URL; %%d is replaced by the chunk size in bytes.",
    )
    parser.add_argument(
        "-c",
        "--config",
        default="",
        help="Config file path(s) or http(s) URL(s), comma-separated.",
    )
    parser.add_argument(
        "-f",
        "--filter",
        default=".*",
        help="Regular expression selecting proxies by name (default: .*).",
    )
    parser.add_argument(
        "--size",
        type=int,
        default=100 * 1024 * 1024,
        help="Download size per proxy in bytes (default: 100 MiB).",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=5.0,
        help="Per-chunk deadline in seconds (default: 5.0).",
    )
    parser.add_argument(
        "--sort",
        default="b",
        help="Sort field: b/bandwidth or t/ttfb (default: b).",
    )
    parser.add_argument(
        "--output",
        type=str.lower,
        choices=OUTPUT_FORMATS,
        default=None,
        help="Write results to a csv or yaml file.",
    )
    parser.add_argument(
        "--concurrent",
        type=int,
        default=4,
        help="Parallel chunk downloads per proxy (default: 4).",
    )
    parser.add_argument(
        "--outfile",
        default="result",
        help="Output file name without extension (default: result).",
    )
    parser.add_argument(
        "--bandwidth-threshold",
        type=float,
        default=-0.1,
        help="Omit proxies at or below this bandwidth (bytes/s) from yaml output (default: -0.1).",
    )
    return parser.parse_args(argv)


def build_benchmark_config(args: argparse.Namespace) -> BenchmarkConfig:
    """Capture the run parameters once, validating them up-front."""
    compile_filter(args.filter)
    return BenchmarkConfig(
        liveness_url=args.liveness_url,
        download_size=args.size,
        timeout_seconds=args.timeout,
        concurrency=args.concurrent,
        filter_pattern=args.filter,
        sort_field=normalize_sort_field(args.sort),
    )


def export_results(
    output: Optional[str],
    outfile: str,
    results: List[Result],
    directory: ProxyDirectory,
    threshold: float,
) -> Optional[Path]:
    if output == "yaml":
        return write_yaml(f"{outfile}.yaml", results, directory, threshold)
    if output == "csv":
        return write_csv(f"{outfile}.csv", results)
    return None


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    config = load_config()
    try:
        configure_logging(config)
    except OSError as exc:
        # No log handlers exist yet
        print(f"Failed to set up logging in {config.log_directory}: {exc}", file=sys.stderr)
        return 1

    try:
        bench_config = build_benchmark_config(args)
        directory = ProxyDirectory.from_sources(args.config, app_config=config)
        names = select_names(directory.all_names(), bench_config.filter_pattern)

        with perf_span(
            "bench.total",
            tags={"proxies": len(names), "concurrency": bench_config.concurrency},
            logger=LOGGER,
        ):
            print_header()
            results = run_all(names, directory, bench_config, progress=print_result)
    except ConfigurationError as exc:
        LOGGER.error("Fatal configuration error: %s", exc)
        return 1

    ranked = rank(results, bench_config.sort_field)
    print_table(ranked, title=f"Results sorted by {bench_config.sort_field}")
    print_skipped(directory.undialable(names))

    try:
        export_results(args.output, args.outfile, ranked, directory, args.bandwidth_threshold)
    except OSError as exc:
        LOGGER.error("Failed to write %s output: %s", args.output, exc)
        return 1
    return 0


__all__ = ["build_benchmark_config", "export_results", "main", "parse_args"]
