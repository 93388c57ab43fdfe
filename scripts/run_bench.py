#!/usr/bin/env python3
"""Command-line entrypoint for benchmarking a proxy list."""

from proxybench.cli import main

if __name__ == "__main__":  # pragma: no cover - script entrypoint
    raise SystemExit(main())
