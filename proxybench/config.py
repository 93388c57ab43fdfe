"""Configuration utilities for proxy benchmark runs.

This module reads environment variables (optionally from an `.env` file in the
current working directory) and produces the ambient application configuration
consumed across the project.
Per-run measurement parameters are not read here; the CLI captures them into
``proxybench.jobs.BenchmarkConfig``.

Supported keys: `LOG_DIR` (relative paths resolve against the working
directory), `LOG_LEVEL`, `APP_NAME`, `PROXYBENCH_USER_AGENT`
and `PROXYBENCH_EXCLUDED_CIPHERS` (comma-separated).

Usage example:

    from proxybench.config import load_config

    config = load_config()
    configure_logging(config)
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Mapping, MutableMapping, Optional, Tuple

ENV_FILE_NAME = ".env"
DEFAULT_LOG_DIR = "logs"

DEFAULT_USER_AGENT = "clash.meta"
DEFAULT_EXCLUDED_CIPHERS: Tuple[str, ...] = ("aes-128-gcm",)


def _load_env_file(path: Path) -> Dict[str, str]:
    """Parse a dotenv-style file into a dictionary."""
    if not path.exists():
        return {}

    data: Dict[str, str] = {}
    for raw_line in path.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        data[key.strip()] = value.strip().strip("\"'")
    return data


def _merge_envs(dotenv_values: Mapping[str, str], env: MutableMapping[str, str]) -> Dict[str, str]:
    """Merge dotenv values with the current environment, preferring os.environ."""
    merged = dict(dotenv_values)
    merged.update(env)  # os.environ wins
    return merged


def load_environment(env_file: Optional[Path] = None) -> Dict[str, str]:
    """Return the dotenv file merged with ``os.environ``."""
    target_file = env_file or Path.cwd() / ENV_FILE_NAME
    return _merge_envs(_load_env_file(target_file), os.environ)


def _parse_cipher_list(raw: Optional[str]) -> Tuple[str, ...]:
    if raw is None:
        return DEFAULT_EXCLUDED_CIPHERS
    return tuple(part.strip().lower() for part in raw.split(",") if part.strip())


@dataclass(frozen=True)
class AppConfig:
    """Application-level configuration values."""

    log_directory: Path
    log_level: str
    app_name: str = "proxybench"
    user_agent: str = DEFAULT_USER_AGENT
    excluded_ciphers: Tuple[str, ...] = DEFAULT_EXCLUDED_CIPHERS


def load_config(env_file: Optional[Path] = None) -> AppConfig:
    """Load configuration values using environment defaults."""
    merged = load_environment(env_file)

    log_directory = Path(merged.get("LOG_DIR", DEFAULT_LOG_DIR)).expanduser()
    if not log_directory.is_absolute():
        log_directory = Path.cwd() / log_directory

    log_level = merged.get("LOG_LEVEL", "INFO").upper()

    return AppConfig(
        log_directory=log_directory,
        log_level=log_level,
        app_name=merged.get("APP_NAME", "proxybench"),
        user_agent=merged.get("PROXYBENCH_USER_AGENT") or DEFAULT_USER_AGENT,
        excluded_ciphers=_parse_cipher_list(merged.get("PROXYBENCH_EXCLUDED_CIPHERS")),
    )


__all__ = [
    "AppConfig",
    "DEFAULT_EXCLUDED_CIPHERS",
    "DEFAULT_USER_AGENT",
    "DEFAULT_LOG_DIR",
    "ENV_FILE_NAME",
    "load_config",
    "load_environment",
]
